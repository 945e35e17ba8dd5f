"""
Retention pruning for transcript logs.

Runs independently of any chat session. Only files directly inside the log
directory with the log extension are considered.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from sascopilot.config import DEFAULT_RETENTION_DAYS
from sascopilot.logger import get_logger
from sascopilot.session.transcript import LOG_EXTENSION

logger = get_logger(__name__)


@dataclass
class PruneResult:
    """Outcome of a pruning pass."""

    directory: Path
    deleted: list[Path] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)
    missing_directory: bool = False

    @property
    def count(self) -> int:
        return len(self.deleted)


def resolve_threshold(
    minutes: Optional[int] = None,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Compute the cutoff instant for pruning.

    Minutes win over days when positive; days win over the 7 day default when
    positive. Zero or negative values count as unset.
    """
    now = now or datetime.now()
    if minutes and minutes > 0:
        return now - timedelta(minutes=minutes)
    if days and days > 0:
        return now - timedelta(days=days)
    return now - timedelta(days=DEFAULT_RETENTION_DAYS)


def prune_logs(
    directory: Path, threshold: datetime, extension: str = LOG_EXTENSION
) -> PruneResult:
    """Delete log files in ``directory`` last modified before ``threshold``."""
    directory = Path(directory)
    result = PruneResult(directory=directory)

    if not directory.is_dir():
        logger.warning(f"Log directory not found: {directory}")
        result.missing_directory = True
        return result

    cutoff = threshold.timestamp()
    for path in sorted(directory.glob(f"*{extension}")):
        try:
            if not path.is_file() or path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Could not delete {path}: {e}")
            result.errors.append((path, str(e)))
            continue
        result.deleted.append(path)

    logger.info(
        f"Pruned {result.count} log file(s) older than {threshold:%Y-%m-%d %H:%M} "
        f"from {directory}"
    )
    return result
