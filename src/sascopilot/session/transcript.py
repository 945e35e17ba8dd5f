"""
Transcript log manager.

Appends one human-readable block per completed turn to a log file under the
configured directory. The target file is chosen once per process according to
the logging mode:

- rotate:    a new ``session_<timestamp>.log`` for every run
- append:    one ``<filename>`` reused across runs
- overwrite: ``<filename>``, emptied on first use in each run

Writes are best-effort. Failures are reported to the diagnostic logger and
never reach the chat session.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from sascopilot.config import LoggingSettings, LogMode
from sascopilot.logger import get_logger

logger = get_logger(__name__)

LOG_EXTENSION = ".log"
ENTRY_DIVIDER = "━" * 46


@dataclass(frozen=True)
class LogEntry:
    """One completed turn."""

    persona: str
    input: str
    response: str
    timestamp: datetime = field(default_factory=datetime.now)


def format_entry(entry: LogEntry) -> str:
    """Render an entry as a divider-delimited block."""
    when = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"\n{ENTRY_DIVIDER}\n"
        f"🧑   Persona: {entry.persona}\n"
        f"⏰      Time: {when}\n"
        f"🔹      User: {entry.input.strip()}\n"
        f"🔸 Assistant: {entry.response.strip()}\n"
        f"{ENTRY_DIVIDER}\n"
    )


class TranscriptLog:
    """Resolves the transcript file lazily and appends entries to it."""

    def __init__(
        self,
        settings: Optional[LoggingSettings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or LoggingSettings()
        self._clock = clock
        self._path: Optional[Path] = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    @property
    def path(self) -> Optional[Path]:
        """The resolved log path, or None before the first write."""
        return self._path

    def resolve_path(self) -> Path:
        """Return the log path, choosing and preparing it on first call.

        Raises:
            OSError: If the directory cannot be created or the file truncated
        """
        if self._path is not None:
            return self._path

        with self._lock:
            if self._path is None:
                self._path = self._prepare()
                logger.debug(
                    f"Transcript log resolved to {self._path} "
                    f"(mode={self.settings.mode.value})"
                )
        return self._path

    def _prepare(self) -> Path:
        log_dir = Path(self.settings.directory).resolve()
        log_dir.mkdir(parents=True, exist_ok=True)

        mode = self.settings.mode
        if mode == LogMode.ROTATE:
            return self._rotated_path(log_dir)

        path = log_dir / self.settings.filename
        if mode == LogMode.OVERWRITE:
            path.write_text("", encoding="utf-8")
        return path

    def _rotated_path(self, log_dir: Path) -> Path:
        stamp = self._clock().isoformat(timespec="milliseconds")
        stamp = stamp.replace(":", "-").replace(".", "-")
        base = f"session_{stamp}"

        path = log_dir / f"{base}{LOG_EXTENSION}"
        idx = 1
        while path.exists():
            path = log_dir / f"{base}_{idx}{LOG_EXTENSION}"
            idx += 1
        # Claim the name so a concurrent run picks the next suffix
        path.touch()
        return path

    def record(self, entry: LogEntry) -> Optional[Path]:
        """
        Append an entry to the transcript.

        Args:
            entry: The completed turn

        Returns:
            The file written to, or None if logging is disabled or failed
        """
        if not self.enabled:
            return None

        try:
            path = self.resolve_path()
            with open(path, "a", encoding="utf-8", errors="replace") as f:
                f.write(format_entry(entry))
        except Exception as e:
            logger.error(f"Failed to write transcript entry: {e}")
            return None
        return path
