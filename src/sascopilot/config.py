"""
Runtime configuration.

Values come from environment variables (optionally loaded from a ``.env`` file
by the CLI). Parsing is lenient: malformed numbers fall back to defaults
instead of aborting startup.
"""

import os
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from sascopilot.logger import get_logger
from sascopilot.personas import DEFAULT_PERSONA, DEFAULT_PERSONAS

logger = get_logger(__name__)

DEFAULT_MODEL = "gpt-5-mini"
DEFAULT_TEMPERATURE = 0.4
DEFAULT_RETENTION_DAYS = 7
DEFAULT_EXIT_COMMANDS = ["exit", "quit", "q", ":q"]


class LogMode(str, Enum):
    """How the transcript file is chosen on each process start."""

    ROTATE = "rotate"
    APPEND = "append"
    OVERWRITE = "overwrite"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LogMode":
        if not value:
            return cls.ROTATE
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown LOGGING_MODE {value!r}, falling back to append")
            return cls.APPEND


class LoggingSettings(BaseModel):
    enabled: bool = True
    mode: LogMode = LogMode.ROTATE
    directory: str = "logs"
    filename: str = "session.log"
    retention_days: int = DEFAULT_RETENTION_DAYS
    retention_minutes: int = 0


class Settings(BaseModel):
    """Complete application configuration."""

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    mock_enabled: bool = False
    personas: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PERSONAS))
    default_persona: str = DEFAULT_PERSONA
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    exit_commands: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXIT_COMMANDS)
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        logging_settings = LoggingSettings(
            enabled=env.get("LOGGING_ENABLED", "").strip().lower() != "false",
            mode=LogMode.parse(env.get("LOGGING_MODE")),
            directory=env.get("LOGGING_DIR") or "logs",
            filename=env.get("LOGGING_FILENAME") or "session.log",
            retention_days=_parse_int(
                env.get("LOG_RETENTION_DAYS"), DEFAULT_RETENTION_DAYS
            ),
            retention_minutes=_parse_int(env.get("LOG_RETENTION_MINUTES"), 0),
        )

        exit_commands = [
            token.strip()
            for token in (env.get("OPENAI_EXIT_COMMANDS") or "").split(",")
            if token.strip()
        ] or list(DEFAULT_EXIT_COMMANDS)

        return cls(
            api_key=env.get("OPENAI_API_KEY") or None,
            model=env.get("OPENAI_MODEL") or DEFAULT_MODEL,
            temperature=_parse_float(
                env.get("OPENAI_TEMPERATURE"), DEFAULT_TEMPERATURE
            ),
            mock_enabled=env.get("OPENAI_MOCK", "").strip().lower() == "true",
            default_persona=env.get("OPENAI_PERSONA") or DEFAULT_PERSONA,
            logging=logging_settings,
            exit_commands=exit_commands,
        )


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip(), 10)
    except ValueError:
        logger.warning(f"Ignoring non-integer value {raw!r}, using {default}")
        return default


def _parse_float(raw: Optional[str], default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        logger.warning(f"Ignoring non-numeric value {raw!r}, using {default}")
        return default
