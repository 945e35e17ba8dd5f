"""Shared pytest fixtures and configuration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sascopilot.config import LoggingSettings, LogMode
from sascopilot.personas import DEFAULT_PERSONAS, PersonaRegistry
from sascopilot.session.transcript import TranscriptLog


@pytest.fixture
def registry():
    """Registry with the built-in personas and `sas` as default."""
    return PersonaRegistry.from_prompts(DEFAULT_PERSONAS, default="sas")


@pytest.fixture
def client():
    """Completion client returning a fixed answer."""
    mock = AsyncMock()
    mock.complete.return_value = "A join combines rows.\n```sql\nSELECT 1;\n```"
    return mock


@pytest.fixture
def renderer():
    return MagicMock()


@pytest.fixture
def log_settings(tmp_path):
    """Append-mode logging into a temporary directory."""
    return LoggingSettings(
        mode=LogMode.APPEND, directory=str(tmp_path / "logs"), filename="session.log"
    )


@pytest.fixture
def transcript(log_settings):
    return TranscriptLog(log_settings)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the settings loader reads."""
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_TEMPERATURE",
        "OPENAI_MOCK",
        "OPENAI_PERSONA",
        "OPENAI_EXIT_COMMANDS",
        "LOGGING_ENABLED",
        "LOGGING_MODE",
        "LOGGING_DIR",
        "LOGGING_FILENAME",
        "LOG_RETENTION_DAYS",
        "LOG_RETENTION_MINUTES",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
