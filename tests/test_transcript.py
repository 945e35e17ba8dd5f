"""Tests for transcript log file selection and appending."""

import threading
from datetime import datetime
from unittest.mock import patch

import pytest
from loguru import logger

from sascopilot.config import LoggingSettings, LogMode
from sascopilot.session.transcript import LogEntry, TranscriptLog, format_entry


def fixed_clock():
    return datetime(2026, 10, 18, 9, 30, 15, 123000)


def make_settings(tmp_path, mode, **kwargs):
    return LoggingSettings(
        mode=mode, directory=str(tmp_path / "logs"), filename="session.log", **kwargs
    )


@pytest.fixture
def entry():
    return LogEntry(
        persona="sql",
        input="  what is a join \n",
        response="\nA join combines rows from two tables.  ",
        timestamp=datetime(2026, 10, 18, 9, 31, 0),
    )


@pytest.fixture
def error_messages():
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="ERROR")
    yield messages
    logger.remove(handler_id)


class TestFormat:
    def test_fields_in_order_and_trimmed(self, entry):
        block = format_entry(entry)
        persona_at = block.index("Persona: sql")
        time_at = block.index("Time: 2026-10-18 09:31:00")
        input_at = block.index("User: what is a join\n")
        response_at = block.index("Assistant: A join combines rows from two tables.\n")
        assert persona_at < time_at < input_at < response_at

    def test_block_is_delimited(self, entry):
        lines = format_entry(entry).strip("\n").splitlines()
        assert lines[0] == lines[-1]
        assert set(lines[0]) == {"━"}


class TestModes:
    def test_append_round_trip(self, tmp_path, entry):
        settings = make_settings(tmp_path, LogMode.APPEND)
        path = TranscriptLog(settings).record(entry)

        text = path.read_text(encoding="utf-8")
        assert path == (tmp_path / "logs" / "session.log").resolve()
        assert text.index("sql") < text.index("what is a join") < text.index(
            "A join combines rows"
        )

    def test_append_keeps_previous_runs(self, tmp_path, entry):
        settings = make_settings(tmp_path, LogMode.APPEND)
        TranscriptLog(settings).record(entry)
        path = TranscriptLog(settings).record(entry)
        assert path.read_text(encoding="utf-8").count("Persona: sql") == 2

    def test_overwrite_truncates_once_per_run(self, tmp_path, entry):
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        (log_dir / "session.log").write_text("previous run\n", encoding="utf-8")

        transcript = TranscriptLog(make_settings(tmp_path, LogMode.OVERWRITE))
        path = transcript.resolve_path()
        assert path.read_text(encoding="utf-8") == ""

        transcript.record(entry)
        transcript.record(entry)
        text = path.read_text(encoding="utf-8")
        assert "previous run" not in text
        assert text.count("Persona: sql") == 2

    def test_rotate_gives_distinct_paths_per_run(self, tmp_path, entry):
        settings = make_settings(tmp_path, LogMode.ROTATE)
        first = TranscriptLog(settings, clock=fixed_clock).record(entry)
        second = TranscriptLog(settings, clock=fixed_clock).record(entry)

        assert first != second
        assert first.name == "session_2026-10-18T09-30-15-123.log"
        assert second.name == "session_2026-10-18T09-30-15-123_1.log"
        assert first.read_text(encoding="utf-8").count("Persona: sql") == 1

    def test_rotate_reuses_path_within_run(self, tmp_path, entry):
        transcript = TranscriptLog(make_settings(tmp_path, LogMode.ROTATE))
        assert transcript.record(entry) == transcript.record(entry)


class TestResolution:
    def test_lazy_until_first_write(self, tmp_path):
        transcript = TranscriptLog(make_settings(tmp_path, LogMode.APPEND))
        assert transcript.path is None
        assert not (tmp_path / "logs").exists()

    def test_creates_nested_directory(self, tmp_path, entry):
        settings = LoggingSettings(
            mode=LogMode.APPEND, directory=str(tmp_path / "a" / "b" / "c")
        )
        path = TranscriptLog(settings).record(entry)
        assert path.parent == (tmp_path / "a" / "b" / "c").resolve()

    def test_second_resolution_does_not_truncate(self, tmp_path):
        transcript = TranscriptLog(make_settings(tmp_path, LogMode.OVERWRITE))
        path = transcript.resolve_path()
        path.write_text("kept\n", encoding="utf-8")

        assert transcript.resolve_path() == path
        assert path.read_text(encoding="utf-8") == "kept\n"

    def test_concurrent_first_resolution(self, tmp_path):
        transcript = TranscriptLog(make_settings(tmp_path, LogMode.ROTATE))
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(transcript.resolve_path()))
            for _ in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(results)) == 1
        assert len(list((tmp_path / "logs").glob("*.log"))) == 1


class TestBestEffort:
    def test_disabled_writes_nothing(self, tmp_path, entry):
        settings = make_settings(tmp_path, LogMode.APPEND, enabled=False)
        transcript = TranscriptLog(settings)
        assert transcript.record(entry) is None
        assert not (tmp_path / "logs").exists()

    def test_unwritable_directory_is_reported_not_raised(
        self, tmp_path, entry, error_messages
    ):
        blocker = tmp_path / "logs"
        blocker.write_text("not a directory", encoding="utf-8")

        transcript = TranscriptLog(make_settings(tmp_path, LogMode.APPEND))
        assert transcript.record(entry) is None
        assert transcript.path is None
        assert any("Failed to write transcript entry" in m for m in error_messages)

    def test_unencodable_text_is_replaced(self, tmp_path):
        transcript = TranscriptLog(make_settings(tmp_path, LogMode.APPEND))
        entry = LogEntry(persona="sas", input="bad \udcff byte", response="ok \udcfe")

        path = transcript.record(entry)

        text = path.read_text(encoding="utf-8")
        assert "User: bad ? byte" in text
        assert "Assistant: ok ?" in text

    def test_unexpected_error_is_reported_not_raised(
        self, tmp_path, entry, error_messages
    ):
        transcript = TranscriptLog(make_settings(tmp_path, LogMode.APPEND))
        with patch(
            "sascopilot.session.transcript.format_entry",
            side_effect=ValueError("cannot format"),
        ):
            assert transcript.record(entry) is None
        assert any("cannot format" in m for m in error_messages)
