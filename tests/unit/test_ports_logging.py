"""Unit tests for notification sinks, persistence clients and logging helpers."""

import pytest

from bezierforge.exceptions import PersistenceError
from bezierforge.ports import (
    DirectoryPersistence,
    LoggingNotifier,
    MemoryPersistence,
    RecordingNotifier,
    Severity,
)
from bezierforge.utils.logging import ImportLogger, ImportStats, configure_logging


class TestNotifiers:
    """Tests for notification sinks."""

    def test_recording_notifier(self) -> None:
        """Test messages are kept in order and filterable."""
        notifier = RecordingNotifier()
        assert notifier.last() is None
        notifier.notify("Saved", "ok", Severity.SUCCESS)
        notifier.notify("Oops", "bad", Severity.ERROR)
        notifier.notify("Hint", "fyi")
        assert notifier.titles() == ["Saved", "Oops", "Hint"]
        assert notifier.titles(Severity.ERROR) == ["Oops"]
        assert notifier.last().severity is Severity.INFO
        notifier.clear()
        assert notifier.notifications == []

    @pytest.mark.parametrize("severity", list(Severity))
    def test_logging_notifier_accepts_every_severity(self, severity: Severity) -> None:
        """Test each severity maps to a log method."""
        LoggingNotifier().notify("Title", "Description", severity)


class TestPersistence:
    """Tests for persistence clients."""

    def test_memory_missing_design(self) -> None:
        """Test retrieving an unknown name raises PersistenceError."""
        store = MemoryPersistence()
        with pytest.raises(PersistenceError, match="ghost"):
            store.retrieve("ghost")

    def test_memory_overwrite(self) -> None:
        """Test storing twice under one name keeps the latest."""
        store = MemoryPersistence()
        store.store("a", "[]")
        store.store("a", '{"objects": []}', "<svg/>")
        stored = store.retrieve("a")
        assert stored.design_json == '{"objects": []}'
        assert stored.svg == "<svg/>"
        assert store.names() == ["a"]

    def test_directory_round_trip(self, tmp_path) -> None:
        """Test files are written under a sanitized name."""
        store = DirectoryPersistence(tmp_path / "store")
        assert store.names() == []
        store.store("../Wave #1", "[]")
        assert store.names() == ["Wave_1"]
        stored = store.retrieve("../Wave #1")
        assert stored.design_json == "[]"
        assert stored.svg is None

    def test_directory_missing_design(self, tmp_path) -> None:
        """Test missing files raise PersistenceError."""
        with pytest.raises(PersistenceError):
            DirectoryPersistence(tmp_path).retrieve("absent")


class TestImportLogger:
    """Tests for ImportLogger statistics."""

    def test_counters(self) -> None:
        """Test imported, skipped and failed objects are counted."""
        log = ImportLogger()
        log.log_object_imported("a", 4)
        log.log_object_imported("b", 20, truncated=True)
        log.log_object_skipped("c", "empty")
        log.log_object_error("d", ValueError("bad number"))
        log.log_limit(30, 20)

        stats = log.stats
        assert stats.imported_count == 2
        assert stats.point_count == 24
        assert stats.truncated_objects == 1
        assert stats.skipped_count == 1
        assert stats.error_count == 1
        assert stats.errors == [("d", "bad number")]
        assert stats.dropped_objects == 10
        assert stats.warnings == ["Imported the first 20 of 30 objects"]

    def test_duration(self) -> None:
        """Test duration is zero until both timestamps are set."""
        stats = ImportStats(start_time=10.0)
        assert stats.duration_seconds == 0.0
        stats.end_time = 12.5
        assert stats.duration_seconds == 2.5


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_writes_log_file(self, tmp_path) -> None:
        """Test file logging receives structured records."""
        log_file = tmp_path / "bezierforge.log"
        logger = configure_logging(log_file=log_file, quiet=True)
        logger.debug("Probe", value=42)
        content = log_file.read_text(encoding="utf-8")
        assert "Logging initialized" in content
        assert '"value": 42' in content
        configure_logging(quiet=True)
