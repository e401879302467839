"""Tests for the persistent error log."""

from pathlib import Path

from effingo.logwriter import FileLogWriter


class TestFileLogWriter:
    """Tests for FileLogWriter."""

    def test_flush_appends_messages(self, tmp_path: Path) -> None:
        log_path = tmp_path / "logs" / ".effingo_log"
        writer = FileLogWriter(log_path)
        writer.err("first problem")
        writer.err("second problem")

        assert writer.flush() is True

        lines = log_path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith(" - first problem")
        assert lines[1].endswith(" - second problem")
        assert writer.pending == 0

    def test_flush_keeps_existing_content(self, tmp_path: Path) -> None:
        log_path = tmp_path / "log"
        log_path.write_text("older entry\n")
        writer = FileLogWriter(log_path)
        writer.err("new entry")

        writer.flush()

        lines = log_path.read_text().splitlines()
        assert lines[0] == "older entry"
        assert lines[1].endswith(" - new entry")

    def test_flush_truncates_oversized_log(self, tmp_path: Path) -> None:
        log_path = tmp_path / "log"
        log_path.write_text("x" * 200)
        writer = FileLogWriter(log_path, max_bytes=100)
        writer.err("fresh start")

        writer.flush()

        content = log_path.read_text()
        assert "x" not in content
        assert content.endswith(" - fresh start\n")

    def test_flush_without_messages_writes_nothing(self, tmp_path: Path) -> None:
        log_path = tmp_path / "log"
        assert FileLogWriter(log_path).flush() is True
        assert not log_path.exists()

    def test_flush_failure_returns_false(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        writer = FileLogWriter(blocker / "log")
        writer.err("lost")

        assert writer.flush() is False
        assert writer.pending == 1

    def test_flush_escapes_undecodable_names(self, tmp_path: Path) -> None:
        log_path = tmp_path / "log"
        writer = FileLogWriter(log_path)
        writer.err("Error hashing /data/b\udcff: denied")

        assert writer.flush() is True
        assert "/data/b\\udcff: denied" in log_path.read_text(encoding="utf-8")
