"""Unit tests for JSON-lines log configuration."""

import json

import structlog

from notesai.editor.editor import BlockEditor
from notesai.models.block import Block
from notesai.models.config import LoggingConfig
from notesai.models.document import Document
from notesai.utils.logging import LOG_FILE, configure_logging


def read_events(log_file):
    return [json.loads(line) for line in log_file.read_text().splitlines()]


def open_editor():
    return BlockEditor(Document.new("Logged", [Block(id="a", content="first")]))


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_editor_operations_written_as_json(self, tmp_path):
        """Debug level records each block mutation with its context."""
        log_file = configure_logging(LoggingConfig(log_dir=str(tmp_path), level="DEBUG"))
        editor = open_editor()

        new_id = editor.handle_enter("a")

        assert log_file == tmp_path / LOG_FILE
        events = read_events(log_file)
        inserted = [e for e in events if e["event"] == "block_inserted"]
        assert len(inserted) == 1
        assert inserted[0]["level"] == "debug"
        assert inserted[0]["block_id"] == new_id
        assert inserted[0]["after"] == "a"
        assert "timestamp" in inserted[0]

    def test_level_filters_events(self, tmp_path):
        log_file = configure_logging(LoggingConfig(log_dir=str(tmp_path), level="INFO"))
        editor = open_editor()

        editor.handle_enter("a")
        editor.handle_enter("missing")

        names = {(e["event"], e["level"]) for e in read_events(log_file)}
        assert ("editor_opened", "info") in names
        assert ("block_not_found", "warning") in names
        assert not any(event == "block_inserted" for event, _ in names)

    def test_reconfigure_switches_file(self, tmp_path):
        first = configure_logging(LoggingConfig(log_dir=str(tmp_path / "one")))
        second = configure_logging(LoggingConfig(log_dir=str(tmp_path / "two")))

        structlog.get_logger().info("after_switch")

        assert first.read_text() == ""
        assert [e["event"] for e in read_events(second)] == ["after_switch"]

    def test_default_location_under_home(self, isolated_home):
        log_file = configure_logging()

        structlog.get_logger().warning("default_location")

        assert log_file == isolated_home / ".cache" / "notesai" / "logs" / LOG_FILE
        assert read_events(log_file)[0]["event"] == "default_location"
