"""Tests for logging setup."""

import json
import logging

import pytest
from rich.logging import RichHandler

from bench_monitor.utils.logging import JsonFormatter, setup_logging


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        quiet = {name: logging.getLogger(name).level for name in ("urllib3", "docker")}
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)
        for name, value in quiet.items():
            logging.getLogger(name).setLevel(value)

    def test_rich_console(self):
        """Test the default console handler is rich."""
        setup_logging(level="debug")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert [type(h) for h in root.handlers] == [RichHandler]
        assert logging.getLogger("docker").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_json_format(self):
        """Test JSON output wins over the rich console."""
        setup_logging(json_format=True, rich_console=True)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, JsonFormatter)

    def test_log_file_names_thread(self, tmp_path):
        """Test file output carries the thread that logged the record."""
        log_file = tmp_path / "logs" / "monitor.log"
        setup_logging(rich_console=False, log_file=log_file)

        logging.getLogger("bench_monitor.test").info("tick recorded")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text().strip()
        assert "[MainThread]" in line
        assert line.endswith("INFO - tick recorded")

    def test_unknown_level_rejected(self):
        """Test a typo in the level fails instead of silently logging nothing."""
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="verbose")


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_record_fields(self):
        """Test one JSON object with level, logger, thread and message."""
        record = logging.LogRecord(
            "bench_monitor.monitoring", logging.WARNING, __file__, 1, "skipped %s", ("tick",), None
        )

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "bench_monitor.monitoring"
        assert payload["thread"] == record.threadName
        assert payload["message"] == "skipped tick"
        assert "exception" not in payload
