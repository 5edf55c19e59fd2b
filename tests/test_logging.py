"""Tests for structured logging behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

from farm_assistant.logging_utils import JsonFormatter, configure_logging


class LoggingTests(unittest.TestCase):
    """Validate log format and handler wiring."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved_handlers = list(root.handlers)
        self._saved_level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            if handler not in self._saved_handlers:
                handler.close()
        root.handlers[:] = self._saved_handlers
        root.setLevel(self._saved_level)

    def test_json_formatter_includes_extra_fields(self) -> None:
        formatter = JsonFormatter()
        record = logging.LogRecord(
            name="farm_assistant.gateway",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="gateway.exchange.failed",
            args=(),
            exc_info=None,
        )
        record.event = "gateway.exchange.failed"
        record.kind = "network"
        payload = json.loads(formatter.format(record))
        self.assertEqual(payload["event"], "gateway.exchange.failed")
        self.assertEqual(payload["kind"], "network")
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["logger"], "farm_assistant.gateway")
        self.assertNotIn("pathname", payload)

    def test_configure_logging_writes_json_lines_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log_path = Path(temp_dir) / "logs" / "app.log"
            configure_logging(
                {
                    "level": "INFO",
                    "structured": True,
                    "log_to_file": True,
                    "log_file_path": str(log_path),
                }
            )
            logging.getLogger("farm_assistant.session").info(
                "session.closed", extra={"event": "session.closed"}
            )
            for handler in logging.getLogger().handlers:
                handler.flush()

            lines = log_path.read_text(encoding="utf-8").strip().splitlines()
            self.assertTrue(lines)
            self.assertEqual(json.loads(lines[-1])["event"], "session.closed")

    def test_library_loggers_are_quieted(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False})
        self.assertEqual(logging.getLogger("httpx").level, logging.WARNING)
        self.assertEqual(logging.getLogger().level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
