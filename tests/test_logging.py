"""Tests for structured logging behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

from multichat.logging_utils import build_formatter, configure_logging


class LoggingTests(unittest.TestCase):
    """Validate log format, handler wiring, and file output."""

    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved_handlers = list(root.handlers)
        self._saved_level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = self._saved_handlers
        root.setLevel(self._saved_level)

    def test_structured_formatter_includes_extra_fields(self) -> None:
        formatter = build_formatter(structured=True)
        record = logging.LogRecord(
            name="multichat.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="dispatcher.request",
            args=(),
            exc_info=None,
        )
        record.provider = "openai"
        record.message_count = 3

        payload = json.loads(formatter.format(record))
        self.assertEqual(payload["event"], "dispatcher.request")
        self.assertEqual(payload["provider"], "openai")
        self.assertEqual(payload["message_count"], 3)
        self.assertEqual(payload["level"], "info")
        self.assertEqual(payload["logger"], "multichat.test")
        self.assertIn("timestamp", payload)

    def test_plain_formatter(self) -> None:
        formatter = build_formatter(structured=False)
        record = logging.LogRecord(
            name="multichat.test",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="hello %s",
            args=("world",),
            exc_info=None,
        )
        line = formatter.format(record)
        self.assertIn("WARNING multichat.test hello world", line)

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
            logging.getLogger("multichat.test").info(
                "session.restored", extra={"messages": 2}
            )
            for handler in logging.getLogger().handlers:
                handler.flush()

            lines = log_path.read_text(encoding="utf-8").strip().splitlines()
            payload = json.loads(lines[-1])
            self.assertEqual(payload["event"], "session.restored")
            self.assertEqual(payload["messages"], 2)

    def test_stderr_handler_only_passes_app_warnings(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False})
        handlers = logging.getLogger().handlers
        self.assertEqual(len(handlers), 1)
        stderr_handler = handlers[0]
        self.assertEqual(stderr_handler.level, logging.WARNING)

        foreign = logging.LogRecord("other.lib", logging.ERROR, __file__, 1, "x", (), None)
        ours = logging.LogRecord("multichat.chat", logging.ERROR, __file__, 1, "x", (), None)
        self.assertFalse(stderr_handler.filter(foreign))
        self.assertTrue(stderr_handler.filter(ours))
        self.assertEqual(logging.getLogger("httpx").level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
