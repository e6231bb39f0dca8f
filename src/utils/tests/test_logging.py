"""Tests for the JSON log formatter."""

import json
import logging
import unittest
from datetime import datetime, timezone

from utils.logging import JSONFormatter


def _record(msg="User registered", level=logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("services.auth_service", level, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter(unittest.TestCase):

    def test_base_fields(self):
        data = json.loads(JSONFormatter("Usuarios API").format(_record()))

        self.assertEqual(data["message"], "User registered")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "services.auth_service")
        self.assertEqual(data["service"], "Usuarios API")
        self.assertTrue(data["timestamp"].endswith("Z"))

    def test_extras_become_top_level_keys(self):
        data = json.loads(JSONFormatter().format(_record(userId="abc", count=3)))

        self.assertEqual(data["userId"], "abc")
        self.assertEqual(data["count"], 3)
        self.assertNotIn("service", data)
        self.assertNotIn("args", data)

    def test_non_json_extras_are_stringified(self):
        when = datetime(2026, 1, 1, tzinfo=timezone.utc)

        data = json.loads(JSONFormatter().format(_record(at=when)))

        self.assertEqual(data["at"], str(when))

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        self.assertIn("RuntimeError: boom", data["exception"])


if __name__ == '__main__':
    unittest.main()
