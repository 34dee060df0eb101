import json
import tempfile
import unittest
from io import StringIO
from unittest import mock
from pathlib import Path

from rich.console import Console

from copilot_bridge.config import Settings
from copilot_bridge.log import JsonLinesFormatter, Logger


class TestLogger(unittest.TestCase):
    """Tests for the structured diagnostic logger."""

    def setUp(self):
        self.stream = StringIO()
        self.console = Console(file=self.stream, width=200, color_system=None)
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.log_file = Path(self.tmpdir.name) / "copilot.log"

    def _logger(self, *args, **kwargs):
        logger = Logger(*args, console=self.console, **kwargs)
        self.addCleanup(logger.close)
        return logger

    def _records(self):
        with open(self.log_file, encoding="utf-8") as f:
            return [json.loads(line) for line in f]

    def test_writes_json_lines(self):
        logger = self._logger("debug", self.log_file)

        logger.info("Executing Copilot CLI command", {"model": "gpt-5"})
        logger.debug("details")

        records = self._records()
        self.assertEqual(len(records), 2)
        self.assertEqual(records[0]["level"], "info")
        self.assertEqual(records[0]["message"], "Executing Copilot CLI command")
        self.assertEqual(records[0]["data"], {"model": "gpt-5"})
        self.assertIn("timestamp", records[0])
        self.assertNotIn("data", records[1])

    def test_filters_below_minimum_level(self):
        logger = self._logger("warn", self.log_file)

        logger.debug("hidden")
        logger.info("hidden")
        logger.warn("shown")
        logger.error("shown too")

        self.assertEqual([r["level"] for r in self._records()], ["warn", "error"])

    def test_mirrors_only_warnings_and_errors_by_default(self):
        logger = self._logger("debug")

        logger.info("quiet")
        logger.warn("careful [not markup]")

        output = self.stream.getvalue()
        self.assertNotIn("quiet", output)
        self.assertIn("WARNING", output)
        self.assertIn("careful [not markup]", output)

    def test_debug_mode_mirrors_everything(self):
        logger = self._logger("debug", debug=True)

        logger.debug("verbose", {"a": 1})

        output = self.stream.getvalue()
        self.assertIn("DEBUG", output)
        self.assertIn('verbose {"a": 1}', output)

    def test_unwritable_log_file_is_not_fatal(self):
        logger = self._logger("info", Path(self.tmpdir.name) / "missing" / "copilot.log")

        logger.info("first")
        logger.info("second")

        self.assertEqual(self.stream.getvalue().count("Failed to open log file"), 1)
        self.assertNotIn("first", self.stream.getvalue())

    def test_unknown_level(self):
        logger = self._logger("debug", self.log_file)

        with self.assertRaises(ValueError):
            logger.log("fatal", "nope")
        self.assertEqual(self._records(), [])

    def test_failing_sink_does_not_raise(self):
        logger = self._logger("info", self.log_file)
        with mock.patch.object(JsonLinesFormatter, "format", side_effect=TypeError("boom")), \
                mock.patch("sys.stderr", new_callable=StringIO):
            logger.error("still fine")

        self.assertIn("still fine", self.stream.getvalue())

    def test_from_settings(self):
        settings = Settings(log_level="error", log_file=self.log_file, debug=True)
        logger = Logger.from_settings(settings)
        self.addCleanup(logger.close)

        self.assertEqual(logger.level, "error")
        self.assertEqual(logger.log_file, self.log_file)
        self.assertTrue(logger.debug_mode)
        self.assertFalse(logger.enabled_for("warn"))
        self.assertTrue(logger.enabled_for("error"))


if __name__ == "__main__":
    unittest.main()
