import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from prismatic_core.logging_setup import configure_logging, get_logger, reset_logging


class LoggingSetupTests(unittest.TestCase):
    def tearDown(self):
        reset_logging()

    def test_json_lines_with_event(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "render.log"
            logger = configure_logging(level="DEBUG", console=False, log_path=path)
            get_logger("render").debug("strip done", extra={"event": "render_done"})
            for handler in logger.handlers:
                handler.flush()
            rows = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
            reset_logging()

        self.assertEqual(rows[0]["event"], "logging_configured")
        self.assertEqual(rows[-1]["event"], "render_done")
        self.assertEqual(rows[-1]["logger"], "prismatic.render")
        self.assertEqual(rows[-1]["level"], "DEBUG")
        self.assertIn("ts_utc", rows[-1])

    def test_configure_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "render.log"
            first = configure_logging(console=False, log_path=path)
            count = len(first.handlers)
            second = configure_logging(console=True, log_path=path)
            self.assertIs(first, second)
            self.assertEqual(len(second.handlers), count)
            reset_logging()

    def test_logger_names(self):
        self.assertEqual(get_logger().name, "prismatic")
        self.assertEqual(get_logger("noise").name, "prismatic.noise")


if __name__ == "__main__":
    unittest.main()
