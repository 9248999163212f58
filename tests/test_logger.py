import logging
import os
import sys
import tempfile
import unittest
from unittest import mock

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from utils import logger  # noqa: E402


class LoggerTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.names = []

    def tearDown(self):
        for name in self.names:
            logging.getLogger(name).handlers.clear()
        self.temp_dir.cleanup()

    def make_logger(self, name):
        self.names.append(name)
        return logger.get_logger(name)

    def test_loggers_share_one_log_file(self):
        path = os.path.join(self.temp_dir.name, "quotedesk.log")
        with mock.patch.object(logger, "LOG_FILE", path), mock.patch.object(
            logger, "_console", None
        ):
            first = self.make_logger("quotedesk.test.first")
            second = self.make_logger("quotedesk.test.second")
            console = first.handlers[0].console
            self.assertIs(second.handlers[0].console, console)
            self.assertIs(logger.shared_console(), console)
            self.assertEqual(console.file.name, path)
            console.file.close()

    def test_same_name_keeps_one_handler(self):
        with mock.patch.object(logger, "LOG_FILE", None), mock.patch.object(
            logger, "_console", None
        ):
            first = self.make_logger("quotedesk.test.repeat")
            again = self.make_logger("quotedesk.test.repeat")
        self.assertIs(first, again)
        self.assertEqual(len(again.handlers), 1)


if __name__ == "__main__":
    unittest.main()
