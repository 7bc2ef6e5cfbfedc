import os
import shutil
import tempfile
import unittest
from unittest.mock import patch
from nativebuilder.cli_logger import Logger


class TestLogger(unittest.TestCase):

    def setUp(self):
        self.log_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.log_dir)

    def read_log(self, logger):
        with open(logger.log_file, "r", encoding="utf-8") as f:
            return f.read().splitlines()

    @patch('nativebuilder.cli_logger.print', create=True)
    def test_file_records_are_plain_text(self, mock_print):
        logger = Logger(log_dir=self.log_dir, verbose=False)
        logger.info("Planning linux/x64")
        logger.success("done")
        lines = self.read_log(logger)
        self.assertTrue(lines[0].endswith("[INFO] Planning linux/x64"))
        self.assertTrue(lines[1].endswith("[SUCCESS] ✓ done"))
        self.assertNotIn("\x1b[", "\n".join(lines))
        self.assertEqual(mock_print.call_count, 2)

    @patch('nativebuilder.cli_logger.print', create=True)
    def test_multiline_warning_keeps_layout(self, mock_print):
        logger = Logger(log_dir=self.log_dir, verbose=False)
        logger.warning("first\n\tsecond")
        lines = self.read_log(logger)
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("["))
        self.assertTrue(lines[0].endswith("[WARNING] ⚠ first"))
        self.assertEqual(lines[1], "[WARNING] \tsecond")

    @patch('nativebuilder.cli_logger.print', create=True)
    def test_step_info_is_indented_without_level(self, mock_print):
        logger = Logger(log_dir=self.log_dir, verbose=False)
        logger.step_info("Local:", indent=2)
        self.assertEqual(self.read_log(logger), ["  Local:"])

    @patch('nativebuilder.cli_logger.print', create=True)
    def test_debug_goes_to_file_only_unless_verbose(self, mock_print):
        logger = Logger(log_dir=self.log_dir, verbose=False)
        logger.debug("3 candidates")
        mock_print.assert_not_called()
        self.assertTrue(self.read_log(logger)[0].endswith("[DEBUG] 3 candidates"))

        logger.verbose = True
        logger.debug("4 candidates")
        mock_print.assert_called_once()

    @patch.dict(os.environ, {"NATIVEBUILDER_DEBUG": "1"})
    def test_verbose_from_environment(self):
        self.assertTrue(Logger(log_dir=self.log_dir).verbose)


if __name__ == '__main__':
    unittest.main()
