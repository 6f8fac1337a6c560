import logging
import tempfile
import unittest
from pathlib import Path

from settings import Settings, configure_logging, read_env_file, truthy


class TestSettings(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.env_file = self.root / ".env"

    def test_defaults(self) -> None:
        settings = Settings.from_env({}, env_file=self.env_file)
        self.assertTrue(settings.alt_screen)
        self.assertEqual(settings.log_level, "WARNING")
        self.assertIsNone(settings.log_file)
        self.assertEqual(settings.data_dir.name, "data")

    def test_env_file_and_environment_priority(self) -> None:
        self.env_file.write_text(
            "# comment\n"
            "TASKLIST_DATA_DIR=/tmp/from-file\n"
            "TASKLIST_ALT_SCREEN=off\n"
            "UNRELATED=1\n"
            "TASKLIST_LOG_LEVEL='debug'\n",
            encoding="utf-8",
        )
        self.assertNotIn("UNRELATED", read_env_file(self.env_file))
        settings = Settings.from_env({"TASKLIST_DATA_DIR": "/tmp/from-env"}, env_file=self.env_file)
        self.assertEqual(settings.data_dir, Path("/tmp/from-env"))
        self.assertFalse(settings.alt_screen)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_undecodable_env_file_is_ignored(self) -> None:
        self.env_file.write_bytes(b"TASKLIST_LOG_LEVEL=\xff\xfe\n")
        with self.assertLogs("settings", level="WARNING"):
            settings = Settings.from_env({}, env_file=self.env_file)
        self.assertEqual(settings.log_level, "WARNING")

    def test_unreadable_env_file_is_ignored(self) -> None:
        self.env_file.mkdir()
        with self.assertLogs("settings", level="WARNING"):
            self.assertEqual(read_env_file(self.env_file), {})

    def test_color_flags(self) -> None:
        settings = Settings.from_env({"FORCE_COLOR": "1", "NO_COLOR": "", "COLORTERM": "TrueColor"},
                                     env_file=self.env_file)
        self.assertTrue(settings.force_color)
        self.assertTrue(settings.no_color)
        self.assertEqual(settings.colorterm, "truecolor")

    def test_truthy(self) -> None:
        self.assertTrue(truthy(None))
        self.assertFalse(truthy(None, default=False))
        self.assertFalse(truthy("No"))
        self.assertTrue(truthy("1"))

    def test_log_file(self) -> None:
        root = logging.getLogger()
        saved = (root.handlers[:], root.level)

        def restore():
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])

        self.addCleanup(restore)
        log_file = self.root / "logs" / "tasklist.log"
        configure_logging(Settings(log_level="INFO", log_file=log_file))
        logging.getLogger("storage").info("hello log")
        for handler in root.handlers:
            handler.flush()
        self.assertIn("hello log", log_file.read_text(encoding="utf-8"))


if __name__ == "__main__":
    unittest.main()
