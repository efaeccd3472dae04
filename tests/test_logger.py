import logging
import os
import unittest
from unittest.mock import patch

from arcade.utils.logger import configure_logging, get_logger, resolve_level


class LoggerTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level

        def restore() -> None:
            root.handlers[:] = handlers
            root.setLevel(level)

        self.addCleanup(restore)

    def test_level_names_and_numbers(self) -> None:
        self.assertEqual(resolve_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_level(" Warning "), logging.WARNING)
        self.assertEqual(resolve_level(logging.ERROR), logging.ERROR)
        self.assertEqual(resolve_level("10"), logging.DEBUG)
        with self.assertRaises(ValueError):
            resolve_level("chatty")

    def test_default_level_from_environment(self) -> None:
        with patch.dict(os.environ, {"ARCADE_LOG_LEVEL": "ERROR"}):
            self.assertEqual(resolve_level(), logging.ERROR)
        with patch.dict(os.environ, {"ARCADE_LOG_LEVEL": ""}):
            self.assertEqual(resolve_level(), logging.INFO)

    def test_configure_installs_single_handler(self) -> None:
        configure_logging("debug")
        configure_logging("warning")
        root = logging.getLogger()
        self.assertEqual(len(root.handlers), 1)
        self.assertEqual(root.level, logging.WARNING)
        self.assertEqual(get_logger().name, "arcade")
        self.assertEqual(get_logger("arcade.engine.maze").name, "arcade.engine.maze")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
