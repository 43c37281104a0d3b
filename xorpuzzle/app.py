"""Application entry point and setup for the XOR logic-gate puzzle."""

import logging
import sys

from PySide6.QtWidgets import QApplication

from xorpuzzle.core.levels import LevelRepository
from xorpuzzle.core.progress import LevelManager
from xorpuzzle.core.settings import SettingsStore
from xorpuzzle.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Initialize the application, load levels and progress, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("XOR")
    app.setApplicationDisplayName("XOR")

    levels = LevelRepository()
    level_manager = LevelManager()
    settings_store = SettingsStore()
    logging.info("Loaded %d levels, %d starred", len(levels), level_manager.starred_count())

    window = MainWindow(levels=levels, level_manager=level_manager, settings_store=settings_store)
    window.show()

    sys.exit(app.exec())
