"""Application entry point and setup for Dyadikos."""

import logging
import os
import sys

from PySide6.QtWidgets import QApplication

from dyadikos.core.progress import FileKeyValueStore, ProgressStore, ProgressTracker
from dyadikos.core.shapes import default_repository
from dyadikos.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load shapes and saved progress, then start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Dyadikos")
    app.setApplicationDisplayName("Dyadikos")

    shapes = default_repository()
    tracker = ProgressTracker(
        ProgressStore(FileKeyValueStore()),
        shapes.all(),
        unlock_all=os.environ.get("DYADIKOS_UNLOCK_ALL") == "1",
    )

    window = MainWindow(shapes=shapes, tracker=tracker)
    window.resize(480, 820)
    window.show()

    sys.exit(app.exec())
