"""
Application entry point.

Configures logging, creates the QApplication and shows the MainWindow. The
directory of this file is added to ``sys.path`` so the ``models``, ``services``,
``ui`` and ``utils`` packages import when the script is run directly.
"""
import sys
import os
from PyQt6.QtWidgets import QApplication

current_dir: str = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from ui.main_window import MainWindow
from utils.app_config import AppConfig
from utils.logging_config import setup_logging


def main() -> int:
    config: AppConfig = AppConfig.from_env()
    setup_logging(config.log_level)

    app: QApplication = QApplication(sys.argv)
    window: MainWindow = MainWindow(config)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
