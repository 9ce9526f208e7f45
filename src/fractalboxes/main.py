"""
Application Initialization
==========================
This module wires the editor (model + controller) to the window (view) and
starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging (level from the FRACTALBOXES_LOG_LEVEL variable).
2. Instantiates the World and the Editor that drives it.
3. Passes the Editor into the Main Window so input reaches the state machine.
4. Prevents circular import errors by being the orchestrator.
"""
import logging
import sys
from typing import Optional

from PySide6.QtWidgets import QApplication

from fractalboxes import config
from fractalboxes.controller.editor import Editor
from fractalboxes.logging_config import setup_logging
from fractalboxes.model.world import World
from fractalboxes.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def main(log_file: Optional[str] = None) -> None:
    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=config.get_log_level_name(), log_file=log_file)

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(config.WINDOW_TITLE)

    # 3. Initialize the Data Model and its controller
    editor = Editor(World())

    # 4. Initialize the Main Window, passing the controller
    window = MainWindow(editor)
    window.show()
    logger.info("Editor window shown.")

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
