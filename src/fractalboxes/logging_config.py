"""
Logging Configuration
Sets up the package logger for the editor.

The model and controller only ever call ``logging.getLogger(__name__)``;
handlers are attached here, once, by the application entry point.
"""
import logging
import sys
from typing import Optional, Union

# Third-party loggers that are chatty at INFO while the viewport renders
_NOISY_LOGGERS = ("pyvista", "vtkmodules")


def resolve_level(level: Union[int, str]) -> int:
    """
    Turns 'debug' / 'INFO' / 10 into a numeric logging level.

    Raises:
        ValueError: If a level name is not known to the logging module.
    """
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'.")
    return numeric


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the logger for the 'fractalboxes' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, "info")
        log_file: Optional path to save logs to a file.
    """
    numeric_level = resolve_level(level)

    logger = logging.getLogger("fractalboxes")
    logger.setLevel(numeric_level)

    if logger.hasHandlers():
        logger.handlers.clear()

    # Format: Time - Module - Level - Message
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logger.info(f"Logging initialized at level {logging.getLevelName(numeric_level)}.")
