import logging

import pytest

from fractalboxes import config
from fractalboxes.logging_config import resolve_level, setup_logging


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_log_level_from_environment(monkeypatch):
    monkeypatch.delenv(config.LOG_LEVEL_ENV, raising=False)
    assert config.get_log_level_name() == "INFO"
    monkeypatch.setenv(config.LOG_LEVEL_ENV, "debug")
    assert config.get_log_level_name() == "DEBUG"


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "editor.log"
    setup_logging("debug", log_file=str(log_file))

    logger = logging.getLogger("fractalboxes")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("fractalboxes.model.world").debug("hello from the world")
    for handler in logger.handlers:
        handler.flush()
        if isinstance(handler, logging.FileHandler):
            handler.close()
    logger.handlers.clear()

    assert "hello from the world" in log_file.read_text(encoding="utf-8")
