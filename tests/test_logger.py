"""Tests for loguru setup."""

from modpack_installer import logger as logger_module
from modpack_installer.logger import logger, setup_logger


def capture(monkeypatch, env=None, level=None):
    if env is None:
        monkeypatch.delenv("MODPACK_INSTALLER_DEBUG", raising=False)
    else:
        monkeypatch.setenv("MODPACK_INSTALLER_DEBUG", env)
    messages = []
    setup_logger(level=level, sink=messages.append, enqueue=False, colorize=False)
    return messages


def test_info_by_default(monkeypatch):
    messages = capture(monkeypatch)

    logger.debug("hidden")
    logger.info("shown")

    assert len(messages) == 1
    assert "shown" in messages[0]


def test_env_var_enables_debug(monkeypatch):
    messages = capture(monkeypatch, env="1")

    logger.debug("details")

    assert any("details" in m for m in messages)


def test_explicit_level_wins(monkeypatch):
    messages = capture(monkeypatch, env="1", level="WARNING")

    logger.info("quiet")
    logger.warning("loud")

    assert len(messages) == 1
    assert "loud" in messages[0]


def test_exports():
    assert logger_module.__all__ == ["logger", "setup_logger"]
