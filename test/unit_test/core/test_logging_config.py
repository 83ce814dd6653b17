from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from chatdock_ai.core.logging_config import (
    LOG_FILE_NAME,
    LOG_FORMATS,
    MODULE_LOG_LEVELS,
    LogConfig,
    get_logger,
    load_log_config,
    setup_logging,
)


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


def test_console_only_setup(root_logger) -> None:
    setup_logging(log_level="warning", log_format="simple", config=LogConfig(file_enabled=True), enable_file=False)

    [handler] = root_logger.handlers
    assert isinstance(handler, logging.StreamHandler)
    assert handler.level == logging.WARNING
    assert handler.formatter._fmt == LOG_FORMATS["simple"]
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("chatdock_ai.agent_core").level == logging.getLevelName(
        MODULE_LOG_LEVELS["chatdock_ai.agent_core"]
    )


def test_file_handler_when_enabled(root_logger, tmp_path) -> None:
    setup_logging(config=LogConfig(level="INFO", fmt="json", file_dir=tmp_path / "logs", file_enabled=True))

    rotating = [h for h in root_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(rotating) == 1
    assert rotating[0].formatter._fmt == LOG_FORMATS["json"]
    assert (tmp_path / "logs" / LOG_FILE_NAME).exists()


def test_unknown_format_falls_back_to_detailed(root_logger) -> None:
    setup_logging(config=LogConfig(fmt="fancy"))
    assert root_logger.handlers[0].formatter._fmt == LOG_FORMATS["detailed"]


def test_load_log_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("CHATDOCK_AI_LOG_FORMAT", "json")
    monkeypatch.setenv("CHATDOCK_AI_LOG_FILE_DIR", "/var/tmp/chatdock")
    cfg = load_log_config()
    assert cfg.fmt == "json"
    assert str(cfg.file_dir) == "/var/tmp/chatdock"


def test_get_logger_returns_named_logger() -> None:
    assert get_logger("chatdock_ai.test").name == "chatdock_ai.test"
