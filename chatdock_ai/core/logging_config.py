"""
Logging setup for ChatDock-AI.

Everything logs through the standard library. ``setup_logging`` installs one
console handler on the root logger, plus a size-rotated file handler when file
logging is on, and pins the per-package levels listed in ``MODULE_LOG_LEVELS``.

Defaults are read from ``Settings`` (``CHATDOCK_AI_LOG_LEVEL``,
``CHATDOCK_AI_ENABLE_FILE_LOGGING``); the format and the log directory come from
``CHATDOCK_AI_LOG_FORMAT`` and ``CHATDOCK_AI_LOG_FILE_DIR``.
"""

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, Optional

LOG_FORMATS: Dict[str, str] = {
    "simple": "%(levelname)s %(name)s: %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(funcName)s(): %(message)s",
    "json": (
        '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
        '"where": "%(filename)s:%(lineno)d", "message": "%(message)s"}'
    ),
}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "chatdock_ai.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

MODULE_LOG_LEVELS: Dict[str, str] = {
    "chatdock_ai.agent_core": "DEBUG",
    "chatdock_ai.agent_core.capabilities": "INFO",
    "chatdock_ai.agent_core.subagents": "INFO",
    "chatdock_ai.agent_core.heartbeat": "INFO",
    "chatdock_ai.server": "INFO",
    # Chatty dependencies
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "langgraph": "WARNING",
    "asyncio": "WARNING",
    "uvicorn.access": "WARNING",
}


@dataclass(frozen=True)
class LogConfig:
    """Resolved logging options."""

    level: str = "INFO"
    fmt: str = "detailed"
    file_dir: Path = Path("logs")
    file_enabled: bool = False


def load_log_config() -> LogConfig:
    """Build a ``LogConfig`` from the process settings.

    Settings are imported here rather than at module load so that importing
    this module never instantiates them.
    """
    from chatdock_ai.server.core.config import settings

    return LogConfig(
        level=settings.log_level.upper(),
        fmt=os.getenv("CHATDOCK_AI_LOG_FORMAT", "detailed"),
        file_dir=Path(os.getenv("CHATDOCK_AI_LOG_FILE_DIR", "logs")),
        file_enabled=settings.enable_file_logging,
    )


def _handlers(level: str, formatter: logging.Formatter, file_dir: Optional[Path]) -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if file_dir is not None:
        file_dir.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            file_dir / LOG_FILE_NAME, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        )
        rotating.setLevel(logging.DEBUG)
        rotating.setFormatter(formatter)
        handlers.append(rotating)
    return handlers


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
    config: Optional[LogConfig] = None,
) -> None:
    """
    Replace the root logger's handlers with the ChatDock-AI setup.

    Args:
        log_level: Console level override (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format override: ``simple``, ``detailed`` or ``json``.
        enable_file: Set False to skip the file handler even when configured.
        config: Explicit options; read from settings when omitted.
    """
    cfg = config or load_log_config()
    level = (log_level or cfg.level).upper()
    fmt = log_format or cfg.fmt
    formatter = logging.Formatter(LOG_FORMATS.get(fmt, LOG_FORMATS["detailed"]), datefmt=DATE_FORMAT)
    file_dir = cfg.file_dir if enable_file and cfg.file_enabled else None

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in _handlers(level, formatter, file_dir):
        root_logger.addHandler(handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_dir={file_dir}")


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (normally ``__name__``)."""
    return logging.getLogger(name)
