"""
Core utilities and configuration for ChatDock-AI.

This package provides shared functionality such as logging configuration.
"""

from chatdock_ai.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
