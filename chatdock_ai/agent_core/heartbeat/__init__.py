"""Proactive scheduler that wakes the agent on a fixed interval."""

from .scheduler import HeartbeatScheduler

__all__ = ["HeartbeatScheduler"]
