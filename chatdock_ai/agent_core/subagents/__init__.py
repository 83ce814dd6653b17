"""Background ("sub-agent") task supervision."""

from .manager import DEFAULT_MAX_AGE_MS, SubagentManager

__all__ = ["DEFAULT_MAX_AGE_MS", "SubagentManager"]
