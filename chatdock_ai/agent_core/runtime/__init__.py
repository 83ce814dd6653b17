"""Agent turn runtime.

``AgentEngine`` runs the LangGraph loop; ``EngineDeps`` is its dependency
bundle and ``TurnResult`` the per-turn outcome.
"""

from .engine import AgentEngine
from .models import DEFAULT_MAX_ITERATIONS, ITERATION_LIMIT_REPLY, EngineDeps, TurnResult

__all__ = ["AgentEngine", "DEFAULT_MAX_ITERATIONS", "EngineDeps", "ITERATION_LIMIT_REPLY", "TurnResult"]
