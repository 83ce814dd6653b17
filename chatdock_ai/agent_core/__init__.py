"""Agent core: capability policy, tool dispatch and the turn engine.

Most integrations only need ``build_runtime`` and the ``AgentRuntime`` it
returns; the individual components are exported for tests and custom wiring.
"""

from .capabilities import CapabilityRegistry, RuntimeStateStore
from .factory import AgentRuntime, build_capability_registry, build_runtime
from .heartbeat import HeartbeatScheduler
from .planning import normalize
from .policy import GlobalPolicy, PolicyDecision
from .runtime import AgentEngine, EngineDeps, TurnResult
from .service import AgentService
from .specialists import Specialist
from .subagents import SubagentManager
from .tools import ToolContext, ToolDefinition, ToolRegistry

__all__ = [
    "AgentEngine",
    "AgentRuntime",
    "AgentService",
    "CapabilityRegistry",
    "EngineDeps",
    "GlobalPolicy",
    "HeartbeatScheduler",
    "PolicyDecision",
    "RuntimeStateStore",
    "Specialist",
    "SubagentManager",
    "ToolContext",
    "ToolDefinition",
    "ToolRegistry",
    "TurnResult",
    "build_capability_registry",
    "build_runtime",
    "normalize",
]
