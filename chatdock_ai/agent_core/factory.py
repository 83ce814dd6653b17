from __future__ import annotations

"""Process wiring for the agent core.

``build_runtime`` constructs every component once and connects them:

- one ``CapabilityRegistry`` (loaded from ``<workspace>/config/runtime.json``),
- the ``GlobalPolicy`` on top of it,
- the ``ToolRegistry`` with the built-in filesystem tools,
- the LLM backend, the ``AgentEngine``, the ``SubagentManager``, the
  ``HeartbeatScheduler`` and the foreground ``AgentService``.

The result is an explicit ``AgentRuntime`` object; nothing here is a module
global, so tests can build as many independent runtimes as they need.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from .backend.base import LLMBackend
from .backend.ollama import OllamaChatBackend
from .capabilities.registry import CapabilityRegistry
from .capabilities.store import RuntimeStateStore
from .heartbeat.scheduler import HeartbeatScheduler
from .policy.global_policy import GlobalPolicy
from .policy.models import PolicyConfig, SafetyPolicy
from .runtime.engine import AgentEngine
from .runtime.models import EngineDeps
from .schemas.domain import HeartbeatConfig
from .service import AgentService
from .subagents.manager import SubagentManager
from .tools.base import ToolDefinition
from .tools.filesystem import build_filesystem_tools
from .tools.registry import ToolRegistry
from .transport import MessageRouter

if TYPE_CHECKING:
    from chatdock_ai.server.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class AgentRuntime:
    """All long-lived components of one agent process."""

    capabilities: CapabilityRegistry
    policy: GlobalPolicy
    tools: ToolRegistry
    backend: LLMBackend
    engine: AgentEngine
    subagents: SubagentManager
    heartbeat: HeartbeatScheduler
    service: AgentService
    router: Optional[MessageRouter] = None
    subagent_max_age_ms: int = 3_600_000

    async def shutdown(self) -> None:
        """Stop the scheduler, cancel background tasks and close the backend."""
        self.heartbeat.stop()
        await self.subagents.shutdown()
        aclose = getattr(self.backend, "aclose", None)
        if callable(aclose):
            await aclose()


def build_capability_registry(state_path: Optional[Path] = None, *, initialize: bool = True) -> CapabilityRegistry:
    """Build a ``CapabilityRegistry`` backed by ``state_path`` (``None``: memory only)."""
    registry = CapabilityRegistry(RuntimeStateStore(state_path))
    if initialize:
        registry.initialize()
    return registry


def build_runtime(
    settings: Optional["Settings"] = None,
    *,
    backend: Optional[LLMBackend] = None,
    router: Optional[MessageRouter] = None,
    capabilities: Optional[CapabilityRegistry] = None,
    extra_tools: Iterable[ToolDefinition] = (),
    persist_state: bool = True,
) -> AgentRuntime:
    """
    Wire a complete runtime from settings.

    Args:
        settings: Application settings; defaults to the process settings.
        backend: LLM backend; defaults to an ``OllamaChatBackend`` built from
            ``settings.llm``.
        router: Optional message transport.
        capabilities: Pre-built registry; otherwise one is built and
            initialized from the workspace state file.
        extra_tools: Additional tools registered after the built-ins.
        persist_state: When False the registry never touches disk.

    Returns:
        The wired ``AgentRuntime``.
    """
    if settings is None:
        from chatdock_ai.server.core.config import settings as default_settings

        settings = default_settings

    workspace = Path(settings.workspace_root).expanduser()
    if capabilities is None:
        capabilities = build_capability_registry(settings.runtime_state_path if persist_state else None)

    agent_cfg = settings.agent
    policy = GlobalPolicy(
        capabilities,
        PolicyConfig(safety_policy=SafetyPolicy(max_tool_args_bytes=agent_cfg.max_tool_args_bytes)),
    )

    tools = ToolRegistry()
    for tool in build_filesystem_tools(workspace):
        tools.register(tool)
    for tool in extra_tools:
        tools.register(tool)

    if backend is None:
        llm_cfg = settings.llm
        backend = OllamaChatBackend(llm_cfg.base_url, model=llm_cfg.model, timeout=llm_cfg.timeout_seconds)

    engine = AgentEngine(
        deps=EngineDeps(
            capabilities=capabilities,
            policy=policy,
            tools=tools,
            backend=backend,
            router=router,
            model=settings.llm.model,
            system_prompt=agent_cfg.system_prompt,
            max_iterations=agent_cfg.max_iterations,
        )
    )
    subagents = SubagentManager(engine, router)
    engine.bind_subagent_manager(subagents)

    hb = settings.heartbeat
    heartbeat = HeartbeatScheduler(
        HeartbeatConfig(enabled=hb.enabled, interval_ms=hb.interval_ms, prompt=hb.prompt),
        agent=engine,
    )

    logger.info(
        f"Runtime built: workspace={workspace}, tools={len(tools)}, "
        f"profile={capabilities.active_profile}, mode={capabilities.execution_mode.value}"
    )
    return AgentRuntime(
        capabilities=capabilities,
        policy=policy,
        tools=tools,
        backend=backend,
        engine=engine,
        subagents=subagents,
        heartbeat=heartbeat,
        service=AgentService(engine=engine, router=router),
        router=router,
        subagent_max_age_ms=agent_cfg.subagent_max_age_ms,
    )
