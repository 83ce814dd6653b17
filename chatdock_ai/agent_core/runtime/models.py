from __future__ import annotations

"""Runtime dependency bundle, LangGraph state and turn result types.

- ``EngineDeps`` collects the registries and clients the engine needs.
- ``_TurnState`` is the state passed between LangGraph nodes. It carries only
  plain data; live objects (registries, manager, router) are looked up from
  ``EngineDeps`` inside the nodes.
- ``TurnResult`` is what one completed turn reports back.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict

from pydantic import Field

from ..backend.base import LLMBackend
from ..capabilities.registry import CapabilityRegistry
from ..policy.global_policy import GlobalPolicy
from ..schemas.base import BaseSchema
from ..schemas.domain import ToolInvocation
from ..tools.registry import ToolRegistry
from ..transport import MessageRouter

DEFAULT_MAX_ITERATIONS = 20
ITERATION_LIMIT_REPLY = "I've processed the request but reached the iteration limit."


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``AgentEngine``.

    Built once by ``build_runtime`` and shared by every entry point, so all
    turns read the same live ``CapabilityRegistry``.
    """

    capabilities: CapabilityRegistry
    policy: GlobalPolicy
    tools: ToolRegistry
    backend: LLMBackend

    router: Optional[MessageRouter] = None
    model: Optional[str] = None
    system_prompt: str = ""
    max_iterations: int = DEFAULT_MAX_ITERATIONS


class _TurnState(TypedDict):
    """LangGraph state for a single agent turn.

    - ``messages``: the conversation sent to the model, grown in place.
    - ``iteration``: number of model calls made so far.
    - ``specialist``/``channel_type``/``chat_id``/``is_heartbeat``/
      ``is_subagent``/``subagent_id``: caller context used to scope tools and
      build the ``ToolContext``.
    - ``pending_calls``: normalized tool calls awaiting execution.
    - ``invocations``: per-call audit records (dumped ``ToolInvocation``).
    - ``final_content``/``hit_limit``: terminal outcome.
    """

    messages: List[Dict[str, Any]]
    iteration: int
    specialist: Optional[str]
    channel_type: Optional[str]
    chat_id: Optional[str]
    is_heartbeat: bool
    is_subagent: bool
    subagent_id: Optional[str]
    pending_calls: List[Dict[str, Any]]
    invocations: List[Dict[str, Any]]
    final_content: str
    hit_limit: bool


class TurnResult(BaseSchema):
    """Outcome of one agent turn."""

    content: str = ""
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)
    iterations: int = 0
    hit_iteration_limit: bool = False
