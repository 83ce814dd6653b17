from __future__ import annotations

"""LangGraph runtime engine.

``AgentEngine`` runs one agent turn: ask the model, normalize its reply, gate
and execute the tool calls it asked for, feed the results back, repeat.

Execution model
--------------

- The engine runs a LangGraph state machine over a ``_TurnState``::

      call_model ──(tool calls)──▶ execute_tools ──(below limit)──▶ call_model
          │                              │
          └──(plain answer)──▶ finish ◀──┘ (iteration limit)

- ``call_model`` sends the conversation plus the tools visible to the turn's
  specialist, then runs the reply through the tool-call normalizer.
- ``execute_tools`` handles calls strictly in normalizer order.

Gating
------

Every call is classified to a capability and passed to ``GlobalPolicy``. A
refused call never reaches its executor; the model receives a
``{"success": False, "denied": True, "error": reason}`` result instead. The
decision and the start of the executor call happen without a suspension point
in between, so a policy change made by another task cannot slip between them.

Failure
-------

Backend errors propagate as ``LLMBackendError``; the entry points
(``AgentService``, ``SubagentManager``, ``HeartbeatScheduler``) decide how to
report them.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from langgraph.graph import END, StateGraph

from ..planning.tool_calls import normalize
from ..schemas.domain import ToolInvocation
from ..specialists import get_specialist_spec, specialist_id
from ..tools.base import ToolContext
from .models import (
    ITERATION_LIMIT_REPLY,
    EngineDeps,
    TurnResult,
    _TurnState,
)

logger = logging.getLogger(__name__)


def _tool_message(name: str, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"role": "tool", "name": name, "content": json.dumps(result, default=str)}


class AgentEngine:
    """Run agent turns with capability-gated tool execution.

    The engine delegates allow/deny decisions to ``GlobalPolicy`` and actual
    work to the executors registered in ``EngineDeps.tools``.
    """

    def __init__(self, *, deps: EngineDeps, subagent_manager: Any = None) -> None:
        """
        Initialize the AgentEngine.

        Args:
            deps: The runtime dependencies (registries, policy, backend, ...).
            subagent_manager: Supervisor exposed to tools through ``ToolContext``.
                Usually bound later with ``bind_subagent_manager`` because the
                manager itself needs the engine.
        """
        self._deps = deps
        self._subagent_manager = subagent_manager
        self._graph = self._build_graph()

    @property
    def deps(self) -> EngineDeps:
        return self._deps

    def bind_subagent_manager(self, manager: Any) -> None:
        self._subagent_manager = manager

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_TurnState)
        g.add_node("call_model", self._node_call_model)
        g.add_node("execute_tools", self._node_execute_tools)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("call_model")
        g.add_conditional_edges(
            "call_model",
            self._route_after_model,
            {"execute": "execute_tools", "finish": "finish"},
        )
        g.add_conditional_edges(
            "execute_tools",
            self._route_after_tools,
            {"continue": "call_model", "finish": "finish"},
        )
        g.add_edge("finish", END)
        return g.compile()

    def _system_prompt(self, specialist: Optional[str]) -> str:
        parts = [self._deps.system_prompt] if self._deps.system_prompt else []
        specialist_spec = get_specialist_spec(specialist)
        if specialist_spec is not None:
            parts.append(specialist_spec.system_prompt)
        return "\n\n".join(parts)

    def build_messages(
        self,
        message: str,
        *,
        specialist: Optional[str] = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """Assemble the initial conversation for a turn."""
        messages: List[Dict[str, Any]] = []
        system_prompt = self._system_prompt(specialist)
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.extend(dict(m) for m in (history or []))
        messages.append({"role": "user", "content": message})
        return messages

    async def run_turn(
        self,
        message: str,
        *,
        specialist: Any = None,
        channel_type: Optional[str] = None,
        chat_id: Optional[str] = None,
        is_heartbeat: bool = False,
        is_subagent: bool = False,
        subagent_id: Optional[str] = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> TurnResult:
        """
        Run one full turn and return its outcome.

        Raises:
            LLMBackendError: When the model backend fails.
        """
        key = specialist_id(specialist) if specialist is not None else None
        state: _TurnState = {
            "messages": self.build_messages(message, specialist=key, history=history),
            "iteration": 0,
            "specialist": key,
            "channel_type": channel_type,
            "chat_id": chat_id,
            "is_heartbeat": is_heartbeat,
            "is_subagent": is_subagent,
            "subagent_id": subagent_id,
            "pending_calls": [],
            "invocations": [],
            "final_content": "",
            "hit_limit": False,
        }
        limit = max(self._deps.max_iterations, 1)
        final = await self._graph.ainvoke(state, config={"recursion_limit": limit * 2 + 5})

        return TurnResult(
            content=str(final.get("final_content") or ""),
            tool_invocations=[ToolInvocation.model_validate(i) for i in final.get("invocations") or []],
            iterations=int(final.get("iteration") or 0),
            hit_iteration_limit=bool(final.get("hit_limit")),
        )

    async def process_direct(
        self,
        message: str,
        *,
        specialist: Any = None,
        channel_type: Optional[str] = None,
        chat_id: Optional[str] = None,
        is_heartbeat: bool = False,
        is_subagent: bool = False,
        subagent_id: Optional[str] = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """Run one turn and return only the final reply text."""
        result = await self.run_turn(
            message,
            specialist=specialist,
            channel_type=channel_type,
            chat_id=chat_id,
            is_heartbeat=is_heartbeat,
            is_subagent=is_subagent,
            subagent_id=subagent_id,
            history=history,
        )
        return result.content

    async def _node_call_model(self, state: _TurnState) -> _TurnState:
        """Ask the model for the next message and normalize it."""
        state["iteration"] = int(state.get("iteration") or 0) + 1
        tools = self._deps.tools.get_llm_tools(state.get("specialist"))

        raw = await self._deps.backend.chat(
            messages=state["messages"],
            tools=tools or None,
            stream=False,
            model=self._deps.model,
        )
        normalized = normalize(raw)

        if normalized.tool_calls:
            calls = [c.model_dump() for c in normalized.tool_calls]
            state["messages"].append(
                {
                    "role": "assistant",
                    "content": normalized.content,
                    "tool_calls": [{"function": c} for c in calls],
                }
            )
            state["pending_calls"] = calls
            logger.debug(f"Iteration {state['iteration']}: {len(calls)} tool call(s) requested")
        else:
            state["pending_calls"] = []
            state["final_content"] = normalized.content
        return state

    def _route_after_model(self, state: _TurnState) -> str:
        return "execute" if state.get("pending_calls") else "finish"

    def _tool_context(self, state: _TurnState) -> ToolContext:
        return ToolContext(
            channel_type=state.get("channel_type"),
            chat_id=state.get("chat_id"),
            specialist=state.get("specialist"),
            subagent_manager=self._subagent_manager,
            router=self._deps.router,
            capabilities=self._deps.capabilities,
            is_subagent=bool(state.get("is_subagent")),
            is_heartbeat=bool(state.get("is_heartbeat")),
        )

    async def execute_gated(self, name: str, args: Dict[str, Any], context: ToolContext) -> ToolInvocation:
        """
        Gate one tool call through the policy and execute it if allowed.

        Unregistered tools are reported by the registry without consulting the
        policy since nothing could run anyway.
        """
        tool = self._deps.tools.get(name)
        if tool is None:
            result = await self._deps.tools.execute(name, args, context)
            return ToolInvocation(name=name, arguments=args, ok=False, result=result)

        decision = self._deps.policy.decide(tool.capability_type, args=args)
        if not decision.allowed:
            logger.info(f"Denied tool call {name} (capability={decision.capability}): {decision.reason}")
            result = {"success": False, "denied": True, "error": decision.reason}
            return ToolInvocation(
                name=name,
                arguments=args,
                capability=decision.capability,
                ok=False,
                denied=True,
                result=result,
            )

        result = await self._deps.tools.execute(name, args, context)
        return ToolInvocation(
            name=name,
            arguments=args,
            capability=decision.capability,
            ok=bool(result.get("success")),
            result=result,
        )

    async def _node_execute_tools(self, state: _TurnState) -> _TurnState:
        """Execute the pending calls in order and append their results."""
        context = self._tool_context(state)
        invocations = state.setdefault("invocations", [])

        for call in state.get("pending_calls") or []:
            name = str(call["name"])
            args = dict(call.get("arguments") or {})
            invocation = await self.execute_gated(name, args, context)
            invocations.append(invocation.model_dump())
            state["messages"].append(_tool_message(name, invocation.result))

        state["pending_calls"] = []
        if int(state.get("iteration") or 0) >= self._deps.max_iterations:
            state["hit_limit"] = True
        return state

    def _route_after_tools(self, state: _TurnState) -> str:
        return "finish" if state.get("hit_limit") else "continue"

    async def _node_finish(self, state: _TurnState) -> _TurnState:
        if state.get("hit_limit") and not state.get("final_content"):
            logger.warning(f"Turn stopped after {state.get('iteration')} iterations")
            state["final_content"] = ITERATION_LIMIT_REPLY
        return state
