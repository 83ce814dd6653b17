from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import pytest

from chatdock_ai.agent_core.capabilities.registry import CapabilityRegistry
from chatdock_ai.agent_core.policy.global_policy import GlobalPolicy
from chatdock_ai.agent_core.runtime.engine import AgentEngine
from chatdock_ai.agent_core.runtime.models import EngineDeps
from chatdock_ai.agent_core.schemas.domain import OutboundMessage
from chatdock_ai.agent_core.tools.base import ToolDefinition
from chatdock_ai.agent_core.tools.registry import ToolRegistry


class ScriptedBackend:
    """LLM backend that replays canned replies and records every request."""

    def __init__(self, replies: Sequence[Any] = (), *, default: Optional[Dict[str, Any]] = None) -> None:
        self._replies = list(replies)
        self._default = default if default is not None else {"content": "done", "tool_calls": []}
        self.calls: List[Dict[str, Any]] = []

    def push(self, *replies: Any) -> None:
        self._replies.extend(replies)

    async def chat(self, *, messages, tools=None, stream=False, model=None) -> Dict[str, Any]:
        self.calls.append({"messages": [dict(m) for m in messages], "tools": tools, "model": model})
        reply = self._replies.pop(0) if self._replies else self._default
        if isinstance(reply, Exception):
            raise reply
        return reply


class RecordingRouter:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: List[OutboundMessage] = []

    async def send_to_channel(self, message: OutboundMessage) -> bool:
        self.sent.append(message)
        return self.result


class FakeAgent:
    """Stand-in for ``AgentEngine`` with a controllable ``process_direct``."""

    def __init__(self, reply: Any = "ok", *, delay: float = 0.0) -> None:
        self.reply = reply
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []
        self.release = asyncio.Event()
        self.block = False

    async def process_direct(self, message: str, **context: Any) -> str:
        self.calls.append({"message": message, **context})
        if self.block:
            await self.release.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.reply(message) if callable(self.reply) else self.reply
        if isinstance(reply, Exception):
            raise reply
        return reply


def tool_call(name: str, **arguments: Any) -> Dict[str, Any]:
    return {"function": {"name": name, "arguments": arguments}}


@pytest.fixture
def scripted_backend():
    return ScriptedBackend


@pytest.fixture
def recording_router():
    return RecordingRouter()


@pytest.fixture
def fake_agent_cls():
    return FakeAgent


@pytest.fixture
def make_tool_call():
    return tool_call


@pytest.fixture
def capabilities() -> CapabilityRegistry:
    reg = CapabilityRegistry()
    reg.initialize()
    return reg


@pytest.fixture
def executed() -> List[Dict[str, Any]]:
    return []


@pytest.fixture
def make_echo_tool(executed):
    def _make(name: str = "write_file", **kwargs: Any) -> ToolDefinition:
        def _executor(args, context):
            executed.append({"name": name, "args": dict(args), "context": context})
            return {"success": True, "echo": args}

        return ToolDefinition(name=name, description=kwargs.pop("description", f"{name} tool"), executor=_executor, **kwargs)

    return _make


@pytest.fixture
def make_engine(capabilities):
    def _make(backend, *, tools: Sequence[ToolDefinition] = (), max_iterations: int = 20, router=None) -> AgentEngine:
        registry = ToolRegistry()
        for t in tools:
            registry.register(t)
        deps = EngineDeps(
            capabilities=capabilities,
            policy=GlobalPolicy(capabilities),
            tools=registry,
            backend=backend,
            router=router,
            model="test-model",
            system_prompt="You are a test agent.",
            max_iterations=max_iterations,
        )
        return AgentEngine(deps=deps)

    return _make
