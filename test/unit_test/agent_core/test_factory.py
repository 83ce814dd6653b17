from __future__ import annotations

import json
from pathlib import Path

import pytest

from chatdock_ai.agent_core.backend.ollama import OllamaChatBackend
from chatdock_ai.agent_core.factory import build_capability_registry, build_runtime
from chatdock_ai.agent_core.tools.base import ToolDefinition
from chatdock_ai.server.core.config import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        CHATDOCK_AI_WORKSPACE_ROOT=tmp_path,
        CHATDOCK_AI_MAX_ITERATIONS=4,
        CHATDOCK_AI_LLM_BASE_URL="http://mock",
        CHATDOCK_AI_LLM_MODEL="unit-model",
    )


def test_build_capability_registry_in_memory() -> None:
    registry = build_capability_registry(None)
    assert registry.active_profile == "safe"


@pytest.mark.asyncio
async def test_runtime_wires_one_shared_registry(settings: Settings, scripted_backend) -> None:
    runtime = build_runtime(settings, backend=scripted_backend())

    assert runtime.policy.registry is runtime.capabilities
    assert runtime.engine.deps.capabilities is runtime.capabilities
    assert runtime.engine.deps.max_iterations == 4
    assert runtime.engine.deps.model == "unit-model"
    assert {t.name for t in runtime.tools.list_tools()} == {"read_file", "write_file", "edit_file", "move_file"}
    assert runtime.heartbeat.config.enabled is False
    assert runtime.subagent_max_age_ms == 3_600_000

    state = json.loads(settings.runtime_state_path.read_text())
    assert state["activeProfile"] == "safe"
    await runtime.shutdown()


@pytest.mark.asyncio
async def test_default_backend_comes_from_settings(settings: Settings) -> None:
    runtime = build_runtime(settings, persist_state=False)

    assert isinstance(runtime.backend, OllamaChatBackend)
    assert runtime.backend.base_url == "http://mock"
    assert runtime.backend.model == "unit-model"
    assert not settings.runtime_state_path.exists()
    await runtime.shutdown()


@pytest.mark.asyncio
async def test_extra_tools_are_registered(settings: Settings, scripted_backend) -> None:
    extra = ToolDefinition(name="organize_notes", capability="organize_files", executor=lambda a, c: {"success": True})
    runtime = build_runtime(settings, backend=scripted_backend(), extra_tools=[extra], persist_state=False)
    assert runtime.tools.get("organize_notes").capability_type == "organize_files"


@pytest.mark.asyncio
async def test_end_to_end_write_under_editor_profile(settings: Settings, scripted_backend, make_tool_call) -> None:
    backend = scripted_backend(
        [
            {"content": "", "tool_calls": [make_tool_call("write_file", path="hello.txt", content="hi")]},
            {"content": "Saved hello.txt", "tool_calls": []},
        ]
    )
    runtime = build_runtime(settings, backend=backend)
    runtime.capabilities.apply_profile("editor")

    reply = await runtime.service.handle_message("save a greeting", specialist="file")

    assert reply == "Saved hello.txt"
    assert (Path(settings.workspace_root) / "hello.txt").read_text() == "hi"
    await runtime.shutdown()


@pytest.mark.asyncio
async def test_subagents_share_the_policy_gate(settings: Settings, scripted_backend, make_tool_call) -> None:
    backend = scripted_backend([{"content": "", "tool_calls": [make_tool_call("write_file", path="bg.txt", content="x")]}])
    runtime = build_runtime(settings, backend=backend, persist_state=False)

    view = runtime.subagents.spawn("write in background")
    final = await runtime.subagents.wait(view.id, timeout=2)

    assert final.status.value == "completed"
    assert not (Path(settings.workspace_root) / "bg.txt").exists()
    await runtime.shutdown()
