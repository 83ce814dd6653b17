from __future__ import annotations

import asyncio

import pytest
from pydantic import BaseModel, ValidationError

from chatdock_ai.agent_core.specialists import Specialist
from chatdock_ai.agent_core.tools.base import ToolContext, ToolDefinition
from chatdock_ai.agent_core.tools.registry import ToolRegistry


class _GreetInput(BaseModel):
    who: str
    times: int = 1


def _greet(args, context):
    return {"greeting": " ".join([f"hi {args['who']}"] * args["times"])}


@pytest.fixture
def registry() -> ToolRegistry:
    reg = ToolRegistry()
    reg.register(
        ToolDefinition(
            name="greet",
            description="Say hello to someone",
            executor=_greet,
            input_schema=_GreetInput,
            specialists={Specialist.conversation},
            keywords=["hello", "greeting"],
        )
    )
    return reg


class TestDefinition:
    def test_parameters_derived_from_input_schema(self, registry: ToolRegistry) -> None:
        tool = registry.get("greet")
        assert tool is not None
        assert set(tool.parameters["properties"]) == {"who", "times"}
        assert tool.specialists == frozenset({"conversation"})
        assert tool.capability_type == "greet"

    def test_default_parameters_block(self) -> None:
        tool = ToolDefinition(name="noop", executor=lambda a, c: None)
        assert tool.parameters == {"type": "object", "properties": {}}
        assert tool.to_llm_format()["function"]["name"] == "noop"

    def test_register_rejects_invalid_definitions(self) -> None:
        reg = ToolRegistry()
        with pytest.raises(ValidationError):
            reg.register({"name": "", "executor": lambda a, c: None})
        with pytest.raises(ValidationError):
            reg.register({"name": "x", "executor": "not callable"})

    def test_register_from_mapping_and_unregister(self) -> None:
        reg = ToolRegistry()
        reg.register({"name": "noop", "executor": lambda a, c: None})
        assert reg.has("noop") and len(reg) == 1
        assert reg.unregister("noop") is True
        assert reg.unregister("noop") is False


class TestScoping:
    def test_specialist_filter(self, registry: ToolRegistry) -> None:
        registry.register(ToolDefinition(name="anywhere", executor=lambda a, c: None))
        assert {t.name for t in registry.get_tools_for_specialist(Specialist.file)} == {"anywhere"}
        assert {t.name for t in registry.get_tools_for_specialist("conversation")} == {"greet", "anywhere"}
        assert {t.name for t in registry.get_tools_for_specialist(None)} == {"greet", "anywhere"}
        assert registry.resolve("greet", Specialist.file) is None
        assert registry.resolve("greet", Specialist.conversation) is not None


class TestSearch:
    def test_scoring_and_ordering(self) -> None:
        reg = ToolRegistry()
        noop = lambda a, c: None  # noqa: E731
        reg.register(ToolDefinition(name="list_notes", description="List notes", executor=noop))
        reg.register(ToolDefinition(name="archive", description="Move old notes away", executor=noop, keywords=["notes"]))
        reg.register(ToolDefinition(name="unrelated", description="Nothing here", executor=noop))

        results = reg.search("notes")
        # list_notes: 10 + 2; archive: 2 + 5
        assert [t.name for t in results] == ["list_notes", "archive"]
        assert reg.search("   ") == []
        assert [t.name for t in reg.search("notes", limit=1)] == ["list_notes"]


class TestExecute:
    @pytest.mark.asyncio
    async def test_success_wraps_result(self, registry: ToolRegistry) -> None:
        result = await registry.execute("greet", {"who": "ada", "times": 2})
        assert result == {"success": True, "greeting": "hi ada hi ada"}

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry: ToolRegistry) -> None:
        assert await registry.execute("nope", {}) == {"success": False, "error": "Tool not found: nope"}

    @pytest.mark.asyncio
    async def test_out_of_scope_specialist(self, registry: ToolRegistry) -> None:
        result = await registry.execute("greet", {"who": "x"}, ToolContext(specialist="file"))
        assert result["success"] is False
        assert "not available to specialist 'file'" in result["error"]

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, registry: ToolRegistry) -> None:
        result = await registry.execute("greet", {"times": "many"})
        assert result["success"] is False
        assert result["error"].startswith("Invalid arguments for greet")

    @pytest.mark.asyncio
    async def test_executor_exception_is_reported(self) -> None:
        def boom(args, context):
            raise RuntimeError("disk on fire")

        reg = ToolRegistry()
        reg.register(ToolDefinition(name="boom", executor=boom))
        result = await reg.execute("boom", {})
        assert result == {"success": False, "error": "Tool boom failed: disk on fire"}

    @pytest.mark.asyncio
    async def test_async_executor_and_non_dict_result(self) -> None:
        async def slow(args, context):
            await asyncio.sleep(0)
            return 3

        reg = ToolRegistry()
        reg.register(ToolDefinition(name="slow", executor=slow))
        assert await reg.execute("slow") == {"success": True, "result": 3}

    @pytest.mark.asyncio
    async def test_executor_receives_context(self) -> None:
        seen = []
        reg = ToolRegistry()
        reg.register(ToolDefinition(name="ctx", executor=lambda a, c: seen.append(c) or {"success": True}))
        ctx = ToolContext(channel_type="slack", chat_id="c1", is_subagent=True)
        await reg.execute("ctx", {}, ctx)
        assert seen == [ctx]
