from __future__ import annotations

"""Tool registry with specialist scoping.

The registry maps tool names to ``ToolDefinition`` objects and is the single
place tool executors are invoked from. ``execute`` never raises: every failure
(unknown tool, out-of-scope call, bad arguments, executor error) comes back as
a ``{"success": False, "error": ...}`` result the model can read.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .base import ToolContext, ToolDefinition

logger = logging.getLogger(__name__)


def _key(specialist: Any) -> Optional[str]:
    if specialist is None:
        return None
    return specialist.value if isinstance(specialist, Enum) else str(specialist)


def _wrap_result(result: Any) -> Dict[str, Any]:
    if not isinstance(result, dict):
        return {"success": True, "result": result}
    if "success" not in result:
        return {"success": True, **result}
    return result


class ToolRegistry:
    """In-memory catalogue of tools keyed by name."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    def register(self, tool: ToolDefinition | Mapping[str, Any]) -> ToolDefinition:
        """
        Register a tool, replacing any previous tool with the same name.

        Raises:
            ValueError: If the tool has no name or its executor is not callable.
        """
        if not isinstance(tool, ToolDefinition):
            tool = ToolDefinition.model_validate(dict(tool))
        if not tool.name.strip():
            raise ValueError("Tool must have a name")
        if not callable(tool.executor):
            raise ValueError(f"Tool {tool.name} must have a callable executor")
        if tool.name in self._tools:
            logger.warning(f"Replacing already registered tool: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name} (capability={tool.capability_type})")
        return tool

    def unregister(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def get_tools_for_specialist(self, specialist: Any = None) -> List[ToolDefinition]:
        """Return the tools visible to ``specialist``; ``None`` returns every tool."""
        key = _key(specialist)
        return [t for t in self._tools.values() if t.is_visible_to(key)]

    def get_llm_tools(self, specialist: Any = None) -> List[Dict[str, Any]]:
        """Tool list in function-calling format for the given specialist."""
        return [t.to_llm_format() for t in self.get_tools_for_specialist(specialist)]

    def resolve(self, name: str, specialist: Any = None) -> Optional[ToolDefinition]:
        """Return the named tool if it exists and ``specialist`` may use it."""
        tool = self._tools.get(name)
        if tool is None or not tool.is_visible_to(_key(specialist)):
            return None
        return tool

    def search(self, query: str, limit: int = 5) -> List[ToolDefinition]:
        """
        Keyword search over registered tools.

        Scoring: +10 when the whole query occurs in the tool name, +2 for each
        query token found in the description, +5 for each tool keyword equal to
        a query token. Tools scoring zero are omitted; ties keep registration
        order.
        """
        query_lower = (query or "").strip().lower()
        if not query_lower:
            return []
        tokens = query_lower.split()

        scored = []
        for tool in self._tools.values():
            score = 0
            if query_lower in tool.name.lower():
                score += 10
            desc = tool.description.lower()
            score += sum(2 for token in tokens if token in desc)
            score += sum(5 for kw in tool.keywords if kw.lower() in tokens)
            if score > 0:
                scored.append((score, tool))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [tool for _, tool in scored[: max(limit, 0)]]

    async def execute(
        self,
        name: str,
        args: Optional[Dict[str, Any]] = None,
        context: Optional[ToolContext] = None,
    ) -> Dict[str, Any]:
        """
        Run a tool executor and return its result dict.

        There is no suspension point between entry and the start of the
        executor call, so a caller that checked the policy immediately before
        awaiting this method runs the executor under that same decision.

        Args:
            name: Tool name as requested by the model.
            args: Parsed arguments.
            context: Execution context; its ``specialist`` scopes the call.

        Returns:
            The executor's result, normalized to carry a ``success`` flag.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning(f"Tool not found: {name}")
            return {"success": False, "error": f"Tool not found: {name}"}

        specialist = context.specialist if context is not None else None
        if not tool.is_visible_to(specialist):
            logger.warning(f"Tool {name} requested outside its scope by specialist '{specialist}'")
            return {"success": False, "error": f"Tool {name} is not available to specialist '{specialist}'"}

        call_args: Dict[str, Any] = dict(args or {})
        if tool.input_schema is not None:
            try:
                call_args = tool.input_schema.model_validate(call_args).model_dump()
            except ValidationError as e:
                logger.warning(f"Invalid arguments for tool {name}: {e}")
                return {"success": False, "error": f"Invalid arguments for {name}: {e}"}

        try:
            result = tool.executor(call_args, context)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            return {"success": False, "error": f"Tool {name} failed: {e}"}

        return _wrap_result(result)
