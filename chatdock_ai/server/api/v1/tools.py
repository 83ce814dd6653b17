"""
Tool Catalogue Endpoints.

List the registered tools (optionally as seen by one specialist) and search
them by keyword.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from chatdock_ai.agent_core.tools.base import ToolDefinition
from chatdock_ai.server.schemas import ToolSummary
from chatdock_ai.server.services.deps import RuntimeDep

router = APIRouter()


def _summary(tool: ToolDefinition) -> ToolSummary:
    return ToolSummary(
        name=tool.name,
        description=tool.description,
        capability=tool.capability_type,
        category=tool.category,
        specialists=sorted(tool.specialists) if tool.specialists is not None else None,
        parameters=tool.parameters,
    )


@router.get("", response_model=List[ToolSummary], summary="List Tools")
async def list_tools(runtime: RuntimeDep, specialist: Optional[str] = None) -> List[ToolSummary]:
    return [_summary(t) for t in runtime.tools.get_tools_for_specialist(specialist)]


@router.get("/search", response_model=List[ToolSummary], summary="Search Tools")
async def search_tools(
    runtime: RuntimeDep,
    q: str = Query(..., min_length=1),
    limit: int = Query(default=5, ge=1, le=50),
) -> List[ToolSummary]:
    return [_summary(t) for t in runtime.tools.search(q, limit)]
