"""
Background Task Endpoints.

This module manages sub-agents: spawning background turns, inspecting and
cancelling them, and reaping finished records.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from chatdock_ai.agent_core.schemas.domain import SubagentStatus, SubagentStatusView
from chatdock_ai.server.schemas import CleanupResponse, SubagentSpawnRequest
from chatdock_ai.server.services.deps import RuntimeDep

router = APIRouter()


@router.get(
    "",
    response_model=List[SubagentStatusView],
    summary="List Background Tasks",
    description="List every tracked background task, optionally filtered by status.",
)
async def list_subagents(runtime: RuntimeDep, status: Optional[SubagentStatus] = None) -> List[SubagentStatusView]:
    return runtime.subagents.list(status)


@router.post(
    "",
    response_model=SubagentStatusView,
    status_code=202,
    summary="Spawn Background Task",
    description="Start a background agent turn. Returns immediately with a running record.",
)
async def spawn_subagent(body: SubagentSpawnRequest, runtime: RuntimeDep) -> SubagentStatusView:
    return runtime.subagents.spawn(
        body.task,
        name=body.name,
        notify=body.notify,
        channel_type=body.channel_type,
        chat_id=body.chat_id,
    )


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Clean Up Finished Tasks",
    description="Remove finished records older than max_age_ms (defaults to the configured age).",
)
async def cleanup_subagents(
    runtime: RuntimeDep,
    max_age_ms: Optional[int] = Query(default=None, ge=0),
) -> CleanupResponse:
    age = runtime.subagent_max_age_ms if max_age_ms is None else max_age_ms
    return CleanupResponse(removed=runtime.subagents.cleanup(age))


@router.get(
    "/{subagent_id}",
    response_model=SubagentStatusView,
    summary="Get Background Task",
    responses={404: {"description": "Unknown background task"}},
)
async def get_subagent(subagent_id: str, runtime: RuntimeDep) -> SubagentStatusView:
    view = runtime.subagents.get_status(subagent_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Subagent not found")
    return view


@router.post(
    "/{subagent_id}/cancel",
    response_model=SubagentStatusView,
    summary="Cancel Background Task",
    description="Mark a running task cancelled; its eventual outcome is discarded.",
    responses={404: {"description": "Unknown background task"}, 409: {"description": "Task already finished"}},
)
async def cancel_subagent(subagent_id: str, runtime: RuntimeDep) -> SubagentStatusView:
    if runtime.subagents.get_status(subagent_id) is None:
        raise HTTPException(status_code=404, detail="Subagent not found")
    if not runtime.subagents.cancel(subagent_id):
        raise HTTPException(status_code=409, detail="Subagent is not running")
    return runtime.subagents.get_status(subagent_id)
