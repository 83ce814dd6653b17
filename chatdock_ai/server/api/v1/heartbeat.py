"""
Heartbeat Endpoints.

Inspect and reconfigure the proactive scheduler, or fire a beat on demand.
"""

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from chatdock_ai.agent_core.schemas.domain import HeartbeatStatus
from chatdock_ai.server.schemas import HeartbeatConfigUpdate, HeartbeatTriggerResponse
from chatdock_ai.server.services.deps import RuntimeDep

router = APIRouter()


@router.get("", response_model=HeartbeatStatus, summary="Get Heartbeat Status")
async def get_status(runtime: RuntimeDep) -> HeartbeatStatus:
    return runtime.heartbeat.get_status()


@router.patch(
    "/config",
    response_model=HeartbeatStatus,
    summary="Update Heartbeat Config",
    description="Apply a partial config update; the timer is restarted when needed.",
)
async def update_config(body: HeartbeatConfigUpdate, runtime: RuntimeDep) -> HeartbeatStatus:
    try:
        runtime.heartbeat.update_config(**body.model_dump(exclude_none=True))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return runtime.heartbeat.get_status()


@router.post(
    "/trigger",
    response_model=HeartbeatTriggerResponse,
    summary="Trigger Heartbeat",
    description="Run one beat now. Failures are reported through the scheduler's error event.",
)
async def trigger(runtime: RuntimeDep) -> HeartbeatTriggerResponse:
    return HeartbeatTriggerResponse(response=await runtime.heartbeat.trigger())
