"""
Capability Policy Endpoints.

This module exposes the live capability registry: the per-capability enabled
flags, the global execution mode and the built-in execution profiles. Every
successful change is persisted by the registry before the response is sent.
"""

from typing import List

from fastapi import APIRouter, HTTPException

from chatdock_ai.agent_core.schemas.domain import ExecutionProfile, RuntimeStateSnapshot
from chatdock_ai.server.schemas import ExecutionModeUpdate
from chatdock_ai.server.services.deps import RuntimeDep

router = APIRouter()


@router.get(
    "",
    response_model=RuntimeStateSnapshot,
    summary="Get Capability State",
    description="Return the execution mode, the active profile and every capability.",
)
async def get_state(runtime: RuntimeDep) -> RuntimeStateSnapshot:
    return runtime.capabilities.current_state()


@router.get(
    "/profiles",
    response_model=List[ExecutionProfile],
    summary="List Execution Profiles",
    description="Return the built-in execution profile templates.",
)
async def list_profiles(runtime: RuntimeDep) -> List[ExecutionProfile]:
    return list(runtime.capabilities.profiles().values())


@router.post(
    "/profiles/{name}/apply",
    response_model=RuntimeStateSnapshot,
    summary="Apply Execution Profile",
    description="Replace every capability flag and the execution mode with a profile template.",
    responses={404: {"description": "Unknown profile"}},
)
async def apply_profile(name: str, runtime: RuntimeDep) -> RuntimeStateSnapshot:
    if not runtime.capabilities.apply_profile(name):
        raise HTTPException(status_code=404, detail=f"Unknown profile: {name}")
    return runtime.capabilities.current_state()


@router.put(
    "/mode",
    response_model=RuntimeStateSnapshot,
    summary="Set Execution Mode",
    description="Switch the global execution mode. Marks the active profile as custom.",
)
async def set_mode(body: ExecutionModeUpdate, runtime: RuntimeDep) -> RuntimeStateSnapshot:
    if not runtime.capabilities.set_execution_mode(body.mode):
        raise HTTPException(status_code=400, detail=f"Invalid execution mode: {body.mode}")
    return runtime.capabilities.current_state()


@router.post(
    "/{cap_type}/enable",
    response_model=RuntimeStateSnapshot,
    summary="Enable Capability",
    responses={404: {"description": "Unknown capability"}},
)
async def enable_capability(cap_type: str, runtime: RuntimeDep) -> RuntimeStateSnapshot:
    """
    Enable a capability.

    Informational (non-executable) capabilities can be enabled but still never
    allow a step to run.
    """
    if not runtime.capabilities.enable(cap_type):
        raise HTTPException(status_code=404, detail=f"Unknown capability: {cap_type}")
    return runtime.capabilities.current_state()


@router.post(
    "/{cap_type}/disable",
    response_model=RuntimeStateSnapshot,
    summary="Disable Capability",
    responses={404: {"description": "Unknown capability"}},
)
async def disable_capability(cap_type: str, runtime: RuntimeDep) -> RuntimeStateSnapshot:
    if not runtime.capabilities.disable(cap_type):
        raise HTTPException(status_code=404, detail=f"Unknown capability: {cap_type}")
    return runtime.capabilities.current_state()
