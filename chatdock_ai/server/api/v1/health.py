"""
Health Check Endpoints.

``/health`` answers as long as the process is up; ``/health/backend`` also
probes the LLM backend so a deployment can tell a dead model server apart from
a dead API.
"""

from fastapi import APIRouter

from chatdock_ai.server.core import constant
from chatdock_ai.server.services.deps import RuntimeDep

router = APIRouter()


@router.get("/health", summary="Health Check", response_description="Status object.")
async def health_check():
    return {"status": "ok"}


@router.get(
    "/health/backend",
    summary="Backend Health",
    description="Probe the configured LLM backend. Backends without a probe report ``unknown``.",
)
async def backend_health(runtime: RuntimeDep):
    probe = getattr(runtime.backend, "health_check", None)
    if probe is None:
        return {"status": "unknown"}
    result = await probe()
    return {"status": "ok" if result.get("ok") else "unavailable", **result}


@router.get("/version", summary="Get Version", response_description="Version object.")
async def version():
    """Return the server version and the API schema version."""
    return {"version": constant.VERSION, "schema_version": "v1"}
