"""
Process runtime holder.

The application lifespan builds one ``AgentRuntime`` and registers it here;
endpoints obtain it through ``RuntimeDep``.
"""

from typing import Optional

from fastapi import HTTPException

from chatdock_ai.agent_core.factory import AgentRuntime

_runtime: Optional[AgentRuntime] = None


def set_runtime(runtime: Optional[AgentRuntime]) -> None:
    global _runtime
    _runtime = runtime


def get_runtime() -> AgentRuntime:
    if _runtime is None:
        raise HTTPException(status_code=503, detail="Agent runtime is not initialized")
    return _runtime
