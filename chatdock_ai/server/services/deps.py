"""
Runtime Dependency.

Provides the process ``AgentRuntime`` to API endpoints.
"""

from typing import Annotated

from fastapi import Depends

from chatdock_ai.agent_core.factory import AgentRuntime
from chatdock_ai.server.services.runtime import get_runtime

RuntimeDep = Annotated[AgentRuntime, Depends(get_runtime)]
