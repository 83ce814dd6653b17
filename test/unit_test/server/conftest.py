from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from chatdock_ai.agent_core.factory import AgentRuntime, build_runtime
from chatdock_ai.server.core.config import Settings


@pytest.fixture
def backend(scripted_backend):
    """Scripted LLM backend shared by the runtime under test; tests may queue replies on it."""
    return scripted_backend()


@pytest.fixture
def runtime(tmp_path: Path, backend) -> AgentRuntime:
    settings = Settings(_env_file=None, CHATDOCK_AI_WORKSPACE_ROOT=tmp_path)
    return build_runtime(settings, backend=backend, persist_state=False)


@pytest_asyncio.fixture(name="client")
async def client_fixture(runtime: AgentRuntime) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the runtime dependency overridden."""
    from chatdock_ai.server.main import app
    from chatdock_ai.server.services.runtime import get_runtime

    app.dependency_overrides[get_runtime] = lambda: runtime

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()
    await runtime.shutdown()
