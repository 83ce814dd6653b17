import asyncio

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class _GatedBackend:
    """Backend that holds every reply until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()

    async def chat(self, *, messages, tools=None, stream=False, model=None):
        await self.release.wait()
        return {"content": "background result", "tool_calls": []}


@pytest.fixture
def backend():
    return _GatedBackend()


async def test_spawn_then_complete(client: AsyncClient, backend, runtime):
    response = await client.post("/api/v1/subagents", json={"task": "summarize", "name": "digest"})
    assert response.status_code == 202
    view = response.json()
    assert view["status"] == "running"
    assert view["name"] == "digest"

    backend.release.set()
    await runtime.subagents.wait(view["id"], timeout=1)

    response = await client.get(f"/api/v1/subagents/{view['id']}")
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["result"] == "background result"


async def test_list_with_status_filter(client: AsyncClient, backend):
    await client.post("/api/v1/subagents", json={"task": "a"})
    await client.post("/api/v1/subagents", json={"task": "b"})

    response = await client.get("/api/v1/subagents", params={"status": "running"})
    assert [v["task"] for v in response.json()] == ["a", "b"]

    response = await client.get("/api/v1/subagents", params={"status": "completed"})
    assert response.json() == []

    response = await client.get("/api/v1/subagents", params={"status": "exploded"})
    assert response.status_code == 422


async def test_cancel(client: AsyncClient, backend, runtime):
    view = (await client.post("/api/v1/subagents", json={"task": "slow"})).json()

    response = await client.post(f"/api/v1/subagents/{view['id']}/cancel")
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = await client.post(f"/api/v1/subagents/{view['id']}/cancel")
    assert response.status_code == 409

    backend.release.set()
    await runtime.subagents.wait(view["id"], timeout=1)
    assert (await client.get(f"/api/v1/subagents/{view['id']}")).json()["status"] == "cancelled"


async def test_unknown_subagent_returns_404(client: AsyncClient):
    assert (await client.get("/api/v1/subagents/nope")).status_code == 404
    assert (await client.post("/api/v1/subagents/nope/cancel")).status_code == 404


async def test_cleanup(client: AsyncClient, backend, runtime):
    view = (await client.post("/api/v1/subagents", json={"task": "quick"})).json()
    backend.release.set()
    await runtime.subagents.wait(view["id"], timeout=1)

    response = await client.post("/api/v1/subagents/cleanup")
    assert response.json() == {"removed": 0}

    await asyncio.sleep(0.01)
    response = await client.post("/api/v1/subagents/cleanup", params={"max_age_ms": 0})
    assert response.json() == {"removed": 1}
    assert (await client.get("/api/v1/subagents")).json() == []
