import pytest
from httpx import AsyncClient

from chatdock_ai.agent_core.backend.base import LLMBackendError

pytestmark = pytest.mark.asyncio


def _write_call(path: str, content: str) -> dict:
    return {"function": {"name": "write_file", "arguments": {"path": path, "content": content}}}


async def test_send_message(client: AsyncClient, backend):
    backend.push({"content": "Hi! How can I help?", "tool_calls": []})

    response = await client.post("/api/v1/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert response.json() == {"reply": "Hi! How can I help?"}


async def test_send_message_backend_failure_is_apology(client: AsyncClient, backend):
    backend.push(LLMBackendError("connection refused"))

    response = await client.post("/api/v1/chat", json={"message": "hello"})

    assert response.status_code == 200
    assert response.json()["reply"] == "Sorry, I encountered an error: connection refused"


async def test_turn_reports_denied_tool_calls(client: AsyncClient, backend, tmp_path):
    backend.push(
        {"content": "", "tool_calls": [_write_call("x.txt", "data")]}, {"content": "Not allowed.", "tool_calls": []}
    )

    response = await client.post("/api/v1/chat/turn", json={"message": "write x", "specialist": "file"})

    assert response.status_code == 200
    data = response.json()
    assert data["reply"] == "Not allowed."
    assert data["iterations"] == 2
    [invocation] = data["tool_invocations"]
    assert invocation["denied"] is True
    assert invocation["capability"] == "write_file"
    assert not (tmp_path / "x.txt").exists()


async def test_turn_executes_after_profile_change(client: AsyncClient, backend, tmp_path):
    await client.post("/api/v1/capabilities/profiles/editor/apply")
    backend.push(
        {"content": "", "tool_calls": [_write_call("x.txt", "data")]}, {"content": "Saved.", "tool_calls": []}
    )

    response = await client.post("/api/v1/chat/turn", json={"message": "write x"})

    assert response.json()["tool_invocations"][0]["ok"] is True
    assert (tmp_path / "x.txt").read_text() == "data"


async def test_turn_backend_failure_returns_502(client: AsyncClient, backend):
    backend.push(LLMBackendError("model overloaded", status_code=503))

    response = await client.post("/api/v1/chat/turn", json={"message": "hello"})

    assert response.status_code == 502
    assert response.json() == {"detail": "model overloaded", "error_type": "LLMBackendError", "status_code": 503}


async def test_empty_message_rejected(client: AsyncClient):
    response = await client.post("/api/v1/chat", json={"message": ""})
    assert response.status_code == 422
