from __future__ import annotations

import pytest

from chatdock_ai.agent_core.backend.base import LLMBackendError
from chatdock_ai.agent_core.service import ERROR_REPLY_PREFIX, AgentService


@pytest.mark.asyncio
async def test_reply_is_returned_and_routed(make_engine, scripted_backend, recording_router) -> None:
    engine = make_engine(scripted_backend([{"content": "pong", "tool_calls": []}]))
    service = AgentService(engine=engine, router=recording_router)

    reply = await service.handle_message("ping", channel_type="telegram", chat_id="42")

    assert reply == "pong"
    [sent] = recording_router.sent
    assert (sent.content, sent.channel_type, sent.chat_id) == ("pong", "telegram", "42")


@pytest.mark.asyncio
async def test_no_routing_without_origin(make_engine, scripted_backend, recording_router) -> None:
    service = AgentService(engine=make_engine(scripted_backend()), router=recording_router)
    assert await service.handle_message("ping") == "done"
    assert recording_router.sent == []


@pytest.mark.asyncio
async def test_backend_failure_becomes_apology(make_engine, scripted_backend, recording_router) -> None:
    engine = make_engine(scripted_backend([LLMBackendError("connection refused")]))
    service = AgentService(engine=engine, router=recording_router)

    reply = await service.handle_message("ping", channel_type="telegram", chat_id="42")

    assert reply == f"{ERROR_REPLY_PREFIX}connection refused"
    assert recording_router.sent[0].content == reply


@pytest.mark.asyncio
async def test_router_failure_does_not_lose_reply(make_engine, scripted_backend) -> None:
    class BrokenRouter:
        async def send_to_channel(self, message):
            raise ConnectionError("gone")

    service = AgentService(engine=make_engine(scripted_backend()), router=BrokenRouter())
    assert await service.handle_message("ping", channel_type="x", chat_id="y") == "done"
