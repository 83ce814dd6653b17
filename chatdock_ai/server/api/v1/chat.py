"""
Chat Endpoints.

Foreground entry point for user messages. ``POST /chat`` behaves like a chat
channel (failures become an apology reply); ``POST /chat/turn`` returns the
full turn outcome including the tool-call audit trail.
"""

from fastapi import APIRouter

from chatdock_ai.server.schemas import ChatRequest, ChatResponse, ChatTurnResponse
from chatdock_ai.server.services.deps import RuntimeDep

router = APIRouter()


@router.post("", response_model=ChatResponse, summary="Send Message")
async def send_message(body: ChatRequest, runtime: RuntimeDep) -> ChatResponse:
    reply = await runtime.service.handle_message(
        body.message,
        channel_type=body.channel_type,
        chat_id=body.chat_id,
        specialist=body.specialist,
        history=body.history,
    )
    return ChatResponse(reply=reply)


@router.post(
    "/turn",
    response_model=ChatTurnResponse,
    summary="Run Turn",
    responses={502: {"description": "LLM backend unavailable"}},
)
async def run_turn(body: ChatRequest, runtime: RuntimeDep) -> ChatTurnResponse:
    result = await runtime.engine.run_turn(
        body.message,
        specialist=body.specialist,
        channel_type=body.channel_type,
        chat_id=body.chat_id,
        history=body.history,
    )
    return ChatTurnResponse(
        reply=result.content,
        iterations=result.iterations,
        hit_iteration_limit=result.hit_iteration_limit,
        tool_invocations=result.tool_invocations,
    )
