from __future__ import annotations

"""Foreground entry point for user messages.

``AgentService`` wraps ``AgentEngine.process_direct`` for interactive chats:

1. Runs one turn for the incoming message.
2. Converts a failed turn into an apology reply instead of an exception.
3. Delivers the reply through the message router when one is attached and
   the message came from a known channel/chat.

``AgentService`` is intentionally thin: gating and tool execution live in the
engine.
"""

import logging
from typing import Any, Dict, List, Optional

from .runtime.engine import AgentEngine
from .schemas.domain import OutboundMessage
from .transport import MessageRouter

logger = logging.getLogger(__name__)

ERROR_REPLY_PREFIX = "Sorry, I encountered an error: "


class AgentService:
    """Handle one foreground message at a time per call; calls may overlap."""

    def __init__(self, *, engine: AgentEngine, router: Optional[MessageRouter] = None) -> None:
        self._engine = engine
        self._router = router

    @property
    def engine(self) -> AgentEngine:
        return self._engine

    async def handle_message(
        self,
        message: str,
        *,
        channel_type: Optional[str] = None,
        chat_id: Optional[str] = None,
        specialist: Any = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """Run a turn for ``message`` and return (and route) the reply."""
        try:
            reply = await self._engine.process_direct(
                message,
                specialist=specialist,
                channel_type=channel_type,
                chat_id=chat_id,
                history=history,
            )
        except Exception as e:
            logger.error(f"Agent turn failed: {e}", exc_info=True)
            reply = f"{ERROR_REPLY_PREFIX}{e}"

        await self._route(reply, channel_type=channel_type, chat_id=chat_id)
        return reply

    async def _route(self, reply: str, *, channel_type: Optional[str], chat_id: Optional[str]) -> None:
        if self._router is None or not channel_type or not chat_id or not reply:
            return
        try:
            delivered = await self._router.send_to_channel(
                OutboundMessage(content=reply, chat_id=chat_id, channel_type=channel_type)
            )
        except Exception as e:
            logger.error(f"Failed to deliver reply to {channel_type}:{chat_id}: {e}")
            return
        if not delivered:
            logger.warning(f"Router did not deliver reply to {channel_type}:{chat_id}")
