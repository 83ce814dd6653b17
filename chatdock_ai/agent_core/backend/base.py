"""LLM backend interface and error type.

The agent engine talks to the model through ``LLMBackend.chat``. The reply is
a plain ``{"content": str, "tool_calls": list}`` dict in whatever tool-call
wire shape the model produced; the normalizer makes sense of it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


class LLMBackendError(Exception):
    """Raised when the model backend cannot produce a reply.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code when the failure came from the server.
        details: Response body or other diagnostic payload.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


@runtime_checkable
class LLMBackend(Protocol):
    async def chat(
        self,
        *,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        stream: bool = False,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return ``{"content": ..., "tool_calls": [...]}`` or raise ``LLMBackendError``."""
        ...
