"""Ollama chat backend.

Thin async client for an Ollama-compatible ``/api/chat`` endpoint.

- Non-streaming requests return the ``message`` of the JSON reply.
- Streaming requests read the NDJSON body line by line and reassemble it into
  the same ``{content, tool_calls, model}`` shape (see ``reassemble_stream``).

Transport and protocol failures are raised as ``LLMBackendError``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .base import LLMBackendError

logger = logging.getLogger(__name__)


def _message_of(payload: Dict[str, Any]) -> Dict[str, Any]:
    message = payload.get("message")
    return message if isinstance(message, dict) else {}


def reassemble_stream(lines: Iterable[str]) -> Dict[str, Any]:
    """
    Fold NDJSON stream chunks into a single reply.

    Content fragments are concatenated in order, tool-call lists are
    accumulated, and the model name of the last chunk wins. Blank or
    unparseable lines are skipped.
    """
    content_parts: List[str] = []
    tool_calls: List[Any] = []
    model: Optional[str] = None

    for line in lines:
        if not line or not line.strip():
            continue
        try:
            chunk = json.loads(line)
        except ValueError:
            logger.warning(f"Skipping malformed stream chunk: {line[:200]!r}")
            continue
        if not isinstance(chunk, dict):
            continue
        if chunk.get("error"):
            raise LLMBackendError(f"Backend stream error: {chunk['error']}", details=chunk)

        message = _message_of(chunk)
        piece = message.get("content")
        if isinstance(piece, str):
            content_parts.append(piece)
        calls = message.get("tool_calls")
        if isinstance(calls, list):
            tool_calls.extend(calls)
        if isinstance(chunk.get("model"), str):
            model = chunk["model"]

    return {"content": "".join(content_parts), "tool_calls": tool_calls, "model": model}


class OllamaChatBackend:
    """Async HTTP client for the Ollama chat API."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        *,
        model: str = "qwen2.5:7b",
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Args:
            base_url: Server root, e.g. ``http://localhost:11434``.
            model: Default model used when ``chat`` is not given one.
            timeout: Request timeout in seconds for the internal client.
            client: Preconfigured ``httpx.AsyncClient`` (tests pass one backed
                by ``httpx.MockTransport``).
            options: Extra sampling options forwarded as ``options``.
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._options = dict(options or {})
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _payload(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]],
        stream: bool,
        model: Optional[str],
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": model or self.model, "messages": messages, "stream": stream}
        if tools:
            payload["tools"] = tools
        if self._options:
            payload["options"] = self._options
        return payload

    async def chat(
        self,
        *,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        stream: bool = False,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/api/chat"
        payload = self._payload(messages, tools, stream, model)
        logger.debug(f"POST {url} model={payload['model']} stream={stream} tools={len(tools or [])}")

        try:
            if stream:
                async with self._client.stream("POST", url, json=payload) as response:
                    if response.status_code >= 400:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        raise LLMBackendError(
                            f"Backend error: HTTP {response.status_code}",
                            status_code=response.status_code,
                            details=body,
                        )
                    lines = [line async for line in response.aiter_lines()]
                return reassemble_stream(lines)

            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise LLMBackendError(f"Backend request failed: {e}") from e

        if response.status_code >= 400:
            raise LLMBackendError(
                f"Backend error: HTTP {response.status_code}",
                status_code=response.status_code,
                details=response.text,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise LLMBackendError("Backend returned invalid JSON", details=response.text) from e
        if not isinstance(data, dict):
            raise LLMBackendError("Backend returned an unexpected payload", details=data)

        message = _message_of(data)
        return {
            "content": message.get("content") or "",
            "tool_calls": message.get("tool_calls") or [],
            "model": data.get("model"),
        }

    async def health_check(self) -> Dict[str, Any]:
        """Return ``{"ok": True, "version": ...}`` or ``{"ok": False, "error": ...}``."""
        try:
            response = await self._client.get(f"{self.base_url}/api/version", timeout=5.0)
        except httpx.HTTPError as e:
            return {"ok": False, "error": str(e) or "Connection failed"}
        if response.status_code >= 400:
            return {"ok": False, "error": f"HTTP {response.status_code}"}
        try:
            data = response.json()
        except ValueError:
            data = None
        return {"ok": True, "version": data.get("version") if isinstance(data, dict) else None}

    async def list_models(self) -> List[str]:
        try:
            response = await self._client.get(f"{self.base_url}/api/tags")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Could not list models: {e}")
            return []
        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            return []
        return [m["name"] for m in models if isinstance(m, dict) and m.get("name")]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
