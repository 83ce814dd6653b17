from __future__ import annotations

"""Tool-call normalization.

Models emit tool calls in several wire shapes. ``normalize`` turns any of them
into canonical ``ToolCall`` records and never raises:

- ``function_wrapper``: ``{"function": {"name": ..., "arguments": ...}}``
- ``flat``: ``{"name": ..., "arguments"|"parameters"|"args": ...}``
- ``embedded``: one of the above written as JSON inside the message text,
  optionally fenced in a code block and/or wrapped in ``<tool_call>`` tags.

Structured ``tool_calls`` always win. Text is only scanned when the structured
field yields nothing, and an embedded object only counts as a call when it
carries both a name and an ``arguments``/``parameters`` field, so ordinary JSON
the model writes conversationally is left alone.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ..schemas.domain import NormalizedMessage, ToolCall

logger = logging.getLogger(__name__)

_ARGUMENT_KEYS = ("arguments", "parameters", "args")
_EMBEDDED_ARGUMENT_KEYS = ("arguments", "parameters")

_OBJECT_START = re.compile(r'\{\s*["}]')

# Wrappers a model puts around an embedded call, as (opener ending at the
# fragment, closer starting right after it).
_FENCE_OPEN = re.compile(r"```[\w-]*\s*\Z")
_FENCE_CLOSE = re.compile(r"\s*```")
_TAG_OPEN = re.compile(r"<tool_call>\s*\Z", re.IGNORECASE)
_TAG_CLOSE = re.compile(r"\s*</tool_call>", re.IGNORECASE)
_INLINE_OPEN = re.compile(r"(?<!`)`\Z")
_INLINE_CLOSE = re.compile(r"`(?!`)")
_WRAPPERS = (
    (_FENCE_OPEN, _FENCE_CLOSE),
    (_TAG_OPEN, _TAG_CLOSE),
    (_INLINE_OPEN, _INLINE_CLOSE),
)


class WireShape(str, Enum):
    function_wrapper = "function_wrapper"
    flat = "flat"
    embedded = "embedded"


def _looks_like_tool_call(obj: Dict[str, Any]) -> bool:
    fn = obj.get("function")
    fn = fn if isinstance(fn, dict) else {}
    name = obj.get("name") or fn.get("name")
    has_name = isinstance(name, str) and bool(name.strip())
    has_args = any(k in obj for k in _EMBEDDED_ARGUMENT_KEYS) or "arguments" in fn
    return has_name and has_args


def classify_wire_shape(raw: Any, in_content: bool = False) -> Optional[WireShape]:
    """
    Return the wire shape of a single tool-call entry, if any.

    Objects scraped from message text (``in_content=True``) are stricter: they
    are ``embedded`` only when they carry a name and an arguments field.
    """
    if not isinstance(raw, dict):
        return None
    if in_content:
        return WireShape.embedded if _looks_like_tool_call(raw) else None
    if isinstance(raw.get("function"), dict):
        return WireShape.function_wrapper
    if "name" in raw:
        return WireShape.flat
    return None


def parse_tool_arguments(raw: Any) -> Dict[str, Any]:
    """
    Coerce a tool-call arguments field into a dict.

    Strings are parsed as JSON; empty strings, parse failures and JSON values
    that are not objects all become ``{}``.
    """
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning(f"Failed to parse tool arguments string: {raw[:200]!r}")
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def _first_present(body: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if body.get(key) is not None:
            return body[key]
    return None


def normalize_tool_call(raw: Any, in_content: bool = False) -> Optional[ToolCall]:
    """Normalize one entry; returns ``None`` (and logs) when unusable."""
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()

    shape = classify_wire_shape(raw, in_content=in_content)
    if shape is WireShape.function_wrapper:
        body = raw["function"]
    elif shape is WireShape.flat:
        body = raw
    elif shape is WireShape.embedded:
        body = raw["function"] if isinstance(raw.get("function"), dict) else raw
    else:
        logger.warning(f"Dropping tool call with unrecognized shape: {str(raw)[:200]}")
        return None

    name = body.get("name")
    if not isinstance(name, str) or not name.strip():
        logger.warning(f"Dropping tool call without a valid name: {str(raw)[:200]}")
        return None

    try:
        return ToolCall(name=name.strip(), arguments=parse_tool_arguments(_first_present(body, _ARGUMENT_KEYS)))
    except ValidationError as e:
        logger.warning(f"Dropping tool call '{name}' with invalid arguments: {e}")
        return None


def normalize_tool_calls(raw: Any) -> List[ToolCall]:
    """Normalize a structured ``tool_calls`` field, preserving order."""
    if not isinstance(raw, (list, tuple)):
        return []
    calls: List[ToolCall] = []
    for entry in raw:
        call = normalize_tool_call(entry)
        if call is not None:
            calls.append(call)
    return calls


def _parse_object(content: str, start: int, end: int) -> Optional[Dict[str, Any]]:
    if not _OBJECT_START.match(content, start):
        return None
    try:
        obj = json.loads(content[start:end])
    except (ValueError, RecursionError):
        return None
    return obj if isinstance(obj, dict) else None


def iter_json_objects(content: str) -> List[Tuple[int, int, Dict[str, Any]]]:
    """
    Extract complete top-level JSON objects from free text.

    One pass over the text keeps a stack of open braces (string literals and
    escapes respected once inside a brace). When a brace balances, the
    candidate is parsed; if it is not a JSON object, the objects found inside
    it are kept instead, so objects nested in prose braces are still found.
    Braces that never close contribute only what was found inside them.

    Returns:
        ``(start, end, obj)`` triples in text order.
    """
    found: List[Tuple[int, int, Dict[str, Any]]] = []
    # (start, objects found inside) per open brace
    stack: List[Tuple[int, List[Tuple[int, int, Dict[str, Any]]]]] = []
    in_string = False
    escaped = False

    for i, ch in enumerate(content):
        if not stack:
            if ch == "{":
                stack.append((i, []))
            continue
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            stack.append((i, []))
        elif ch == "}":
            start, inner = stack.pop()
            obj = _parse_object(content, start, i + 1)
            result = [(start, i + 1, obj)] if obj is not None else inner
            (stack[-1][1] if stack else found).extend(result)

    while stack:
        _, inner = stack.pop()
        (stack[-1][1] if stack else found).extend(inner)
    return found


def extract_tool_calls_from_content(content: str) -> Tuple[List[ToolCall], List[Tuple[int, int]]]:
    """
    Find tool calls written as JSON inside message text.

    Returns:
        The calls in text order and the ``(start, end)`` spans they came from.
    """
    if not isinstance(content, str) or not content:
        return [], []

    calls: List[ToolCall] = []
    spans: List[Tuple[int, int]] = []
    for start, end, obj in iter_json_objects(content):
        if classify_wire_shape(obj, in_content=True) is not WireShape.embedded:
            continue
        call = normalize_tool_call(obj, in_content=True)
        if call is None:
            continue
        calls.append(call)
        spans.append((start, end))
        logger.debug(f"Extracted tool call from content: {call.name}")
    return calls, spans


def _merge_adjacent(content: str, spans: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and not content[merged[-1][1]:start].strip():
            merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def _widen(content: str, start: int, end: int) -> Tuple[int, int]:
    """Grow a span over the fences/tags that wrap it and nothing else."""
    while True:
        for opener, closer in _WRAPPERS:
            head = opener.search(content, 0, start)
            tail = closer.match(content, end)
            if head is None or tail is None:
                continue
            # an even number of fences before means this one opens a block
            if opener is _FENCE_OPEN and content.count("```", 0, head.start()) % 2:
                continue
            start, end = head.start(), tail.end()
            break
        else:
            return start, end


def strip_fragments(content: str, spans: List[Tuple[int, int]]) -> str:
    """Remove the given spans together with the fences/tags wrapping only them."""
    out = content
    for start, end in reversed([_widen(content, s, e) for s, e in _merge_adjacent(content, spans)]):
        left, right = out[:start], out[end:]
        if left.endswith("\n") and right.startswith("\n"):
            left, right = left.rstrip("\n") + "\n\n", right.lstrip("\n")
        out = left + right
    return out.strip()




def _normalize(raw_message: Any) -> NormalizedMessage:
    if isinstance(raw_message, BaseModel):
        raw_message = raw_message.model_dump()
    if not isinstance(raw_message, dict):
        return NormalizedMessage()

    content = raw_message.get("content")
    content = content if isinstance(content, str) else ""

    calls = normalize_tool_calls(raw_message.get("tool_calls"))
    if calls:
        return NormalizedMessage(content=content, tool_calls=calls)

    extracted, spans = extract_tool_calls_from_content(content)
    if extracted:
        logger.info(f"Extracted {len(extracted)} tool call(s) from content")
        content = strip_fragments(content, spans)
    return NormalizedMessage(content=content, tool_calls=extracted)


def normalize(raw_message: Any) -> NormalizedMessage:
    """
    Normalize a raw model message into ``{content, tool_calls}``.

    Args:
        raw_message: A message dict (``content`` plus optional ``tool_calls``),
            a pydantic model of the same shape, or anything else.

    Returns:
        A ``NormalizedMessage``; parse failures degrade to "no tool call found".
    """
    try:
        return _normalize(raw_message)
    except Exception:
        logger.exception("Tool-call normalization failed; treating message as plain content")
        content = raw_message.get("content") if isinstance(raw_message, dict) else None
        return NormalizedMessage(content=content if isinstance(content, str) else "")
