"""Turning raw model output into an executable list of tool calls.

The main entry point is ``normalize``; the helpers are exported for callers
that only need part of the pipeline (e.g. argument parsing).
"""

from .tool_calls import (
    WireShape,
    classify_wire_shape,
    extract_tool_calls_from_content,
    iter_json_objects,
    normalize,
    normalize_tool_call,
    normalize_tool_calls,
    parse_tool_arguments,
    strip_fragments,
)

__all__ = [
    "WireShape",
    "classify_wire_shape",
    "extract_tool_calls_from_content",
    "iter_json_objects",
    "normalize",
    "normalize_tool_call",
    "normalize_tool_calls",
    "parse_tool_arguments",
    "strip_fragments",
]
