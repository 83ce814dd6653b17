"""Tool catalogue and dispatch.

- ``ToolDefinition``/``ToolContext``: what a tool is and what it runs with.
- ``ToolRegistry``: registration, specialist scoping, search and the
  never-raising ``execute``.
- ``build_filesystem_tools``: the built-in workspace file tools.
"""

from .base import ToolContext, ToolDefinition, ToolExecutor
from .filesystem import (
    FILESYSTEM_SPECIALISTS,
    FileEditHandler,
    FileMoveHandler,
    FileReadHandler,
    FileWriteHandler,
    build_filesystem_tools,
)
from .registry import ToolRegistry

__all__ = [
    "FILESYSTEM_SPECIALISTS",
    "FileEditHandler",
    "FileMoveHandler",
    "FileReadHandler",
    "FileWriteHandler",
    "ToolContext",
    "ToolDefinition",
    "ToolExecutor",
    "ToolRegistry",
    "build_filesystem_tools",
]
