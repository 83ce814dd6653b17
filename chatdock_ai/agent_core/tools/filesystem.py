"""Built-in filesystem tools.

Handlers for reading, writing, editing and moving files. Every path is
resolved against the workspace root and refused when it escapes it. Each
handler is itself a tool executor: it validates the raw argument dict with its
input schema and returns its output model as a dict.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field

from chatdock_ai.core.logging_config import get_logger

from ..capabilities.base import (
    EDIT_FILE,
    ORGANIZE_FILES,
    READ_FILE,
    WRITE_FILE,
)
from ..specialists import Specialist
from .base import ToolContext, ToolDefinition

logger = get_logger(__name__)

FILESYSTEM_CATEGORY = "fs"
FILESYSTEM_SPECIALISTS = frozenset({Specialist.file.value, Specialist.code.value, Specialist.planner.value})

InputType = TypeVar("InputType", bound=BaseModel)


class FileReadInput(BaseModel):
    """Input schema for file read operation."""

    path: str = Field(..., description="Path to the file, relative to the workspace root")
    encoding: str = Field(default="utf-8", description="File encoding (default: utf-8)")


class FileWriteInput(BaseModel):
    """Input schema for file write operation."""

    path: str = Field(..., description="Path to the file, relative to the workspace root")
    content: str = Field(..., description="Content to write to the file")
    encoding: str = Field(default="utf-8", description="File encoding (default: utf-8)")
    create_dirs: bool = Field(default=True, description="Create parent directories if they don't exist")


class FileEditInput(BaseModel):
    """Input schema for in-place text replacement."""

    path: str = Field(..., description="Path to the file, relative to the workspace root")
    old_text: str = Field(..., min_length=1, description="Exact text to replace")
    new_text: str = Field(..., description="Replacement text")
    replace_all: bool = Field(default=False, description="Replace every occurrence instead of the first")


class FileMoveInput(BaseModel):
    """Input schema for moving or renaming a file."""

    source: str = Field(..., description="Existing path, relative to the workspace root")
    destination: str = Field(..., description="New path, relative to the workspace root")
    overwrite: bool = Field(default=False, description="Replace the destination if it exists")


class FileOpOutput(BaseModel):
    """Output schema shared by the filesystem handlers."""

    success: bool = Field(..., description="Whether the operation succeeded")
    path: str = Field(..., description="Path the operation acted on")
    content: Optional[str] = Field(None, description="File content (read only)")
    size_bytes: Optional[int] = Field(None, description="Size of the file in bytes")
    replacements: Optional[int] = Field(None, description="Number of replacements made (edit only)")
    destination: Optional[str] = Field(None, description="New location (move only)")
    error: Optional[str] = Field(None, description="Error message if failed")


class WorkspaceEscapeError(ValueError):
    """Raised when a path resolves outside the workspace root."""


class FileToolHandler(ABC, Generic[InputType]):
    """Abstract base class for workspace-confined file handlers."""

    input_schema: Type[BaseModel]

    def __init__(self, root: Path) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tool name."""

    @abstractmethod
    async def execute(self, input_data: InputType) -> FileOpOutput:
        """Run the operation on validated input."""

    def resolve(self, raw: str) -> Path:
        """Resolve ``raw`` inside the workspace root."""
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = self._root / candidate
        resolved = candidate.resolve()
        if resolved != self._root and self._root not in resolved.parents:
            raise WorkspaceEscapeError(f"Path is outside the workspace: {raw}")
        return resolved

    async def __call__(self, args: Dict[str, Any], context: Optional[ToolContext] = None) -> Dict[str, Any]:
        input_data = self.input_schema.model_validate(args)
        try:
            output = await self.execute(input_data)  # type: ignore[arg-type]
        except WorkspaceEscapeError as e:
            logger.warning(str(e))
            output = FileOpOutput(success=False, path=str(getattr(input_data, "path", "")), error=str(e))
        return output.model_dump(exclude_none=True)


class FileReadHandler(FileToolHandler[FileReadInput]):
    """Handler for file read operations."""

    input_schema = FileReadInput

    @property
    def name(self) -> str:
        return "read_file"

    async def execute(self, input_data: FileReadInput) -> FileOpOutput:
        file_path = self.resolve(input_data.path)
        if not file_path.exists():
            return FileOpOutput(success=False, path=input_data.path, error=f"File not found: {input_data.path}")
        if not file_path.is_file():
            return FileOpOutput(success=False, path=input_data.path, error=f"Path is not a file: {input_data.path}")

        try:
            content = file_path.read_text(encoding=input_data.encoding)
        except (OSError, UnicodeDecodeError) as e:
            error_msg = f"Error reading file {input_data.path}: {e}"
            logger.error(error_msg)
            return FileOpOutput(success=False, path=input_data.path, error=error_msg)

        size_bytes = file_path.stat().st_size
        logger.info(f"Successfully read file: {file_path} ({size_bytes} bytes)")
        return FileOpOutput(success=True, path=input_data.path, content=content, size_bytes=size_bytes)


class FileWriteHandler(FileToolHandler[FileWriteInput]):
    """Handler for file write operations."""

    input_schema = FileWriteInput

    @property
    def name(self) -> str:
        return "write_file"

    async def execute(self, input_data: FileWriteInput) -> FileOpOutput:
        file_path = self.resolve(input_data.path)
        try:
            if input_data.create_dirs:
                file_path.parent.mkdir(parents=True, exist_ok=True)
            elif not file_path.parent.exists():
                return FileOpOutput(
                    success=False,
                    path=input_data.path,
                    error=f"Parent directory does not exist: {file_path.parent}",
                )
            file_path.write_text(input_data.content, encoding=input_data.encoding)
        except OSError as e:
            error_msg = f"Error writing file {input_data.path}: {e}"
            logger.error(error_msg)
            return FileOpOutput(success=False, path=input_data.path, error=error_msg)

        size_bytes = len(input_data.content.encode(input_data.encoding))
        logger.info(f"Successfully wrote file: {file_path} ({size_bytes} bytes)")
        return FileOpOutput(success=True, path=input_data.path, size_bytes=size_bytes)


class FileEditHandler(FileToolHandler[FileEditInput]):
    """Handler for exact-text replacement inside an existing file."""

    input_schema = FileEditInput

    @property
    def name(self) -> str:
        return "edit_file"

    async def execute(self, input_data: FileEditInput) -> FileOpOutput:
        file_path = self.resolve(input_data.path)
        if not file_path.is_file():
            return FileOpOutput(success=False, path=input_data.path, error=f"File not found: {input_data.path}")

        try:
            original = file_path.read_text(encoding="utf-8")
            count = original.count(input_data.old_text)
            if count == 0:
                return FileOpOutput(success=False, path=input_data.path, error="Text to replace was not found")
            if input_data.replace_all:
                updated = original.replace(input_data.old_text, input_data.new_text)
            else:
                updated = original.replace(input_data.old_text, input_data.new_text, 1)
                count = 1
            file_path.write_text(updated, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            error_msg = f"Error editing file {input_data.path}: {e}"
            logger.error(error_msg)
            return FileOpOutput(success=False, path=input_data.path, error=error_msg)

        logger.info(f"Edited file: {file_path} ({count} replacement(s))")
        return FileOpOutput(success=True, path=input_data.path, replacements=count)


class FileMoveHandler(FileToolHandler[FileMoveInput]):
    """Handler for moving or renaming files inside the workspace."""

    input_schema = FileMoveInput

    @property
    def name(self) -> str:
        return "move_file"

    async def execute(self, input_data: FileMoveInput) -> FileOpOutput:
        source = self.resolve(input_data.source)
        destination = self.resolve(input_data.destination)
        if not source.exists():
            return FileOpOutput(success=False, path=input_data.source, error=f"File not found: {input_data.source}")
        if destination.exists() and not input_data.overwrite:
            return FileOpOutput(
                success=False,
                path=input_data.source,
                error=f"Destination already exists: {input_data.destination}",
            )

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            source.replace(destination)
        except OSError as e:
            error_msg = f"Error moving {input_data.source} to {input_data.destination}: {e}"
            logger.error(error_msg)
            return FileOpOutput(success=False, path=input_data.source, error=error_msg)

        logger.info(f"Moved {source} -> {destination}")
        return FileOpOutput(success=True, path=input_data.source, destination=input_data.destination)


def build_filesystem_tools(root: Path) -> List[ToolDefinition]:
    """Create the built-in filesystem tool definitions rooted at ``root``."""
    specs = (
        (FileReadHandler(root), READ_FILE, "Read the contents of a text file.", ["read", "open", "view", "file"]),
        (FileWriteHandler(root), WRITE_FILE, "Create or overwrite a text file.", ["write", "create", "save", "file"]),
        (FileEditHandler(root), EDIT_FILE, "Replace exact text inside an existing file.", ["edit", "replace", "modify"]),
        (FileMoveHandler(root), ORGANIZE_FILES, "Move or rename a file.", ["move", "rename", "organize"]),
    )
    return [
        ToolDefinition(
            name=handler.name,
            description=description,
            executor=handler,
            input_schema=handler.input_schema,
            capability=capability,
            specialists=FILESYSTEM_SPECIALISTS,
            category=FILESYSTEM_CATEGORY,
            keywords=keywords,
        )
        for handler, capability, description, keywords in specs
    ]
