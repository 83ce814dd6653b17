"""Tool definitions and the context passed to every executor.

A tool is a named executor ``(args, context) -> result`` plus the metadata the
model and the policy gate need: a JSON-schema parameter block, the capability
it is classified under, and the specialists allowed to see it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

if TYPE_CHECKING:
    from ..capabilities.registry import CapabilityRegistry
    from ..subagents.manager import SubagentManager
    from ..transport import MessageRouter

ToolExecutor = Callable[[Dict[str, Any], Optional["ToolContext"]], Any]


@dataclass(frozen=True)
class ToolContext:
    """Runtime context handed uniformly to every tool executor.

    Attributes:
        channel_type: Transport channel the turn originated from, if any.
        chat_id: Chat id on that channel, if any.
        specialist: Specialist the turn runs under (``None`` means unscoped).
        subagent_manager: Supervisor, for tools that spawn background work.
        router: Message transport, for tools that message the user.
        capabilities: The live capability registry.
        is_subagent: True when the turn runs inside a background task.
        is_heartbeat: True when the turn was started by the scheduler.
    """

    channel_type: Optional[str] = None
    chat_id: Optional[str] = None
    specialist: Optional[str] = None
    subagent_manager: Optional["SubagentManager"] = None
    router: Optional["MessageRouter"] = None
    capabilities: Optional["CapabilityRegistry"] = None
    is_subagent: bool = False
    is_heartbeat: bool = False


def _empty_parameters() -> Dict[str, Any]:
    return {"type": "object", "properties": {}}


class ToolDefinition(BaseModel):
    """Pydantic model for tool definitions.

    ``parameters`` is derived from ``input_schema`` when one is given and no
    explicit block was supplied. ``capability`` defaults to the tool name;
    names the capability registry does not know are classified ``unknown``
    by the policy gate and therefore never run.
    """

    name: str = Field(..., min_length=1, description="Unique identifier for the tool")
    description: str = Field(default="", description="Human-readable description of what the tool does")
    executor: ToolExecutor = Field(..., description="Callable invoked as executor(args, context)")
    input_schema: Optional[Type[BaseModel]] = Field(default=None, description="Model used to validate arguments")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="JSON schema of the arguments")
    capability: Optional[str] = Field(default=None, description="Capability type the tool is gated under")
    specialists: Optional[FrozenSet[str]] = Field(default=None, description="Specialists that may see the tool")
    category: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("specialists", mode="before")
    @classmethod
    def _coerce_specialists(cls, value: Any) -> Any:
        if value is None:
            return None
        return frozenset(v.value if isinstance(v, Enum) else str(v) for v in value)

    @model_validator(mode="after")
    def _fill_parameters(self) -> "ToolDefinition":
        if not self.parameters:
            if self.input_schema is not None:
                self.parameters = self.input_schema.model_json_schema()
            else:
                self.parameters = _empty_parameters()
        return self

    @property
    def capability_type(self) -> str:
        """The capability this tool is gated under."""
        return self.capability or self.name

    def is_visible_to(self, specialist: Optional[str]) -> bool:
        """Pure set-membership check; ``None`` on either side means unrestricted."""
        if specialist is None or self.specialists is None:
            return True
        key = specialist.value if isinstance(specialist, Enum) else str(specialist)
        return key in self.specialists

    def to_llm_format(self) -> Dict[str, Any]:
        """Convert the definition to the function-calling format chat models accept."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
