from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional
from uuid import uuid4

from pydantic import ConfigDict, Field

from .base import BaseSchema

UNKNOWN_CAPABILITY = "unknown"
CUSTOM_PROFILE = "custom"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionMode(str, Enum):
    manual = "manual"
    disabled = "disabled"


class SubagentStatus(str, Enum):
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class CapabilityInfo(BaseSchema):
    type: str
    executable: bool
    enabled: bool = False
    description: str = ""


class ExecutionProfile(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    name: str
    description: str
    execution_mode: ExecutionMode = ExecutionMode.manual
    enabled_caps: FrozenSet[str] = Field(default_factory=frozenset)


class GlobalExecutionState(BaseSchema):
    execution_mode: ExecutionMode = ExecutionMode.manual
    active_profile: str = "safe"


class RuntimeStateSnapshot(GlobalExecutionState):
    """The global execution state plus every capability record."""

    capabilities: Dict[str, CapabilityInfo] = Field(default_factory=dict)


class ToolCall(BaseSchema):
    name: str = Field(min_length=1)
    arguments: Dict[str, Any] = Field(default_factory=dict)


class NormalizedMessage(BaseSchema):
    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)


class ToolInvocation(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    capability: Optional[str] = None
    ok: bool
    denied: bool = False
    result: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utc_now)


class Subagent(BaseSchema):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    task: str
    status: SubagentStatus = SubagentStatus.running
    result: Optional[str] = None
    error: Optional[str] = None
    start_time: datetime = Field(default_factory=_utc_now)
    end_time: Optional[datetime] = None
    notify: bool = True
    origin_channel: Optional[str] = None
    origin_chat_id: Optional[str] = None


class SubagentStatusView(BaseSchema):
    id: str
    name: str
    task: str
    status: SubagentStatus
    result: Optional[str] = None
    error: Optional[str] = None
    duration_ms: int = 0


class HeartbeatConfig(BaseSchema):
    enabled: bool = False
    interval_ms: int = Field(default=3_600_000, gt=0)
    prompt: str = (
        "Perform a routine check-in. Check if there are any pending tasks, reminders, or updates to share."
    )


class HeartbeatStatus(BaseSchema):
    enabled: bool
    interval_ms: int
    last_beat: Optional[datetime] = None
    running: bool


class OutboundMessage(BaseSchema):
    content: str
    chat_id: str
    channel_type: str
