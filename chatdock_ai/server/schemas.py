"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
Domain records (capability state, profiles, subagent views, heartbeat status) are returned
as-is; only request bodies and small envelopes are defined here.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from chatdock_ai.agent_core.schemas.domain import ExecutionMode, ToolInvocation


class ExecutionModeUpdate(BaseModel):
    """Request body for switching the global execution mode."""

    mode: ExecutionMode = Field(..., description="New global execution mode.", examples=["manual", "disabled"])


class SubagentSpawnRequest(BaseModel):
    """
    Schema for spawning a background task.

    When ``channel_type`` and ``chat_id`` are given and ``notify`` is set, the outcome is
    delivered back to that chat.
    """

    task: str = Field(..., min_length=1, description="Task for the background agent.")
    name: Optional[str] = Field(default=None, description="Human-readable name; defaults to Subagent-<id>.")
    notify: bool = Field(default=True, description="Deliver the outcome to the originating chat.")
    channel_type: Optional[str] = Field(default=None, description="Originating channel.")
    chat_id: Optional[str] = Field(default=None, description="Originating chat id.")

    model_config = ConfigDict(json_schema_extra={
        "example": {"task": "Summarize every note in the projects folder", "name": "notes-digest"}
    })


class CleanupResponse(BaseModel):
    removed: int = Field(..., description="Number of finished records removed.")


class HeartbeatConfigUpdate(BaseModel):
    """Partial heartbeat configuration; omitted fields keep their current value."""

    enabled: Optional[bool] = None
    interval_ms: Optional[int] = Field(default=None, gt=0)
    prompt: Optional[str] = Field(default=None, min_length=1)

    model_config = ConfigDict(extra="forbid")


class HeartbeatTriggerResponse(BaseModel):
    response: Optional[str] = Field(default=None, description="Agent reply, or null when the beat failed.")


class ChatRequest(BaseModel):
    """Schema for a foreground chat message."""

    message: str = Field(..., min_length=1, description="User message.")
    specialist: Optional[str] = Field(default=None, description="Specialist to run the turn under.")
    channel_type: Optional[str] = Field(default=None, description="Channel to route the reply to.")
    chat_id: Optional[str] = Field(default=None, description="Chat to route the reply to.")
    history: List[Dict[str, str]] = Field(default_factory=list, description="Prior messages, oldest first.")


class ChatResponse(BaseModel):
    reply: str


class ChatTurnResponse(BaseModel):
    """Full outcome of a chat turn including per-call audit records."""

    reply: str
    iterations: int
    hit_iteration_limit: bool
    tool_invocations: List[ToolInvocation] = Field(default_factory=list)


class ToolSummary(BaseModel):
    name: str
    description: str
    capability: str
    category: Optional[str] = None
    specialists: Optional[List[str]] = None
    parameters: Dict = Field(default_factory=dict)
