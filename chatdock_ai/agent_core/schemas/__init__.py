"""Pydantic schemas shared by the agent core."""

from .base import BaseSchema
from .domain import (
    CUSTOM_PROFILE,
    UNKNOWN_CAPABILITY,
    CapabilityInfo,
    ExecutionMode,
    ExecutionProfile,
    GlobalExecutionState,
    HeartbeatConfig,
    HeartbeatStatus,
    NormalizedMessage,
    OutboundMessage,
    RuntimeStateSnapshot,
    Subagent,
    SubagentStatus,
    SubagentStatusView,
    ToolCall,
    ToolInvocation,
)

__all__ = [
    "BaseSchema",
    "CUSTOM_PROFILE",
    "UNKNOWN_CAPABILITY",
    "CapabilityInfo",
    "ExecutionMode",
    "ExecutionProfile",
    "GlobalExecutionState",
    "HeartbeatConfig",
    "HeartbeatStatus",
    "NormalizedMessage",
    "OutboundMessage",
    "RuntimeStateSnapshot",
    "Subagent",
    "SubagentStatus",
    "SubagentStatusView",
    "ToolCall",
    "ToolInvocation",
]
