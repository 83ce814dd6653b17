from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import Field

from ..schemas.base import BaseSchema


class SafetyPolicy(BaseSchema):
    """
    Configuration for safety guardrails applied to every gated call.

    Includes resource limits to prevent abuse or accidents.
    """
    max_tool_args_bytes: int = Field(default=64_000, ge=1, le=5_000_000)


class PolicyConfig(BaseSchema):
    """
    Aggregate configuration object for the policy gate.

    This is the root configuration object used to instantiate a ``GlobalPolicy``.
    """
    version: str = Field(default="policy-v1")

    safety_policy: SafetyPolicy = Field(default_factory=SafetyPolicy)


@dataclass(frozen=True)
class PolicyDecision:
    """
    Result of a policy evaluation for a single step.

    Attributes:
        step_type: The step type (usually the tool's capability classification) as requested.
        capability: The capability the step resolved to (``unknown`` when unclassified).
        allowed: Whether the step may run.
        reason: Human-readable reason when the step is refused.
    """
    step_type: str
    capability: str
    allowed: bool
    reason: Optional[str] = None
