from __future__ import annotations

"""Global policy decisions for tool-call execution.

``GlobalPolicy`` is the runtime authority used by ``AgentEngine`` to decide
whether a requested tool call may run.

Design goals
------------

- Centralize allow/deny decisions outside of prompts.
- Report refusals as structured ``PolicyDecision`` values, never exceptions.
- Read the live ``CapabilityRegistry`` on every decision so policy changes take
  effect for the very next step, in every concurrently running turn.
"""

import json
from typing import Any, Dict, Optional

from ..capabilities.registry import CapabilityRegistry
from ..schemas.domain import UNKNOWN_CAPABILITY, ExecutionMode
from .models import PolicyConfig, PolicyDecision


class GlobalPolicy:
    """Capability gate plus basic argument safety checks."""

    def __init__(self, registry: CapabilityRegistry, config: PolicyConfig | None = None) -> None:
        self._registry = registry
        self._cfg = config or PolicyConfig()

    @property
    def config(self) -> PolicyConfig:
        """Return the underlying configuration object."""
        return self._cfg

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def classify(self, step_type: str) -> str:
        """
        Resolve a step type to a capability type.

        Unknown or misclassified step types resolve to the ``unknown`` sentinel.
        """
        if isinstance(step_type, str) and self._registry.is_known_type(step_type):
            return step_type
        return UNKNOWN_CAPABILITY

    def decide(self, step_type: str, *, args: Optional[Dict[str, Any]] = None) -> PolicyDecision:
        """
        Compute the policy decision for a step.

        Evaluation order:
        1. Global execution mode (``disabled`` forbids everything).
        2. Capability executability (informational capabilities never run).
        3. Capability enabled flag.
        4. Argument safety constraints.

        Args:
            step_type: The step's declared type (a capability name).
            args: The arguments the step would run with.

        Returns:
            A PolicyDecision; ``allowed`` is False with a ``reason`` on refusal.
        """
        capability = self.classify(step_type)

        if self._registry.execution_mode == ExecutionMode.disabled:
            return PolicyDecision(step_type, capability, allowed=False, reason="execution is disabled")

        if not self._registry.is_executable(capability):
            return PolicyDecision(
                step_type, capability, allowed=False, reason=f"capability '{capability}' is not executable"
            )

        if not self._registry.is_enabled(capability):
            return PolicyDecision(
                step_type,
                capability,
                allowed=False,
                reason=f"capability '{capability}' is currently disabled",
            )

        if args is not None:
            err = self.validate_tool_args(args)
            if err is not None:
                return PolicyDecision(step_type, capability, allowed=False, reason=err)

        return PolicyDecision(step_type, capability, allowed=True)

    def validate_tool_args(self, args: Dict[str, Any]) -> Optional[str]:
        """
        Validate tool arguments against basic safety constraints.

        Args:
            args: The dictionary of arguments to validate.

        Returns:
            An error string if validation fails, otherwise None.
        """
        raw = json.dumps(args, default=str).encode("utf-8")
        if len(raw) > self._cfg.safety_policy.max_tool_args_bytes:
            return "tool args too large"
        return None
