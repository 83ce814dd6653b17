"""Policy gate for tool-call execution.

The policy layer provides *runtime* decisions for every tool call the model
requests. It is intentionally separate from prompting so that:

- the model can ask for anything, and
- only calls whose capability is executable, enabled and permitted by the
  global execution mode ever reach an executor.

Components
----------

- ``GlobalPolicy``: classification + allow/deny decisions on top of a
  ``CapabilityRegistry``.
- ``PolicyDecision``: structured outcome (never an exception).
- ``SafetyPolicy``/``PolicyConfig``: argument size limits.
"""

from .global_policy import GlobalPolicy
from .models import PolicyConfig, PolicyDecision, SafetyPolicy

__all__ = [
    "GlobalPolicy",
    "PolicyConfig",
    "PolicyDecision",
    "SafetyPolicy",
]
