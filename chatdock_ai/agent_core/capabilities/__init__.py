"""Capability & execution-mode registry.

A *capability* is a named class of agent action (``read_file``,
``write_file``, ...) subject to enable/disable policy.

- ``CapabilityRegistry`` holds the live flags and the global execution mode
  and answers whether a classified step may run.
- ``ExecutionProfile`` templates (``safe``, ``editor``, ``organizer``,
  ``analysis``) replace the whole state at once.
- ``RuntimeStateStore`` persists the state as JSON and reloads it at start.

This package exports:

- ``CapabilityRegistry``
- ``RuntimeStateStore``/``PersistedRuntimeState``
- ``BUILTIN_PROFILES``/``DEFAULT_PROFILE``/``builtin_capabilities``
"""

from .base import BUILTIN_PROFILES, DEFAULT_PROFILE, builtin_capabilities
from .registry import CapabilityRegistry
from .store import PersistedRuntimeState, RuntimeStateStore

__all__ = [
    "BUILTIN_PROFILES",
    "DEFAULT_PROFILE",
    "builtin_capabilities",
    "CapabilityRegistry",
    "PersistedRuntimeState",
    "RuntimeStateStore",
]
