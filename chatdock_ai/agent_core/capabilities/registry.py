from __future__ import annotations

"""Capability & execution-mode registry.

``CapabilityRegistry`` is the process-wide policy store: it answers "is
capability X enabled, and is execution allowed at all". It is an explicit
object constructed by the runtime wiring and passed by reference to every
component that needs it, so tests can build independent instances.

Rules
-----

- A step may run iff the execution mode is not ``disabled`` and the step's
  capability is both executable and enabled. Unknown types resolve to the
  ``unknown`` sentinel which is never executable.
- Any direct mutation (``enable``/``disable``/``set_execution_mode``) marks the
  active profile as ``custom``, even if nothing changed value-wise.
- Successful mutations are persisted synchronously; persistence failures are
  logged and never roll back in-memory state.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..schemas.domain import (
    CUSTOM_PROFILE,
    UNKNOWN_CAPABILITY,
    CapabilityInfo,
    ExecutionMode,
    ExecutionProfile,
    RuntimeStateSnapshot,
)
from .base import BUILTIN_PROFILES, DEFAULT_PROFILE, builtin_capabilities
from .store import PersistedRuntimeState, RuntimeStateStore

logger = logging.getLogger(__name__)


def _coerce_mode(mode: ExecutionMode | str) -> Optional[ExecutionMode]:
    if isinstance(mode, ExecutionMode):
        return mode
    try:
        return ExecutionMode(str(mode))
    except ValueError:
        return None


class CapabilityRegistry:
    """
    In-memory capability flags plus the global execution mode.

    Notes:
        - ``get`` never raises: unknown types return the ``unknown`` sentinel.
        - The sentinel cannot be enabled, disabled or listed in a profile.
        - ``initialize`` must be called once at process start to load the
          persisted state (or bootstrap the ``safe`` profile).
    """

    def __init__(
        self,
        store: RuntimeStateStore | None = None,
        *,
        capabilities: Iterable[CapabilityInfo] | None = None,
        profiles: Dict[str, ExecutionProfile] | None = None,
    ) -> None:
        self._store = store or RuntimeStateStore(None)
        caps = list(capabilities) if capabilities is not None else builtin_capabilities()
        self._caps: Dict[str, CapabilityInfo] = {c.type: c.model_copy() for c in caps}
        if UNKNOWN_CAPABILITY not in self._caps:
            self._caps[UNKNOWN_CAPABILITY] = CapabilityInfo(
                type=UNKNOWN_CAPABILITY, executable=False, description="Unclassified step"
            )
        self._caps[UNKNOWN_CAPABILITY].executable = False
        self._caps[UNKNOWN_CAPABILITY].enabled = False
        self._profiles: Dict[str, ExecutionProfile] = dict(profiles if profiles is not None else BUILTIN_PROFILES)
        self._execution_mode = ExecutionMode.manual
        self._active_profile = DEFAULT_PROFILE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load persisted state once, or apply and persist the default profile.

        Loading is tolerant: an invalid execution mode is ignored, unknown
        capability types and non-boolean flags are skipped individually.
        """
        if not self._store.exists():
            logger.info("No persisted runtime config; applying '%s' profile", DEFAULT_PROFILE)
            self.apply_profile(DEFAULT_PROFILE)
            return

        data = self._store.load()
        if data is None:
            return

        mode = _coerce_mode(data.get("executionMode", ""))
        if mode is not None:
            self._execution_mode = mode
        else:
            logger.warning(f"Ignoring invalid persisted executionMode: {data.get('executionMode')!r}")

        raw_caps = data.get("capabilities")
        if isinstance(raw_caps, dict):
            for cap_type, enabled in raw_caps.items():
                if not self._is_mutable_type(cap_type):
                    logger.debug(f"Ignoring persisted flag for unknown capability: {cap_type!r}")
                    continue
                if not isinstance(enabled, bool):
                    logger.debug(f"Ignoring non-boolean persisted flag for {cap_type}: {enabled!r}")
                    continue
                self._caps[cap_type].enabled = enabled

        profile = data.get("activeProfile")
        self._active_profile = profile if isinstance(profile, str) and profile else CUSTOM_PROFILE
        logger.info(
            "Loaded runtime config: mode=%s profile=%s", self._execution_mode.value, self._active_profile
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def execution_mode(self) -> ExecutionMode:
        return self._execution_mode

    @property
    def active_profile(self) -> str:
        return self._active_profile

    def get(self, cap_type: str) -> CapabilityInfo:
        """Return a copy of the capability, or the ``unknown`` sentinel."""
        cap = self._caps.get(cap_type) or self._caps[UNKNOWN_CAPABILITY]
        return cap.model_copy()

    def list_capabilities(self) -> List[CapabilityInfo]:
        return [c.model_copy() for c in self._caps.values()]

    def is_known_type(self, cap_type: str) -> bool:
        """True for registered capability types other than the sentinel."""
        return cap_type in self._caps and cap_type != UNKNOWN_CAPABILITY

    def is_executable(self, cap_type: str) -> bool:
        return self.get(cap_type).executable is True

    def is_enabled(self, cap_type: str) -> bool:
        return self.get(cap_type).enabled is True

    def can_execute(self, cap_type: str) -> bool:
        """The full gate: mode not disabled, capability executable and enabled."""
        if self._execution_mode == ExecutionMode.disabled:
            return False
        cap = self.get(cap_type)
        return cap.executable and cap.enabled

    def profiles(self) -> Dict[str, ExecutionProfile]:
        return dict(self._profiles)

    def current_state(self) -> RuntimeStateSnapshot:
        return RuntimeStateSnapshot(
            execution_mode=self._execution_mode,
            active_profile=self._active_profile,
            capabilities={k: v.model_copy() for k, v in self._caps.items()},
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def enable(self, cap_type: str) -> bool:
        return self._set_enabled(cap_type, True)

    def disable(self, cap_type: str) -> bool:
        return self._set_enabled(cap_type, False)

    def set_execution_mode(self, mode: ExecutionMode | str) -> bool:
        coerced = _coerce_mode(mode)
        if coerced is None:
            return False
        self._execution_mode = coerced
        self._active_profile = CUSTOM_PROFILE
        self._persist()
        return True

    def apply_profile(self, name: str) -> bool:
        """Atomically replace all flags and the mode with a named template."""
        profile = self._profiles.get(name)
        if profile is None:
            return False

        self._execution_mode = profile.execution_mode
        for cap_type, cap in self._caps.items():
            if cap_type == UNKNOWN_CAPABILITY:
                continue
            cap.enabled = cap_type in profile.enabled_caps
        self._active_profile = name
        self._persist()
        logger.info(f"Applied execution profile '{name}'")
        return True

    def _is_mutable_type(self, cap_type: object) -> bool:
        return isinstance(cap_type, str) and self.is_known_type(cap_type)

    def _set_enabled(self, cap_type: str, enabled: bool) -> bool:
        if not self._is_mutable_type(cap_type):
            return False
        self._caps[cap_type].enabled = enabled
        self._active_profile = CUSTOM_PROFILE
        self._persist()
        return True

    def _persist(self) -> bool:
        state = PersistedRuntimeState(
            execution_mode=self._execution_mode,
            capabilities={k: v.enabled for k, v in self._caps.items() if k != UNKNOWN_CAPABILITY},
            active_profile=self._active_profile,
        )
        return self._store.save(state)
