from __future__ import annotations

"""Durable storage for the capability/execution-mode state.

The state is a single JSON document::

    {"executionMode": "manual", "capabilities": {"read_file": true, ...}, "activeProfile": "editor"}

It is read once at process start and rewritten on every mutation. Storage is
best-effort: failures are logged and reported as ``False``/``None`` so the
in-memory registry stays authoritative.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field

from ..schemas.base import BaseSchema
from ..schemas.domain import ExecutionMode

logger = logging.getLogger(__name__)


class PersistedRuntimeState(BaseSchema):
    """Wire shape of the runtime policy file."""

    execution_mode: ExecutionMode = Field(alias="executionMode")
    capabilities: Dict[str, bool] = Field(default_factory=dict)
    active_profile: str = Field(alias="activeProfile")


class RuntimeStateStore:
    """JSON file store for ``PersistedRuntimeState``.

    A store created with ``path=None`` is a no-op: nothing is loaded and
    saves succeed without touching disk. The registry uses it when no
    workspace is configured.
    """

    def __init__(self, path: Optional[Path]) -> None:
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def exists(self) -> bool:
        return self._path is not None and self._path.exists()

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the raw persisted document, or ``None`` when absent or unreadable.

        The document is returned undecoded beyond JSON so that the registry can
        apply its tolerant, field-by-field loading rules.
        """
        if not self.exists():
            return None
        assert self._path is not None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load runtime config from {self._path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring runtime config at {self._path}: expected a JSON object")
            return None
        return data

    def save(self, state: PersistedRuntimeState) -> bool:
        """Write the state synchronously. Returns ``False`` on failure."""
        if self._path is None:
            return True
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = state.model_dump(mode="json", by_alias=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to save runtime config to {self._path}: {e}")
            return False
        return True
