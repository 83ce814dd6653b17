"""Common base for the agent core's pydantic records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Strict base model shared by every agent-core record.

    Fields may be populated by name or alias (the persisted runtime file uses
    camelCase aliases), and unknown fields are rejected so that a malformed
    update never passes silently.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )
