"""
Specialist definitions and utilities.

A specialist is the role an agent turn runs under. It decides which tools the
model is shown (and may call) and which system prompt frames the turn. The
built-in ids are listed in ``Specialist``; any other non-empty string is a
valid custom specialist id with the default prompt.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from .schemas.base import BaseSchema


class Specialist(str, Enum):
    file = "file"
    shell = "shell"
    web = "web"
    code = "code"
    conversation = "conversation"
    planner = "planner"


class SpecialistSpec(BaseSchema):
    """
    Prompt and description for a specialist.

    Attributes:
        specialist: The specialist id.
        description: One-line summary of what the specialist handles.
        system_prompt: Prompt prepended to every turn run under this specialist.
    """

    specialist: str
    description: str
    system_prompt: str


SPECIALIST_SPECS: Dict[str, SpecialistSpec] = {
    s.value: definition
    for s, definition in (
        (
            Specialist.file,
            SpecialistSpec(
                specialist="file",
                description="Reads, writes, edits and organizes files in the workspace.",
                system_prompt=(
                    "You are the file specialist. Use the file tools to inspect and change files "
                    "inside the workspace. Read a file before editing it and report what you changed."
                ),
            ),
        ),
        (
            Specialist.shell,
            SpecialistSpec(
                specialist="shell",
                description="Runs system-level actions on the user's machine.",
                system_prompt=(
                    "You are the shell specialist. Only use the system tools you are given and explain "
                    "each action before you take it."
                ),
            ),
        ),
        (
            Specialist.web,
            SpecialistSpec(
                specialist="web",
                description="Looks things up on the web.",
                system_prompt="You are the web specialist. Search and fetch pages, then summarize what you found.",
            ),
        ),
        (
            Specialist.code,
            SpecialistSpec(
                specialist="code",
                description="Writes and changes code using file and system tools.",
                system_prompt=(
                    "You are the code specialist. Make small, focused changes and keep the existing "
                    "style of the files you touch."
                ),
            ),
        ),
        (
            Specialist.conversation,
            SpecialistSpec(
                specialist="conversation",
                description="Plain conversation without tools.",
                system_prompt="You are a friendly assistant. Answer directly; you have no tools in this mode.",
            ),
        ),
        (
            Specialist.planner,
            SpecialistSpec(
                specialist="planner",
                description="Breaks requests into steps and sees every tool category.",
                system_prompt=(
                    "You are the planner. Break the request into concrete steps and use the available "
                    "tools to carry them out one at a time."
                ),
            ),
        ),
    )
}


def specialist_id(specialist: Specialist | str) -> str:
    """Return the plain string id for a specialist enum member or custom id."""
    if isinstance(specialist, Specialist):
        return specialist.value
    return str(specialist)


def get_specialist_spec(specialist: Specialist | str | None) -> Optional[SpecialistSpec]:
    """Retrieve the SpecialistSpec for a built-in specialist, or None."""
    if specialist is None:
        return None
    return SPECIALIST_SPECS.get(specialist_id(specialist))
