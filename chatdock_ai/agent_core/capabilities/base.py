from __future__ import annotations

"""Built-in capability catalogue and execution profiles.

A capability is a named class of agent action subject to enable/disable
policy. Only ``executable`` capabilities can ever gate a runnable step; the
others are informational classifications a planner may attach to a step.

Profiles are immutable templates. Applying one replaces every capability flag
and the execution mode at once (see ``CapabilityRegistry.apply_profile``).
"""

from typing import Dict, List

from ..schemas.domain import (
    UNKNOWN_CAPABILITY,
    CapabilityInfo,
    ExecutionMode,
    ExecutionProfile,
)

DEFAULT_PROFILE = "safe"

READ_FILE = "read_file"
WRITE_FILE = "write_file"
EDIT_FILE = "edit_file"
ORGANIZE_FILES = "organize_files"
ANALYZE_CONTENT = "analyze_content"
RESEARCH = "research"
OS_ACTION = "os_action"


def builtin_capabilities() -> List[CapabilityInfo]:
    """Return fresh copies of the built-in capability definitions, all disabled."""
    return [
        CapabilityInfo(type=READ_FILE, executable=True, description="Reads a file from the workspace"),
        CapabilityInfo(type=WRITE_FILE, executable=True, description="Writes a new file to the workspace"),
        CapabilityInfo(type=EDIT_FILE, executable=True, description="Edits an existing file"),
        CapabilityInfo(type=ORGANIZE_FILES, executable=True, description="Moves or restructures files"),
        CapabilityInfo(type=ANALYZE_CONTENT, executable=False, description="Analyzes existing content"),
        CapabilityInfo(
            type=RESEARCH,
            executable=False,
            description="Gathers external information when enabled in the future",
        ),
        CapabilityInfo(
            type=OS_ACTION,
            executable=False,
            description="Performs OS-level actions such as opening apps or running system commands",
        ),
        CapabilityInfo(type=UNKNOWN_CAPABILITY, executable=False, description="Unclassified step"),
    ]


BUILTIN_PROFILES: Dict[str, ExecutionProfile] = {
    "safe": ExecutionProfile(
        name="safe",
        description="Default Safe Mode. All capabilities disabled.",
        execution_mode=ExecutionMode.manual,
        enabled_caps=frozenset(),
    ),
    "editor": ExecutionProfile(
        name="editor",
        description="Editor Mode. Can read, write, and edit files.",
        execution_mode=ExecutionMode.manual,
        enabled_caps=frozenset({READ_FILE, WRITE_FILE, EDIT_FILE}),
    ),
    "organizer": ExecutionProfile(
        name="organizer",
        description="Organizer Mode. Can read and move/rename files.",
        execution_mode=ExecutionMode.manual,
        enabled_caps=frozenset({READ_FILE, ORGANIZE_FILES}),
    ),
    "analysis": ExecutionProfile(
        name="analysis",
        description="Analysis Mode. Can read and analyze content.",
        execution_mode=ExecutionMode.manual,
        enabled_caps=frozenset({READ_FILE, ANALYZE_CONTENT}),
    ),
}
