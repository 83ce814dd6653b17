from __future__ import annotations

import pytest

from chatdock_ai.agent_core.capabilities.registry import CapabilityRegistry
from chatdock_ai.agent_core.policy.global_policy import GlobalPolicy
from chatdock_ai.agent_core.policy.models import PolicyConfig, SafetyPolicy
from chatdock_ai.agent_core.schemas.domain import UNKNOWN_CAPABILITY, ExecutionMode


@pytest.fixture
def registry() -> CapabilityRegistry:
    reg = CapabilityRegistry()
    reg.apply_profile("editor")
    return reg


def test_enabled_executable_capability_allowed(registry: CapabilityRegistry) -> None:
    d = GlobalPolicy(registry).decide("write_file", args={"path": "a.txt"})
    assert d.allowed is True
    assert d.capability == "write_file"
    assert d.reason is None


def test_disabled_mode_denies_enabled_write_file(registry: CapabilityRegistry) -> None:
    registry.set_execution_mode(ExecutionMode.disabled)
    d = GlobalPolicy(registry).decide("write_file", args={})
    assert d.allowed is False
    assert d.reason == "execution is disabled"


def test_disabled_capability_denied(registry: CapabilityRegistry) -> None:
    d = GlobalPolicy(registry).decide("organize_files")
    assert d.allowed is False
    assert "currently disabled" in (d.reason or "")


def test_informational_capability_denied_even_when_enabled(registry: CapabilityRegistry) -> None:
    registry.enable("research")
    d = GlobalPolicy(registry).decide("research")
    assert d.allowed is False
    assert "not executable" in (d.reason or "")


def test_unknown_step_type_classified_as_unknown_and_denied(registry: CapabilityRegistry) -> None:
    p = GlobalPolicy(registry)
    assert p.classify("format_disk") == UNKNOWN_CAPABILITY
    d = p.decide("format_disk")
    assert d.allowed is False
    assert d.capability == UNKNOWN_CAPABILITY


def test_oversized_args_denied(registry: CapabilityRegistry) -> None:
    cfg = PolicyConfig(safety_policy=SafetyPolicy(max_tool_args_bytes=32))
    p = GlobalPolicy(registry, cfg)
    assert p.validate_tool_args({"content": "x"}) is None

    d = p.decide("write_file", args={"content": "x" * 100})
    assert d.allowed is False
    assert d.reason == "tool args too large"


def test_decisions_follow_live_registry(registry: CapabilityRegistry) -> None:
    p = GlobalPolicy(registry)
    assert p.decide("edit_file").allowed is True
    registry.disable("edit_file")
    assert p.decide("edit_file").allowed is False
    registry.apply_profile("editor")
    assert p.decide("edit_file").allowed is True
