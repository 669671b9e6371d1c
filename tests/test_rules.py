"""Tests for rule evaluation."""

import pytest

from minelaunch.core.platform import Platform
from minelaunch.core.rules import rules_satisfied
from minelaunch.versions.models import Rule


def rules(*raw):
    return [Rule.model_validate(r) for r in raw]


def test_no_rules_allows(linux):
    assert rules_satisfied([], linux)
    assert rules_satisfied(None, linux)


def test_allow_matching_os(linux):
    assert rules_satisfied(rules({"action": "allow", "os": {"name": "linux"}}), linux)


def test_allow_other_os_fails(linux):
    assert not rules_satisfied(rules({"action": "allow", "os": {"name": "osx"}}), linux)


def test_allow_all_then_disallow_osx():
    lwjgl = rules({"action": "allow"}, {"action": "disallow", "os": {"name": "osx"}})
    assert rules_satisfied(lwjgl, Platform(os="linux", arch="x64"))
    assert rules_satisfied(lwjgl, Platform(os="windows", arch="x64"))
    assert not rules_satisfied(lwjgl, Platform(os="macos", arch="x64"))


def test_macos_is_osx_in_rules():
    assert rules_satisfied(rules({"action": "allow", "os": {"name": "osx"}}), Platform(os="macos", arch="arm64"))


def test_arch_constraint():
    x86_only = rules({"action": "allow", "os": {"arch": "x86"}})
    assert rules_satisfied(x86_only, Platform(os="windows", arch="x86"))
    assert not rules_satisfied(x86_only, Platform(os="windows", arch="x64"))


def test_os_version_regex():
    old_osx = rules({"action": "allow"}, {"action": "disallow", "os": {"name": "osx", "version": "^10\\.5\\.\\d$"}})
    assert not rules_satisfied(old_osx, Platform(os="macos", arch="x64", version="10.5.8"))
    assert rules_satisfied(old_osx, Platform(os="macos", arch="x64", version="14.1"))


def test_os_version_ignored_when_unknown():
    win10 = rules({"action": "allow", "os": {"name": "windows", "version": "^10\\."}})
    assert rules_satisfied(win10, Platform(os="windows", arch="x64"))


def test_feature_rules_never_satisfied(linux):
    # Feature flags are not tracked; anything gated on them stays out
    demo = rules({"action": "allow", "features": {"is_demo_user": True}})
    resolution = rules({"action": "allow", "features": {"has_custom_resolution": True}})
    assert not rules_satisfied(demo, linux)
    assert not rules_satisfied(resolution, linux)


def test_empty_features_map_still_gates(linux):
    assert not rules_satisfied(rules({"action": "allow", "features": {}}), linux)


def test_disallow_short_circuits(linux):
    ruleset = rules({"action": "disallow", "os": {"name": "linux"}}, {"action": "allow"})
    assert not rules_satisfied(ruleset, linux)


def test_evaluation_is_repeatable(linux):
    ruleset = rules({"action": "allow", "os": {"name": "linux"}})
    assert rules_satisfied(ruleset, linux) == rules_satisfied(ruleset, linux)


def test_unknown_action_rejected():
    with pytest.raises(ValueError):
        Rule.model_validate({"action": "maybe"})
