"""
BTP Policy Engine - Tests
===========================
Tests verify BEHAVIOR, not just coverage.

1. Rule exception converts to BLOCK
2. Evaluation never raises
3. Version snapshot integrity
4. Contract validation at class creation
5. Authorization rules, individually and combined
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from core.directory import InMemoryTerminalDirectory
from core.policy import (
    INITIAL_POLICY_VERSION,
    PAYMENT_AUTHORIZE_COMMAND,
    REDEMPTION_AUTHORIZE_COMMAND,
    BaseRule,
    DuplicateRuleError,
    PolicyDecision,
    PolicyEngine,
    PolicyRegistry,
    RegistryLockedError,
    RuleResult,
    Severity,
    build_authorization_registry,
)
from core.policy.rules import (
    AttachedValueBlock,
    ProjectScopeBlock,
    RegisteredTerminalBlock,
)


# ══════════════════════════════════════════════════════════════
# TEST STUBS
# ══════════════════════════════════════════════════════════════

PROJECT_ID = 7
TERMINAL = "terminal-1"


@dataclass
class StubCommand:
    command_type: str
    payload: dict


@dataclass
class StubContext:
    project_id: int
    directory: Any


def make_directory() -> InMemoryTerminalDirectory:
    directory = InMemoryTerminalDirectory()
    directory.add_terminal(PROJECT_ID, TERMINAL)
    return directory


def hook_command(
    caller: str = TERMINAL,
    project_id: int = PROJECT_ID,
    attached_value: int = 0,
    command_type: str = PAYMENT_AUTHORIZE_COMMAND,
) -> StubCommand:
    return StubCommand(
        command_type=command_type,
        payload={
            "caller": caller,
            "project_id": project_id,
            "attached_value": attached_value,
            "payer": "alice",
        },
    )


def context() -> StubContext:
    return StubContext(project_id=PROJECT_ID, directory=make_directory())


class AlwaysPassRule(BaseRule):
    rule_id = "TEST-PASS"
    version = "1.0.0"
    domain = "test"
    severity = Severity.BLOCK
    applies_to = ["test.thing.do.request"]

    def evaluate(self, command, context, projected_state):
        return self.pass_rule()


class ExplodingRule(BaseRule):
    rule_id = "TEST-BOOM"
    version = "1.0.0"
    domain = "test"
    severity = Severity.BLOCK
    applies_to = ["test.thing.do.request"]

    def evaluate(self, command, context, projected_state):
        raise RuntimeError("boom")


class WrongReturnRule(BaseRule):
    rule_id = "TEST-WRONG"
    version = "1.0.0"
    domain = "test"
    severity = Severity.BLOCK
    applies_to = ["test.thing.do.request"]

    def evaluate(self, command, context, projected_state):
        return True


class FailRule(BaseRule):
    rule_id = "TEST-FAIL"
    version = "1.0.0"
    domain = "test"
    severity = Severity.BLOCK
    applies_to = ["test.thing.do.request"]

    def evaluate(self, command, context, projected_state):
        return self.fail("heads up")


def thing_command() -> StubCommand:
    return StubCommand(command_type="test.thing.do.request", payload={})


# ══════════════════════════════════════════════════════════════
# RULE CONTRACT
# ══════════════════════════════════════════════════════════════

class TestRuleContract:
    def test_missing_rule_id_rejected(self):
        with pytest.raises(TypeError):
            class NoId(BaseRule):
                version = "1.0.0"
                domain = "d"
                severity = Severity.BLOCK
                applies_to = ["x.y.z"]

                def evaluate(self, command, context, projected_state):
                    return self.pass_rule()

    def test_bad_version_rejected(self):
        with pytest.raises(TypeError, match="semantic version"):
            class BadVersion(BaseRule):
                rule_id = "X-1"
                version = "v1"
                domain = "d"
                severity = Severity.BLOCK
                applies_to = ["x.y.z"]

                def evaluate(self, command, context, projected_state):
                    return self.pass_rule()

    def test_bad_severity_rejected(self):
        with pytest.raises(TypeError):
            class BadSeverity(BaseRule):
                rule_id = "X-2"
                version = "1.0.0"
                domain = "d"
                severity = "WARN"
                applies_to = ["x.y.z"]

                def evaluate(self, command, context, projected_state):
                    return self.pass_rule()

    def test_empty_applies_to_rejected(self):
        with pytest.raises(TypeError):
            class NoTargets(BaseRule):
                rule_id = "X-3"
                version = "1.0.0"
                domain = "d"
                severity = Severity.BLOCK
                applies_to = []

                def evaluate(self, command, context, projected_state):
                    return self.pass_rule()

    def test_applies_to_command(self):
        rule = AttachedValueBlock()
        assert rule.applies_to_command(PAYMENT_AUTHORIZE_COMMAND)
        assert rule.applies_to_command(REDEMPTION_AUTHORIZE_COMMAND)
        assert not rule.applies_to_command("other.thing.do.request")


# ══════════════════════════════════════════════════════════════
# REGISTRY
# ══════════════════════════════════════════════════════════════

class TestPolicyRegistry:
    def test_duplicate_rule_rejected(self):
        registry = PolicyRegistry()
        registry.register_rule(AlwaysPassRule())
        with pytest.raises(DuplicateRuleError):
            registry.register_rule(AlwaysPassRule())

    def test_non_rule_rejected(self):
        with pytest.raises(TypeError):
            PolicyRegistry().register_rule(object())

    def test_locked_registry_rejects_registration(self):
        registry = PolicyRegistry()
        registry.lock(version="1.0.0")
        with pytest.raises(RegistryLockedError):
            registry.register_rule(AlwaysPassRule())

    def test_snapshot_sorted_by_rule_id(self):
        registry = build_authorization_registry()
        rules = registry.get_rules_for_command(
            PAYMENT_AUTHORIZE_COMMAND, policy_version=INITIAL_POLICY_VERSION,
        )
        assert [r.rule_id for r in rules] == ["AUTH-001", "AUTH-002", "AUTH-003"]

    def test_unknown_version_gives_no_rules(self):
        registry = build_authorization_registry()
        assert not registry.has_version("9.9.9")
        assert registry.get_rules_for_command(
            PAYMENT_AUTHORIZE_COMMAND, policy_version="9.9.9",
        ) == []

    def test_locked_versions(self):
        registry = build_authorization_registry(version="2.0.0")
        assert registry.has_version("2.0.0")
        assert not registry.has_version(INITIAL_POLICY_VERSION)
        assert len(registry.get_rules_for_command(
            PAYMENT_AUTHORIZE_COMMAND, policy_version="2.0.0",
        )) == 3


# ══════════════════════════════════════════════════════════════
# ENGINE - FAIL SAFE
# ══════════════════════════════════════════════════════════════

class TestPolicyEngineFailSafe:
    def _engine(self, *rules) -> PolicyEngine:
        registry = PolicyRegistry()
        for rule in rules:
            registry.register_rule(rule)
        registry.lock(version=INITIAL_POLICY_VERSION)
        return PolicyEngine(registry=registry)

    def test_rule_exception_becomes_block(self):
        decision = self._engine(ExplodingRule()).evaluate(thing_command(), None)
        assert not decision.allowed
        assert decision.violations[0].rule_id == "TEST-BOOM"
        assert decision.violations[0].severity == Severity.BLOCK
        assert decision.violations[0].metadata["error_type"] == "RuntimeError"

    def test_wrong_return_type_becomes_block(self):
        decision = self._engine(WrongReturnRule()).evaluate(thing_command(), None)
        assert not decision.allowed
        assert decision.violations[0].metadata["error_type"] == "INVALID_RETURN_TYPE"

    def test_explanation_tree(self):
        decision = self._engine(FailRule(), AlwaysPassRule()).evaluate(thing_command(), None)
        tree = decision.explanation_tree
        assert tree["rules_evaluated"] == 2
        assert tree["rules_passed"] == 1
        assert tree["block_count"] == 1
        assert tree["policy_version"] == INITIAL_POLICY_VERSION

    def test_unrelated_command_has_no_rules(self):
        decision = self._engine(AlwaysPassRule()).evaluate(
            StubCommand(command_type="other.thing.do.request", payload={}), None,
        )
        assert decision.allowed
        assert decision.explanation_tree["rules_evaluated"] == 0

    def test_decision_payload(self):
        decision = self._engine(ExplodingRule()).evaluate(thing_command(), None)
        payload = decision.to_payload()
        assert isinstance(decision, PolicyDecision)
        assert payload["allowed"] is False
        assert payload["policy_version"] == INITIAL_POLICY_VERSION
        assert payload["violations"][0]["rule_id"] == "TEST-BOOM"
        assert payload["violations"][0]["metadata"]["exception"] == "boom"
        assert payload["explanation_tree"]["block_count"] == 1


# ══════════════════════════════════════════════════════════════
# AUTHORIZATION RULES
# ══════════════════════════════════════════════════════════════

class TestAuthorizationRules:
    def test_attached_value_blocks(self):
        result = AttachedValueBlock().evaluate(hook_command(attached_value=5), context(), {})
        assert isinstance(result, RuleResult)
        assert not result.passed
        assert result.metadata["attached_value"] == 5

    def test_no_value_passes(self):
        assert AttachedValueBlock().evaluate(hook_command(), context(), {}).passed

    def test_unregistered_caller_blocks(self):
        result = RegisteredTerminalBlock().evaluate(
            hook_command(caller="stranger"), context(), {},
        )
        assert not result.passed
        assert result.metadata["caller"] == "stranger"

    def test_terminal_of_other_project_blocks(self):
        directory = make_directory()
        directory.add_terminal(99, "other-terminal")
        result = RegisteredTerminalBlock().evaluate(
            hook_command(caller="other-terminal"),
            StubContext(project_id=PROJECT_ID, directory=directory),
            {},
        )
        assert not result.passed

    def test_wrong_project_blocks(self):
        result = ProjectScopeBlock().evaluate(hook_command(project_id=8), context(), {})
        assert not result.passed
        assert result.metadata["event_project_id"] == 8

    def test_valid_notice_passes_all(self):
        engine = PolicyEngine(build_authorization_registry())
        decision = engine.evaluate(hook_command(), context())
        assert decision.allowed
        assert decision.explanation_tree["rules_passed"] == 3

    def test_all_violations_reported_together(self):
        engine = PolicyEngine(build_authorization_registry())
        decision = engine.evaluate(
            hook_command(caller="stranger", project_id=8, attached_value=1),
            context(),
        )
        assert not decision.allowed
        assert decision.violated_rule_ids == ("AUTH-001", "AUTH-002", "AUTH-003")

    def test_redemption_command_uses_same_rules(self):
        engine = PolicyEngine(build_authorization_registry())
        decision = engine.evaluate(
            hook_command(attached_value=1, command_type=REDEMPTION_AUTHORIZE_COMMAND),
            context(),
        )
        assert decision.violated_rule_ids == ("AUTH-001",)

    def test_missing_directory_is_block_not_crash(self):
        engine = PolicyEngine(build_authorization_registry())
        decision = engine.evaluate(
            hook_command(), StubContext(project_id=PROJECT_ID, directory=None),
        )
        assert not decision.allowed
        assert decision.violated_rule_ids == ("AUTH-002",)
