"""
BTP Policy Engine - Core Evaluation Engine
============================================
Deterministic, FAIL-SAFE rule evaluation.

- evaluate() NEVER raises. Rule exceptions convert to BLOCK.
- Rules are selected from the frozen snapshot of one policy version.

The PolicyEngine does NOT persist, emit events or mutate state.
"""

from __future__ import annotations

from typing import Any, List

from core.policy.contracts import BaseRule
from core.policy.registry import PolicyRegistry
from core.policy.result import PolicyDecision, RuleResult, Severity

INITIAL_POLICY_VERSION = "1.0.0"


class PolicyEngine:
    """
    Core policy evaluation engine.

    Usage:
        engine = PolicyEngine(registry=policy_registry)
        decision = engine.evaluate(
            command=payment_event,
            context=hook_context,
            projected_state={},
            policy_version="1.0.0",
        )
    """

    def __init__(self, registry: PolicyRegistry):
        self._registry = registry

    @property
    def registry(self) -> PolicyRegistry:
        return self._registry

    def evaluate(
        self,
        command: Any,
        context: Any,
        projected_state: dict = None,
        policy_version: str = None,
    ) -> PolicyDecision:
        """
        Evaluate all applicable rules for a command. Never raises.

        Rules run in rule_id order; every failed result is a violation.
        """
        if projected_state is None:
            projected_state = {}

        if policy_version is None:
            policy_version = INITIAL_POLICY_VERSION

        command_type = command.command_type
        applicable_rules = self._registry.get_rules_for_command(
            command_type, policy_version=policy_version
        )

        all_results: List[RuleResult] = [
            self._execute_rule_safe(rule, command, context, projected_state)
            for rule in applicable_rules
        ]

        violations = [r for r in all_results if not r.passed]

        return PolicyDecision(
            allowed=not violations,
            violations=violations,
            explanation_tree=self._build_explanation(
                command_type=command_type,
                policy_version=policy_version,
                all_results=all_results,
                violations=violations,
            ),
            policy_version=policy_version,
        )

    @staticmethod
    def _execute_rule_safe(
        rule: BaseRule,
        command: Any,
        context: Any,
        projected_state: dict,
    ) -> RuleResult:
        """Run one rule; any exception or bad return becomes BLOCK."""
        try:
            result = rule.evaluate(command, context, projected_state)
            if not isinstance(result, RuleResult):
                return RuleResult(
                    rule_id=rule.rule_id,
                    passed=False,
                    severity=Severity.BLOCK,
                    message=(
                        f"Rule returned {type(result).__name__}, "
                        f"expected RuleResult. Treated as BLOCK."
                    ),
                    metadata={
                        "error_type": "INVALID_RETURN_TYPE",
                        "returned_type": type(result).__name__,
                    },
                )
            return result
        except Exception as exc:
            return RuleResult(
                rule_id=rule.rule_id,
                passed=False,
                severity=Severity.BLOCK,
                message=f"Rule execution failure: {type(exc).__name__}",
                metadata={
                    "error_type": type(exc).__name__,
                    "exception": str(exc),
                    "rule_version": rule.version,
                },
            )

    @staticmethod
    def _build_explanation(
        command_type: str,
        policy_version: str,
        all_results: List[RuleResult],
        violations: List[RuleResult],
    ) -> dict:
        return {
            "command_type": command_type,
            "policy_version": policy_version,
            "rules_evaluated": len(all_results),
            "rules_passed": sum(1 for r in all_results if r.passed),
            "block_count": len(violations),
            "details": [
                {
                    "rule_id": r.rule_id,
                    "passed": r.passed,
                    "severity": r.severity,
                    "message": r.message,
                    "metadata": r.metadata,
                }
                for r in all_results
            ],
        }
