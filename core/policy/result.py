"""
BTP Policy Engine - Result Models
===================================
RuleResult: single rule evaluation outcome.
PolicyDecision: aggregate of all rule results.

Enforcement:
    BLOCK → call rejected, full stop

These are pure data structures. No side effects. No persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


class Severity:
    """Enforcement levels."""
    BLOCK = "BLOCK"

    ALL = frozenset({"BLOCK"})


# ══════════════════════════════════════════════════════════════
# RULE RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RuleResult:
    """
    Outcome of a single rule evaluation.

    Fields:
        rule_id:    Unique rule identifier.
        passed:     True if rule passed (no violation).
        severity:   BLOCK (meaningful only if not passed).
        message:    Human-readable explanation.
        metadata:   Structured data for audit.
    """

    rule_id: str
    passed: bool
    severity: str
    message: str
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.rule_id or not isinstance(self.rule_id, str):
            raise ValueError("rule_id must be a non-empty string.")

        if not isinstance(self.passed, bool):
            raise ValueError("passed must be a bool.")

        if self.severity not in Severity.ALL:
            raise ValueError(
                f"severity '{self.severity}' not valid. "
                f"Must be one of: {sorted(Severity.ALL)}"
            )

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")


# ══════════════════════════════════════════════════════════════
# POLICY DECISION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PolicyDecision:
    """
    Aggregate decision from policy evaluation.

    Any BLOCK → allowed=False.
    """

    allowed: bool
    violations: List[RuleResult] = field(default_factory=list)
    explanation_tree: dict = field(default_factory=dict)
    policy_version: str = ""

    @property
    def violated_rule_ids(self) -> Tuple[str, ...]:
        return tuple(v.rule_id for v in self.violations)

    def to_payload(self) -> dict:
        """Serialize for attaching to a rejected hook error."""
        return {
            "allowed": self.allowed,
            "policy_version": self.policy_version,
            "violations": [
                {"rule_id": v.rule_id, "message": v.message,
                 "metadata": v.metadata}
                for v in self.violations
            ],
            "explanation_tree": self.explanation_tree,
        }
