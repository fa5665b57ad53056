"""
BTP Policy Engine - Rule Governance Layer
===========================================
Deterministic, engine-agnostic rule evaluation.

Policy is evaluation, not execution.
Explanation is mandatory.
"""

from core.policy.contracts import BaseRule
from core.policy.engine import INITIAL_POLICY_VERSION, PolicyEngine
from core.policy.exceptions import (
    DuplicateRuleError,
    PolicyEngineError,
    PolicyVersionNotFound,
    RegistryLockedError,
)
from core.policy.registry import PolicyRegistry
from core.policy.result import PolicyDecision, RuleResult, Severity
from core.policy.rules import (
    AUTHORIZATION_RULES,
    PAYMENT_AUTHORIZE_COMMAND,
    REDEMPTION_AUTHORIZE_COMMAND,
    build_authorization_registry,
)

__all__ = [
    # ── Contract ──────────────────────────────────────────────
    "BaseRule",
    # ── Engine ────────────────────────────────────────────────
    "PolicyEngine",
    "INITIAL_POLICY_VERSION",
    # ── Registry ──────────────────────────────────────────────
    "PolicyRegistry",
    # ── Results ───────────────────────────────────────────────
    "PolicyDecision",
    "RuleResult",
    "Severity",
    # ── Authorization rules ───────────────────────────────────
    "AUTHORIZATION_RULES",
    "PAYMENT_AUTHORIZE_COMMAND",
    "REDEMPTION_AUTHORIZE_COMMAND",
    "build_authorization_registry",
    # ── Exceptions ────────────────────────────────────────────
    "PolicyEngineError",
    "DuplicateRuleError",
    "PolicyVersionNotFound",
    "RegistryLockedError",
]
