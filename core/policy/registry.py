"""
BTP Policy Engine - Policy Registry
=====================================
Central registry for policy rules with version-scoped snapshots.

Responsibilities:
- Register rule instances
- Enforce unique rule_id + version
- Map rules → applies_to command types
- Lock after bootstrap with a version snapshot

Unknown version at evaluation time → empty rule set. Callers that
must not run with an empty set check has_version() up front.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, List, Tuple

from core.policy.contracts import BaseRule
from core.policy.exceptions import (
    DuplicateRuleError,
    RegistryLockedError,
)

logger = logging.getLogger("btp.policy")


class PolicyRegistry:
    """
    Registry of policy rules with version snapshots.

    Usage:
        registry = PolicyRegistry()
        registry.register_rule(AttachedValueBlock())
        registry.lock(version="1.0.0")
        rules = registry.get_rules_for_command(
            PAYMENT_AUTHORIZE_COMMAND, policy_version="1.0.0",
        )
    """

    def __init__(self):
        self._rules: Dict[str, BaseRule] = {}  # key: "rule_id:version"
        self._command_index: Dict[str, List[BaseRule]] = {}
        self._locked: bool = False
        self._lock = Lock()

        # version_id → { command_type → (rules...) }
        self._version_snapshots: Dict[
            str, Dict[str, Tuple[BaseRule, ...]]
        ] = {}

    # ══════════════════════════════════════════════════════════
    # REGISTRATION
    # ══════════════════════════════════════════════════════════

    def register_rule(self, rule: BaseRule) -> None:
        if not isinstance(rule, BaseRule):
            raise TypeError(
                f"Expected BaseRule instance, got {type(rule).__name__}."
            )

        key = f"{rule.rule_id}:{rule.version}"

        with self._lock:
            if self._locked:
                raise RegistryLockedError()

            if key in self._rules:
                raise DuplicateRuleError(rule.rule_id, rule.version)

            self._rules[key] = rule
            for cmd_type in rule.applies_to:
                self._command_index.setdefault(cmd_type, []).append(rule)

            logger.info(
                f"Rule registered: {rule.rule_id} v{rule.version} "
                f"[{rule.severity}] domain={rule.domain} "
                f"applies_to={rule.applies_to}"
            )

    def lock(self, version: str = None) -> None:
        """Lock registry and, if a version is given, freeze its snapshot."""
        with self._lock:
            if version is not None:
                self._version_snapshots[version] = {
                    cmd_type: tuple(sorted(rules, key=lambda r: r.rule_id))
                    for cmd_type, rules in self._command_index.items()
                }
                logger.info(
                    f"Policy version '{version}' snapshot frozen "
                    f"- {len(self._rules)} rules"
                )

            if not self._locked:
                self._locked = True
                logger.info(
                    f"Policy Registry LOCKED - {len(self._rules)} rules"
                )

    # ══════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════

    def get_rules_for_command(
        self,
        command_type: str,
        policy_version: str = None,
    ) -> List[BaseRule]:
        """Rules for a command type, sorted by rule_id."""
        with self._lock:
            if policy_version is not None:
                snapshot = self._version_snapshots.get(policy_version)
                if snapshot is None:
                    return []
                return list(snapshot.get(command_type, ()))

            rules = self._command_index.get(command_type, [])
            return sorted(rules, key=lambda r: r.rule_id)

    def has_version(self, version: str) -> bool:
        with self._lock:
            return version in self._version_snapshots

