"""
BTP Policy Engine - Rule Contract
===================================
Abstract base class for all policy rules.

Every rule must:
- Be deterministic (same input → same output)
- Not emit events or persist anything
- Declare its severity (BLOCK)
- Declare which command types it applies to

Contract validation is enforced at class creation time.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, List

from core.policy.result import RuleResult, Severity


SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class BaseRule(ABC):
    """
    Abstract base for BTP policy rules.

    Subclasses must:
    - Set rule_id (unique identifier, e.g. 'AUTH-001')
    - Set version (semver string, e.g. '1.0.0')
    - Set domain (e.g. 'authorization')
    - Set severity (BLOCK)
    - Set applies_to (list of command_type values)
    - Implement evaluate()
    """

    rule_id: str = ""
    version: str = ""
    domain: str = ""
    severity: str = ""
    applies_to: List[str] = []

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        # Intermediate abstract classes are not validated
        if getattr(cls, "__abstractmethods__", None):
            return

        if not cls.rule_id or not isinstance(cls.rule_id, str):
            raise TypeError(
                f"Rule class {cls.__name__} must declare "
                f"rule_id as non-empty string."
            )

        if not cls.version or not isinstance(cls.version, str):
            raise TypeError(
                f"Rule class {cls.__name__} must declare "
                f"version as non-empty string."
            )

        if not SEMVER_PATTERN.match(cls.version):
            raise TypeError(
                f"Rule class {cls.__name__} version '{cls.version}' "
                f"must be semantic version format X.Y.Z."
            )

        if not cls.domain or not isinstance(cls.domain, str):
            raise TypeError(
                f"Rule class {cls.__name__} must declare "
                f"domain as non-empty string."
            )

        if cls.severity not in Severity.ALL:
            raise TypeError(
                f"Rule class {cls.__name__} severity "
                f"'{cls.severity}' must be one of: {sorted(Severity.ALL)}"
            )

        if not cls.applies_to or not isinstance(cls.applies_to, list):
            raise TypeError(
                f"Rule class {cls.__name__} must declare applies_to "
                f"as non-empty list of command types."
            )

    @abstractmethod
    def evaluate(
        self,
        command: Any,
        context: Any,
        projected_state: dict,
    ) -> RuleResult:
        """
        Evaluate this rule against command + context + projected state.

        Args:
            command:          Object exposing command_type and payload.
            context:          Bound policy context (project id, directory).
            projected_state:  Current projected state relevant to this rule.
        """
        ...

    def pass_rule(self, message: str = "Rule passed.") -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            passed=True,
            severity=self.severity,
            message=message,
        )

    def fail(
        self,
        message: str,
        metadata: dict = None,
    ) -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            passed=False,
            severity=self.severity,
            message=message,
            metadata=metadata or {},
        )

    def applies_to_command(self, command_type: str) -> bool:
        return command_type in self.applies_to
