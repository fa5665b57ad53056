"""
BTP Policy Engine - Authorization Rule Set
============================================
Structural checks run on every completed payment / redemption notice.

Rules:
1. AUTH-001: No native value attached to the notification (BLOCK)
2. AUTH-002: Caller must be a registered terminal of the project (BLOCK)
3. AUTH-003: Event project must match the bound project (BLOCK)

context must expose:
    project_id: int                       bound project
    directory:  TerminalDirectory         external terminal registry

command.payload must contain:
    caller, project_id, attached_value
"""

from __future__ import annotations

from typing import Any

from core.policy.contracts import BaseRule
from core.policy.engine import INITIAL_POLICY_VERSION
from core.policy.registry import PolicyRegistry
from core.policy.result import RuleResult, Severity

PAYMENT_AUTHORIZE_COMMAND = "treasury_policy.payment.authorize.request"
REDEMPTION_AUTHORIZE_COMMAND = "treasury_policy.redemption.authorize.request"

_HOOK_COMMANDS = [PAYMENT_AUTHORIZE_COMMAND, REDEMPTION_AUTHORIZE_COMMAND]


class AttachedValueBlock(BaseRule):
    """BLOCK if native value was sent along with the notification."""

    rule_id = "AUTH-001"
    version = "1.0.0"
    domain = "authorization"
    severity = Severity.BLOCK
    applies_to = list(_HOOK_COMMANDS)

    def evaluate(
        self, command: Any, context: Any, projected_state: dict
    ) -> RuleResult:
        value = command.payload.get("attached_value", 0)
        if value != 0:
            return self.fail(
                message=(
                    f"Notification carried {value} native value; funds must "
                    f"already be in the treasury."
                ),
                metadata={"attached_value": value},
            )
        return self.pass_rule(message="No value attached.")


class RegisteredTerminalBlock(BaseRule):
    """BLOCK if the caller is not a terminal of the bound project."""

    rule_id = "AUTH-002"
    version = "1.0.0"
    domain = "authorization"
    severity = Severity.BLOCK
    applies_to = list(_HOOK_COMMANDS)

    def evaluate(
        self, command: Any, context: Any, projected_state: dict
    ) -> RuleResult:
        caller = command.payload.get("caller")
        if not context.directory.is_terminal_of(context.project_id, caller):
            return self.fail(
                message=(
                    f"Caller '{caller}' is not a terminal of project "
                    f"{context.project_id}."
                ),
                metadata={"caller": caller, "project_id": context.project_id},
            )
        return self.pass_rule(message=f"Caller '{caller}' is a terminal.")


class ProjectScopeBlock(BaseRule):
    """BLOCK if the event's project is not the bound project."""

    rule_id = "AUTH-003"
    version = "1.0.0"
    domain = "authorization"
    severity = Severity.BLOCK
    applies_to = list(_HOOK_COMMANDS)

    def evaluate(
        self, command: Any, context: Any, projected_state: dict
    ) -> RuleResult:
        event_project = command.payload.get("project_id")
        if event_project != context.project_id:
            return self.fail(
                message=(
                    f"Event project {event_project} does not match bound "
                    f"project {context.project_id}."
                ),
                metadata={
                    "event_project_id": event_project,
                    "bound_project_id": context.project_id,
                },
            )
        return self.pass_rule(message="Project matches.")


AUTHORIZATION_RULES = (
    AttachedValueBlock,
    RegisteredTerminalBlock,
    ProjectScopeBlock,
)


def build_authorization_registry(
    version: str = INITIAL_POLICY_VERSION,
) -> PolicyRegistry:
    """Registry holding the authorization rules, locked under `version`."""
    registry = PolicyRegistry()
    for rule_cls in AUTHORIZATION_RULES:
        registry.register_rule(rule_cls())
    registry.lock(version=version)
    return registry
