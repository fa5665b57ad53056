"""
BTP Treasury Policy Engine - Errors
=====================================
Every failure aborts the requested operation and leaves state unchanged.
Each error carries the RejectionReason that produced it.
"""

from __future__ import annotations

from typing import Optional, Tuple

from core.commands.rejection import ReasonCode, RejectionReason


class TreasuryPolicyError(Exception):
    """Base error for treasury policy operations."""

    def __init__(self, rejection: RejectionReason):
        self.rejection = rejection
        super().__init__(rejection.message)

    @property
    def code(self) -> str:
        return self.rejection.code


class AlreadyInitialized(TreasuryPolicyError):
    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__(RejectionReason(
            code=ReasonCode.ALREADY_INITIALIZED,
            message=f"Policy is already bound to project {project_id}.",
            policy_name="policy_must_be_uninitialized_policy",
        ))


class NotInitialized(TreasuryPolicyError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(RejectionReason(
            code=ReasonCode.POLICY_NOT_INITIALIZED,
            message=f"Policy must be initialized before {operation}.",
            policy_name="policy_must_be_active_policy",
        ))


class ReentrantCallError(TreasuryPolicyError):
    def __init__(self, operation: str, in_progress: str):
        self.operation = operation
        self.in_progress = in_progress
        super().__init__(RejectionReason(
            code=ReasonCode.REENTRANT_CALL,
            message=(
                f"Reentrant call to {operation} while {in_progress} "
                f"has not committed."
            ),
            policy_name="non_reentrant_guard",
        ))


class _InvalidHookEvent(TreasuryPolicyError):
    reason_code = ""
    kind = ""

    def __init__(
        self,
        caller: str,
        project_id: int,
        attached_value: int,
        violated_rules: Tuple[str, ...] = (),
        explanation: Optional[dict] = None,
    ):
        self.caller = caller
        self.project_id = project_id
        self.attached_value = attached_value
        self.violated_rules = tuple(violated_rules)
        self.explanation = explanation or {}
        super().__init__(RejectionReason(
            code=self.reason_code,
            message=(
                f"Invalid {self.kind} event: caller={caller!r} "
                f"project={project_id} value={attached_value} "
                f"failed={list(self.violated_rules)}."
            ),
            policy_name="authorization_rules",
        ))


class InvalidPaymentEvent(_InvalidHookEvent):
    reason_code = ReasonCode.INVALID_PAYMENT_EVENT
    kind = "payment"


class InvalidRedemptionEvent(_InvalidHookEvent):
    reason_code = ReasonCode.INVALID_REDEMPTION_EVENT
    kind = "redemption"


class PayerNotAllowed(TreasuryPolicyError):
    def __init__(self, rejection: RejectionReason, payer: str):
        self.payer = payer
        super().__init__(rejection)


class OverRedemption(TreasuryPolicyError):
    def __init__(self, rejection: RejectionReason, bound: int, requested: int):
        self.bound = bound
        self.requested = requested
        super().__init__(rejection)
