"""
BTP Command Layer - Rejection Model
=====================================
Structured rejection reasons for denied policy calls.

A rejection is NOT an exception. It is an explanation structure
that travels inside the raised error and into the event journal.

Every rejection must be:
- Deterministic (same input -> same rejection)
- Auditable (code + message + policy)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a rejected call.

    Fields:
        code:        Machine-readable rejection code (e.g. 'PAYER_NOT_ALLOWED').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        """Serialize for event payload."""
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Lifecycle ─────────────────────────────────────────────
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    POLICY_NOT_INITIALIZED = "POLICY_NOT_INITIALIZED"
    REENTRANT_CALL = "REENTRANT_CALL"

    # ── Authorization hooks ───────────────────────────────────
    INVALID_PAYMENT_EVENT = "INVALID_PAYMENT_EVENT"
    INVALID_REDEMPTION_EVENT = "INVALID_REDEMPTION_EVENT"
    PAYER_NOT_ALLOWED = "PAYER_NOT_ALLOWED"

    # ── Redemption safety ─────────────────────────────────────
    OVER_REDEMPTION = "OVER_REDEMPTION"

    # ── General ───────────────────────────────────────────────
    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
