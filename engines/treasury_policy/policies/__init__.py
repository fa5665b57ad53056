"""
BTP Treasury Policy Engine - Policies
=======================================
Lifecycle guards, the allow-list gate and the redemption safety guard.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason


def policy_must_be_uninitialized_policy(
    command,
    lifecycle_lookup=None,
) -> Optional[RejectionReason]:
    """Initialization is one-shot."""
    if lifecycle_lookup is None:
        return None
    if lifecycle_lookup() != "UNINITIALIZED":
        return RejectionReason(
            code=ReasonCode.ALREADY_INITIALIZED,
            message="Policy has already been initialized.",
            policy_name="policy_must_be_uninitialized_policy",
        )
    return None


def policy_must_be_active_policy(
    command,
    lifecycle_lookup=None,
) -> Optional[RejectionReason]:
    """Quotes and hooks need a bound project."""
    if lifecycle_lookup is None:
        return None
    if lifecycle_lookup() != "ACTIVE":
        return RejectionReason(
            code=ReasonCode.POLICY_NOT_INITIALIZED,
            message="Policy has not been initialized.",
            policy_name="policy_must_be_active_policy",
        )
    return None


def payer_allowed_policy(
    command,
    allow_lookup=None,
) -> Optional[RejectionReason]:
    """Payer must be on the allow-list captured at initialization."""
    if allow_lookup is None:
        return None
    payer = command.payload.get("payer")
    if not allow_lookup(payer):
        return RejectionReason(
            code=ReasonCode.PAYER_NOT_ALLOWED,
            message=f"Payer '{payer}' is not on the allow-list.",
            policy_name="payer_allowed_policy",
        )
    return None


def redemption_within_bound_policy(
    command,
    bound_lookup=None,
) -> Optional[RejectionReason]:
    """
    Reclaim amount must not exceed the weight-backed bound.

    bound_lookup() returns the largest reclaim amount still accepted.
    """
    if bound_lookup is None:
        return None
    requested = command.payload.get("reclaim_amount", 0)
    bound = bound_lookup()
    if requested > bound:
        return RejectionReason(
            code=ReasonCode.OVER_REDEMPTION,
            message=(
                f"Reclaim amount {requested} exceeds the bound {bound} "
                f"backed by the last issued weight."
            ),
            policy_name="redemption_within_bound_policy",
        )
    return None
