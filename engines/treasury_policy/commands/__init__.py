"""
BTP Treasury Policy Engine - Commands
=======================================
Request and notification objects accepted by the policy delegate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from core.config.rules import VALID_WEIGHT_LEDGER_MODES, WEIGHT_LEDGER_SINGLE_SLOT
from core.policy.rules import PAYMENT_AUTHORIZE_COMMAND, REDEMPTION_AUTHORIZE_COMMAND
from engines.treasury_policy.events import (
    INITIALIZE_COMMAND,
    QUOTE_PAYMENT_COMMAND,
    QUOTE_REDEMPTION_COMMAND,
)


def _require_int(name: str, value, minimum: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int.")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}.")


def _require_str(name: str, value) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}.")


@dataclass(frozen=True)
class InitializePolicyRequest:
    """One-shot binding of a policy instance to a project."""
    project_id: int
    allow_list: Tuple[str, ...]
    actor_id: str
    bonus_tiers: Tuple[dict, ...] = ()
    weight_ledger_mode: str = WEIGHT_LEDGER_SINGLE_SLOT
    policy_version: str = "1.0.0"

    command_type = INITIALIZE_COMMAND

    def __post_init__(self):
        _require_int("project_id", self.project_id, 1)
        if not isinstance(self.allow_list, tuple):
            raise ValueError("allow_list must be a tuple.")
        for payer in self.allow_list:
            if not payer or not isinstance(payer, str):
                raise ValueError(f"Invalid payer identity: {payer!r}")
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty.")
        if self.weight_ledger_mode not in VALID_WEIGHT_LEDGER_MODES:
            raise ValueError(f"Invalid weight_ledger_mode: {self.weight_ledger_mode}")


@dataclass(frozen=True)
class QuotePaymentRequest:
    """Host asks for payment terms for a base weight."""
    base_weight: int
    memo: str = ""

    command_type = QUOTE_PAYMENT_COMMAND

    def __post_init__(self):
        _require_int("base_weight", self.base_weight, 0)
        if not isinstance(self.memo, str):
            raise ValueError("memo must be a string.")


@dataclass(frozen=True)
class QuoteRedemptionRequest:
    """Host asks for redemption terms for a reclaim amount."""
    reclaim_amount: int
    memo: str = ""

    command_type = QUOTE_REDEMPTION_COMMAND

    def __post_init__(self):
        _require_int("reclaim_amount", self.reclaim_amount, 0)
        if not isinstance(self.memo, str):
            raise ValueError("memo must be a string.")

    @property
    def payload(self) -> dict:
        return {"reclaim_amount": self.reclaim_amount, "memo": self.memo}


# ══════════════════════════════════════════════════════════════
# COMPLETION NOTICES
# ══════════════════════════════════════════════════════════════
# Only field types are checked here. Structural problems (unknown
# caller, wrong project, attached value) go to the authorization rules.

@dataclass(frozen=True)
class PaymentCompletedNotice:
    """Host notifies that a payment was executed."""
    caller: str
    project_id: int
    attached_value: int
    payer: str

    command_type = PAYMENT_AUTHORIZE_COMMAND

    def __post_init__(self):
        _require_str("caller", self.caller)
        _require_int("project_id", self.project_id, 0)
        _require_int("attached_value", self.attached_value, 0)
        _require_str("payer", self.payer)

    @property
    def payload(self) -> dict:
        return {
            "caller": self.caller,
            "project_id": self.project_id,
            "attached_value": self.attached_value,
            "payer": self.payer,
        }


@dataclass(frozen=True)
class RedemptionCompletedNotice:
    """Host notifies that a redemption was executed."""
    caller: str
    project_id: int
    attached_value: int

    command_type = REDEMPTION_AUTHORIZE_COMMAND

    def __post_init__(self):
        _require_str("caller", self.caller)
        _require_int("project_id", self.project_id, 0)
        _require_int("attached_value", self.attached_value, 0)

    @property
    def payload(self) -> dict:
        return {
            "caller": self.caller,
            "project_id": self.project_id,
            "attached_value": self.attached_value,
        }
