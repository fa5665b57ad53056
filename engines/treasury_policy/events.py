"""
BTP Treasury Policy Engine - Event Types
==========================================
Allow-listed, bonus-weighted payment/redemption delegate.
One instance binds to exactly one project.
"""

from core.engines.contracts import EngineContract
from core.policy.rules import PAYMENT_AUTHORIZE_COMMAND, REDEMPTION_AUTHORIZE_COMMAND

ENGINE_NAME = "treasury_policy"

# ── Event Types ───────────────────────────────────────────────

POLICY_INITIALIZED_V1 = "treasury_policy.policy.initialized.v1"
WEIGHT_RECORDED_V1 = "treasury_policy.weight.recorded.v1"
PAYMENT_AUTHORIZED_V1 = "treasury_policy.payment.authorized.v1"
REDEMPTION_AUTHORIZED_V1 = "treasury_policy.redemption.authorized.v1"

ALL_EVENT_TYPES = (
    POLICY_INITIALIZED_V1,
    WEIGHT_RECORDED_V1,
    PAYMENT_AUTHORIZED_V1,
    REDEMPTION_AUTHORIZED_V1,
)

TREASURY_POLICY_CONTRACT = EngineContract(
    engine_name=ENGINE_NAME,
    owned_event_types=frozenset(ALL_EVENT_TYPES),
)

# ── Command Types ─────────────────────────────────────────────

INITIALIZE_COMMAND = "treasury_policy.policy.initialize.request"
QUOTE_PAYMENT_COMMAND = "treasury_policy.payment.quote.request"
QUOTE_REDEMPTION_COMMAND = "treasury_policy.redemption.quote.request"


# ── Payload Builders ──────────────────────────────────────────

def _policy_initialized(cmd, **_):
    return {
        "project_id": cmd.project_id,
        "allow_list": sorted(set(cmd.allow_list)),
        "bonus_tiers": list(cmd.bonus_tiers),
        "weight_ledger_mode": cmd.weight_ledger_mode,
        "policy_version": cmd.policy_version,
    }


def _weight_recorded(cmd, *, bonus_percent, adjusted_weight, **_):
    return {
        "base_weight": cmd.base_weight,
        "bonus_percent": bonus_percent,
        "adjusted_weight": adjusted_weight,
        "memo": cmd.memo,
    }


def _payment_authorized(cmd, **_):
    return {
        "caller": cmd.caller,
        "project_id": cmd.project_id,
        "payer": cmd.payer,
    }


def _redemption_authorized(cmd, **_):
    return {
        "caller": cmd.caller,
        "project_id": cmd.project_id,
    }


PAYLOAD_BUILDERS = {
    POLICY_INITIALIZED_V1: _policy_initialized,
    WEIGHT_RECORDED_V1: _weight_recorded,
    PAYMENT_AUTHORIZED_V1: _payment_authorized,
    REDEMPTION_AUTHORIZED_V1: _redemption_authorized,
}

COMMAND_TO_EVENT_TYPE = {
    INITIALIZE_COMMAND: POLICY_INITIALIZED_V1,
    QUOTE_PAYMENT_COMMAND: WEIGHT_RECORDED_V1,
    PAYMENT_AUTHORIZE_COMMAND: PAYMENT_AUTHORIZED_V1,
    REDEMPTION_AUTHORIZE_COMMAND: REDEMPTION_AUTHORIZED_V1,
}


def resolve_treasury_policy_event_type(command_type: str):
    return COMMAND_TO_EVENT_TYPE.get(command_type)
