"""
BTP Core Config - Public API
===============================
Construction-time configuration (bonus tiers, weight ledger mode).
Doctrine: No hardcoded thresholds in engine logic.
"""

from core.config.loader import load_policy_config
from core.config.rules import (
    IDENTITY_PERCENT,
    VALID_WEIGHT_LEDGER_MODES,
    WEIGHT_LEDGER_ACCUMULATE,
    WEIGHT_LEDGER_SINGLE_SLOT,
    BonusSchedule,
    BonusTier,
    PolicyConfig,
)

__all__ = [
    "IDENTITY_PERCENT",
    "WEIGHT_LEDGER_SINGLE_SLOT",
    "WEIGHT_LEDGER_ACCUMULATE",
    "VALID_WEIGHT_LEDGER_MODES",
    "BonusTier",
    "BonusSchedule",
    "PolicyConfig",
    "load_policy_config",
]
