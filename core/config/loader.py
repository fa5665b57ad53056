"""
BTP Core Config - Settings Loader
===================================
Reads the `TREASURY_POLICY` mapping from Django settings.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.config.rules import PolicyConfig

logger = logging.getLogger("btp.config")

SETTINGS_KEY = "TREASURY_POLICY"


def load_policy_config(settings_obj: Optional[Any] = None) -> PolicyConfig:
    """
    Build a PolicyConfig from settings.

    Missing setting -> default config (no tiers, single-slot ledger).
    """
    if settings_obj is None:
        from django.conf import settings as settings_obj

    data = getattr(settings_obj, SETTINGS_KEY, None) or {}
    config = PolicyConfig.from_mapping(data)
    logger.info(
        f"Policy config loaded: {len(config.bonus_schedule.tiers)} tier(s), "
        f"ledger={config.weight_ledger_mode}, version={config.policy_version}"
    )
    return config
