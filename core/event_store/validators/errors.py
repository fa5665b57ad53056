"""
BTP Event Store - Validation Errors & Results
===============================================
Every rejection is deterministic, explicit, and auditable.
"""

from dataclasses import dataclass
from typing import Optional


class RejectionCode:
    """Rejection codes for event envelope validation."""

    MISSING_FIELD = "MISSING_FIELD"
    INVALID_PROJECT_ID = "INVALID_PROJECT_ID"
    EVENT_TYPE_NOT_OWNED = "EVENT_TYPE_NOT_OWNED"
    SOURCE_ENGINE_MISMATCH = "SOURCE_ENGINE_MISMATCH"


class ViolatedRule:
    """Rule identifiers for audit trail."""

    SCHEMA_PRESENCE = "SCHEMA_PRESENCE"
    PROJECT_SCOPE = "PROJECT_SCOPE"
    ENGINE_CONTRACT = "ENGINE_CONTRACT"


@dataclass(frozen=True)
class Rejection:
    """One explicit, auditable reason for rejecting an event."""

    code: str
    message: str
    violated_rule: str


@dataclass(frozen=True)
class ValidationResult:
    """
    accepted=True  → event may proceed to persistence
    accepted=False → event is rejected with explicit reason
    """

    accepted: bool
    rejection: Optional[Rejection] = None
