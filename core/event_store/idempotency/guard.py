"""
BTP Event Store - Idempotency Guard
=====================================
No duplicate event_id is ever persisted.

A) Application level: query before save
B) Database level: IntegrityError on the primary key as race fallback

Duplicate → deterministic rejection. No payload comparison, no merge.
"""

import uuid

from core.event_store.idempotency.errors import (
    IdempotencyRejectionCode,
    IdempotencyViolatedRule,
)
from core.event_store.models import PolicyEvent
from core.event_store.validators.errors import Rejection, ValidationResult


def _duplicate(event_id: uuid.UUID, detail: str = "") -> ValidationResult:
    return ValidationResult(
        accepted=False,
        rejection=Rejection(
            code=IdempotencyRejectionCode.DUPLICATE_EVENT_ID,
            message=f"Event with ID {event_id} already exists{detail}.",
            violated_rule=IdempotencyViolatedRule.EVENT_IDEMPOTENCY,
        ),
    )


def check_idempotency(event_id: uuid.UUID) -> ValidationResult:
    if PolicyEvent.objects.filter(event_id=event_id).exists():
        return _duplicate(event_id)
    return ValidationResult(accepted=True)


def handle_integrity_error(event_id: uuid.UUID) -> ValidationResult:
    """Convert a primary-key IntegrityError into a rejection."""
    return _duplicate(event_id, " (detected at database level)")
