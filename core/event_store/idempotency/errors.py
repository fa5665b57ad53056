"""
BTP Event Store - Idempotency Errors
======================================
"""


class IdempotencyRejectionCode:
    DUPLICATE_EVENT_ID = "DUPLICATE_EVENT_ID"


class IdempotencyViolatedRule:
    EVENT_IDEMPOTENCY = "EVENT_IDEMPOTENCY"
