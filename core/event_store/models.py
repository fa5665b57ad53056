"""
BTP Event Store - Policy Event Model
======================================
The only writable record in the journal.

RULES:
- No deletes, no overwrites, no updates after persistence
- Hash-chain integrity via previous_event_hash → event_hash
- `sequence` is the per-project replay order, starting at 1
"""

import uuid

from django.db import models


class PolicyEvent(models.Model):
    """One immutable policy event."""

    # Unique; enforces idempotency
    event_id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    # e.g. treasury_policy.payment.authorized.v1
    event_type = models.CharField(max_length=255)

    project_id = models.BigIntegerField()

    source_engine = models.CharField(max_length=100)

    # Caller identity that triggered the event
    actor_id = models.CharField(max_length=255)

    sequence = models.PositiveIntegerField()

    payload = models.JSONField()

    created_at = models.DateTimeField(auto_now_add=True)

    # ── Integrity (Hash-Chain) ────────────────────────────────
    previous_event_hash = models.CharField(max_length=64)

    event_hash = models.CharField(max_length=64)

    class Meta:
        db_table = "btp_policy_event"
        ordering = ["project_id", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=("project_id", "sequence"),
                name="uq_evt_project_sequence",
            ),
            models.UniqueConstraint(
                fields=("project_id", "previous_event_hash"),
                name="uq_evt_project_prev_hash",
            ),
        ]

    def __str__(self):
        return f"{self.event_type} #{self.sequence} (project {self.project_id})"
