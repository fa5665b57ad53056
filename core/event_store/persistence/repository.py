"""
BTP Event Store - Persistence Repository
==========================================
Low-level ORM helpers used by the persistence service.
"""

from __future__ import annotations

from core.event_store.models import PolicyEvent

REPLAY_FIELDS = (
    "event_id",
    "event_type",
    "project_id",
    "source_engine",
    "actor_id",
    "sequence",
    "payload",
    "created_at",
    "previous_event_hash",
    "event_hash",
)


def save_event(record: dict) -> PolicyEvent:
    """Caller owns all validation and transactional guards."""
    return PolicyEvent.objects.create(**record)


def get_latest_event_for_project(
    project_id: int,
    *,
    lock: bool = False,
) -> PolicyEvent | None:
    query = PolicyEvent.objects.filter(project_id=project_id).order_by("-sequence")
    if lock:
        query = query.select_for_update()
    return query.first()


def load_events_for_project(project_id: int) -> tuple[dict, ...]:
    """Event envelopes for one project in replay order (sequence ASC)."""
    rows = (
        PolicyEvent.objects.filter(project_id=project_id)
        .order_by("sequence")
        .values(*REPLAY_FIELDS)
    )
    return tuple(dict(row) for row in rows)
