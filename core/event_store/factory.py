"""
BTP Event Store - Event Factory
=================================
Builds the event envelope handed to persist_event().

Pure: no database access. Sequence and hash fields are filled in
by the persistence layer inside the write transaction.
"""

from __future__ import annotations

import uuid


class PolicyEventFactory:
    """Envelope builder bound to one source engine."""

    def __init__(self, source_engine: str):
        if not source_engine or not isinstance(source_engine, str):
            raise ValueError("source_engine must be a non-empty string.")
        self._source_engine = source_engine

    @property
    def source_engine(self) -> str:
        return self._source_engine

    def create(
        self,
        event_type: str,
        payload: dict,
        project_id: int,
        actor_id: str,
    ) -> dict:
        return {
            "event_id": uuid.uuid4(),
            "event_type": event_type,
            "project_id": project_id,
            "source_engine": self._source_engine,
            "actor_id": actor_id,
            "payload": dict(payload),
        }

    def __call__(self, *, event_type: str, payload: dict, project_id: int, actor_id: str) -> dict:
        return self.create(event_type, payload, project_id, actor_id)
