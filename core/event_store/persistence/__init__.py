"""
BTP Event Store Persistence public API.
"""

from core.event_store.persistence.errors import JournalWriteError
from core.event_store.persistence.repository import load_events_for_project
from core.event_store.persistence.service import journal_writer, persist_event

__all__ = [
    "persist_event",
    "journal_writer",
    "load_events_for_project",
    "JournalWriteError",
]
