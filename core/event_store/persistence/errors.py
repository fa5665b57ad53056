"""
BTP Event Store - Persistence Errors
======================================
"""


class PersistenceRejectionCode:
    TRANSACTION_ABORTED = "TRANSACTION_ABORTED"
    CONCURRENT_APPEND = "CONCURRENT_APPEND"


class PersistenceViolatedRule:
    ATOMIC_PERSISTENCE = "ATOMIC_PERSISTENCE"


class JournalWriteError(Exception):
    """Raised by a journal writer when the event store rejects an event."""

    def __init__(self, event_type: str, rejection):
        self.event_type = event_type
        self.rejection = rejection
        super().__init__(
            f"Event '{event_type}' rejected by event store: "
            f"[{rejection.code}] {rejection.message}"
        )
