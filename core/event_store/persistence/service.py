"""
BTP Event Store - Persistence Service
=======================================
The single controlled write path for policy events.

Write flow:
    1. Validate event envelope against the engine contract
    2. Check idempotency
    3. Atomic: resolve chain head, compute hash, save
    4. Return accepted or rejection

If any step fails → deterministic rejection. No partial state.
No retries.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from django.db import IntegrityError, transaction

from core.engines.contracts import EngineContract
from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash
from core.event_store.idempotency.guard import (
    check_idempotency,
    handle_integrity_error,
)
from core.event_store.persistence.errors import (
    JournalWriteError,
    PersistenceRejectionCode,
    PersistenceViolatedRule,
)
from core.event_store.persistence.repository import (
    get_latest_event_for_project,
    save_event,
)
from core.event_store.validators.errors import Rejection, ValidationResult
from core.event_store.validators.event_validator import validate_event

logger = logging.getLogger("btp.events")

_CHAIN_CONSTRAINTS = ("uq_evt_project_prev_hash", "uq_evt_project_sequence")


def _is_chain_conflict(exc: IntegrityError) -> bool:
    text = str(exc)
    return any(name in text for name in _CHAIN_CONSTRAINTS)


def _aborted(message: str, code: str = PersistenceRejectionCode.TRANSACTION_ABORTED) -> ValidationResult:
    return ValidationResult(
        accepted=False,
        rejection=Rejection(
            code=code,
            message=message,
            violated_rule=PersistenceViolatedRule.ATOMIC_PERSISTENCE,
        ),
    )


def persist_event(
    event_data: dict[str, Any],
    contract: EngineContract,
) -> ValidationResult:
    """
    The one entry point for writing a policy event.

    On acceptance, `event_data` gains sequence, previous_event_hash
    and event_hash.
    """
    validation = validate_event(event_data, contract)
    if not validation.accepted:
        return validation

    idempotency = check_idempotency(event_data["event_id"])
    if not idempotency.accepted:
        return idempotency

    try:
        with transaction.atomic():
            latest = get_latest_event_for_project(
                event_data["project_id"], lock=True,
            )
            previous_hash = GENESIS_HASH if latest is None else latest.event_hash
            sequence = 1 if latest is None else latest.sequence + 1

            record = {
                "event_id": event_data["event_id"],
                "event_type": event_data["event_type"],
                "project_id": event_data["project_id"],
                "source_engine": event_data["source_engine"],
                "actor_id": event_data["actor_id"],
                "sequence": sequence,
                "payload": event_data["payload"],
                "previous_event_hash": previous_hash,
                "event_hash": compute_event_hash(
                    event_data["payload"], previous_hash,
                ),
            }
            save_event(record)

    except IntegrityError as exc:
        if _is_chain_conflict(exc):
            return _aborted(
                "Concurrent append conflict: chain head moved for project "
                f"{event_data['project_id']}.",
                code=PersistenceRejectionCode.CONCURRENT_APPEND,
            )
        return handle_integrity_error(event_data["event_id"])

    except Exception as exc:
        return _aborted(f"Transaction aborted: {exc}")

    event_data.update(
        sequence=record["sequence"],
        previous_event_hash=record["previous_event_hash"],
        event_hash=record["event_hash"],
    )
    logger.debug(
        f"Event persisted: {record['event_type']} "
        f"project={record['project_id']} seq={record['sequence']}"
    )
    return ValidationResult(accepted=True)


def journal_writer(contract: EngineContract) -> Callable[[dict], None]:
    """
    Adapt persist_event to the `persist_event(event_data)` callable
    engine services take. Rejections raise JournalWriteError.
    """

    def _write(event_data: dict) -> None:
        result = persist_event(event_data, contract)
        if not result.accepted:
            logger.error(
                f"Journal rejected {event_data.get('event_type')}: "
                f"[{result.rejection.code}] {result.rejection.message}"
            )
            raise JournalWriteError(event_data.get("event_type"), result.rejection)

    return _write
