"""
BTP Event Store - Hash-Chain Verifier
=======================================
Verifies a loaded project journal before it is replayed.

Checks, per event in sequence order:
1. sequence is contiguous starting at 1
2. previous_event_hash equals the prior event's event_hash
3. event_hash is correctly computed

Mismatch = rejection. Nothing is auto-corrected.
"""

from typing import Iterable, Mapping

from core.event_store.hashing.errors import (
    HashRejectionCode,
    HashViolatedRule,
)
from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash
from core.event_store.validators.errors import Rejection, ValidationResult


def _reject(code: str, message: str) -> ValidationResult:
    return ValidationResult(
        accepted=False,
        rejection=Rejection(
            code=code,
            message=message,
            violated_rule=HashViolatedRule.EVENT_HASH_CHAIN,
        ),
    )


def verify_hash_chain(events: Iterable[Mapping]) -> ValidationResult:
    expected_previous = GENESIS_HASH
    expected_sequence = 1

    for event in events:
        if event["sequence"] != expected_sequence:
            return _reject(
                HashRejectionCode.SEQUENCE_GAP,
                f"Expected sequence {expected_sequence}, "
                f"found {event['sequence']}.",
            )

        if event["previous_event_hash"] != expected_previous:
            return _reject(
                HashRejectionCode.HASH_CHAIN_BROKEN,
                f"Event #{event['sequence']} links to "
                f"'{event['previous_event_hash']}', "
                f"expected '{expected_previous}'.",
            )

        computed = compute_event_hash(event["payload"], expected_previous)
        if event["event_hash"] != computed:
            return _reject(
                HashRejectionCode.HASH_COMPUTATION_MISMATCH,
                f"Event #{event['sequence']} hash '{event['event_hash']}' "
                f"does not match computed '{computed}'.",
            )

        expected_previous = event["event_hash"]
        expected_sequence += 1

    return ValidationResult(accepted=True)
