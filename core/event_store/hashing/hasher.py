"""
BTP Event Store - Hash Computation
====================================
    event_hash = SHA256(canonical_json(payload) + previous_event_hash)

The first event of a project chains from GENESIS_HASH.
"""

import hashlib
import json
from typing import Any


GENESIS_HASH = "GENESIS"


def canonical_serialize(payload: Any) -> str:
    """Deterministic JSON: sorted keys, fixed separators, ASCII only."""
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def compute_event_hash(payload: Any, previous_event_hash: str) -> str:
    """64-character lowercase hex SHA-256 digest."""
    hash_input = canonical_serialize(payload) + previous_event_hash
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()
