"""
BTP Event Store - Event Envelope Validator
============================================
Structural checks before an event touches the database.
Does not interpret payload meaning.
"""

from typing import Any

from core.engines.contracts import EngineContract
from core.event_store.validators.errors import (
    Rejection,
    RejectionCode,
    ValidationResult,
    ViolatedRule,
)

REQUIRED_FIELDS = (
    "event_id",
    "event_type",
    "project_id",
    "source_engine",
    "actor_id",
    "payload",
)


def validate_event(
    event_data: dict[str, Any],
    contract: EngineContract,
) -> ValidationResult:
    for name in REQUIRED_FIELDS:
        if event_data.get(name) is None:
            return ValidationResult(
                accepted=False,
                rejection=Rejection(
                    code=RejectionCode.MISSING_FIELD,
                    message=f"Required field '{name}' is missing.",
                    violated_rule=ViolatedRule.SCHEMA_PRESENCE,
                ),
            )

    project_id = event_data["project_id"]
    if not isinstance(project_id, int) or isinstance(project_id, bool) or project_id <= 0:
        return ValidationResult(
            accepted=False,
            rejection=Rejection(
                code=RejectionCode.INVALID_PROJECT_ID,
                message=f"project_id must be a positive int, got {project_id!r}.",
                violated_rule=ViolatedRule.PROJECT_SCOPE,
            ),
        )

    if event_data["source_engine"] != contract.engine_name:
        return ValidationResult(
            accepted=False,
            rejection=Rejection(
                code=RejectionCode.SOURCE_ENGINE_MISMATCH,
                message=(
                    f"source_engine '{event_data['source_engine']}' does not "
                    f"match contract '{contract.engine_name}'."
                ),
                violated_rule=ViolatedRule.ENGINE_CONTRACT,
            ),
        )

    if not contract.owns(event_data["event_type"]):
        return ValidationResult(
            accepted=False,
            rejection=Rejection(
                code=RejectionCode.EVENT_TYPE_NOT_OWNED,
                message=(
                    f"Engine '{contract.engine_name}' does not own "
                    f"'{event_data['event_type']}'."
                ),
                violated_rule=ViolatedRule.ENGINE_CONTRACT,
            ),
        )

    return ValidationResult(accepted=True)
