"""
BTP Engine Contracts - Declaration
====================================
Each engine declares its identity and the event types it owns.
Contracts are frozen; once created they cannot be altered.

Rules:
- engine_name is a simple identifier (no dots)
- Event types follow engine.domain.action[.vN] format
- First segment of every owned event type is the engine_name
"""

from dataclasses import dataclass


def _validate_event_type_format(event_type: str) -> None:
    if not event_type or not isinstance(event_type, str):
        raise ValueError(
            f"Event type must be a non-empty string, got: {event_type!r}"
        )

    parts = event_type.strip().split(".")
    if len(parts) < 3:
        raise ValueError(
            f"Event type '{event_type}' does not follow "
            f"engine.domain.action format (minimum 3 segments)."
        )

    if any(not part.strip() for part in parts):
        raise ValueError(
            f"Event type '{event_type}' contains empty segment."
        )


@dataclass(frozen=True)
class EngineContract:
    """
    Immutable declaration of an engine's event boundary.

    Example:
        EngineContract(
            engine_name="treasury_policy",
            owned_event_types=frozenset({
                "treasury_policy.payment.authorized.v1",
            }),
        )
    """

    engine_name: str
    owned_event_types: frozenset

    def __post_init__(self):
        if not self.engine_name or not isinstance(self.engine_name, str):
            raise ValueError("engine_name must be a non-empty string.")

        if "." in self.engine_name:
            raise ValueError(
                f"engine_name '{self.engine_name}' must be a simple "
                f"identifier without dots."
            )

        if not isinstance(self.owned_event_types, frozenset):
            raise TypeError("owned_event_types must be a frozenset.")

        for event_type in self.owned_event_types:
            _validate_event_type_format(event_type)
            namespace = event_type.split(".")[0]
            if namespace != self.engine_name:
                raise ValueError(
                    f"Event type '{event_type}' namespace '{namespace}' "
                    f"does not match engine '{self.engine_name}'."
                )

    def owns(self, event_type: str) -> bool:
        return event_type in self.owned_event_types
