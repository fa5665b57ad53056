"""
BTP Treasury Policy Engine - Application Service
==================================================
Allow-list gate, tiered bonus weighting and the redemption safety
guard for one project.

Every mutation is journaled first: the event is built, handed to
persist_event, and only then applied to the projection. A failure
at any step leaves the projection untouched.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Protocol

from core.config.rules import (
    WEIGHT_LEDGER_ACCUMULATE,
    WEIGHT_LEDGER_SINGLE_SLOT,
    PolicyConfig,
)
from core.directory.registry import TerminalDirectory
from core.policy.engine import PolicyEngine
from core.policy.exceptions import PolicyVersionNotFound
from core.policy.rules import build_authorization_registry
from engines.treasury_policy.commands import (
    InitializePolicyRequest,
    PaymentCompletedNotice,
    QuotePaymentRequest,
    QuoteRedemptionRequest,
    RedemptionCompletedNotice,
)
from engines.treasury_policy.errors import (
    AlreadyInitialized,
    InvalidPaymentEvent,
    InvalidRedemptionEvent,
    NotInitialized,
    OverRedemption,
    PayerNotAllowed,
    ReentrantCallError,
)
from engines.treasury_policy.events import (
    PAYLOAD_BUILDERS,
    PAYMENT_AUTHORIZED_V1,
    POLICY_INITIALIZED_V1,
    REDEMPTION_AUTHORIZED_V1,
    WEIGHT_RECORDED_V1,
    resolve_treasury_policy_event_type,
)
from engines.treasury_policy.policies import (
    payer_allowed_policy,
    policy_must_be_active_policy,
    policy_must_be_uninitialized_policy,
    redemption_within_bound_policy,
)

logger = logging.getLogger("btp.treasury_policy")


# ══════════════════════════════════════════════════════════════
# CAPABILITIES
# ══════════════════════════════════════════════════════════════

DATA_SOURCE = "DATA_SOURCE"
PAY_DELEGATE = "PAY_DELEGATE"
REDEMPTION_DELEGATE = "REDEMPTION_DELEGATE"

SUPPORTED_CAPABILITIES = frozenset({
    DATA_SOURCE,
    PAY_DELEGATE,
    REDEMPTION_DELEGATE,
})


# ══════════════════════════════════════════════════════════════
# PROTOCOLS
# ══════════════════════════════════════════════════════════════

class EventFactoryProtocol(Protocol):
    def __call__(
        self, *, event_type: str, payload: dict, project_id: int, actor_id: str,
    ) -> dict:
        ...


class PersistEventProtocol(Protocol):
    def __call__(self, event_data: dict) -> Any:
        ...


# ══════════════════════════════════════════════════════════════
# LIFECYCLE & STATE
# ══════════════════════════════════════════════════════════════

class PolicyLifecycle(Enum):
    """Two-state lifecycle. Initialization is one-shot."""
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class PolicyState:
    """Read-only snapshot of the projection."""
    lifecycle: PolicyLifecycle
    project_id: Optional[int]
    allow_list: FrozenSet[str]
    last_issued_weight: int
    weight_ledger_mode: str
    payment_count: int
    authorized_payments: int
    authorized_redemptions: int
    policy_version: Optional[str]


# ══════════════════════════════════════════════════════════════
# PROJECTION STORE
# ══════════════════════════════════════════════════════════════

class PolicyProjectionStore:
    """In-memory projection of the policy journal."""

    def __init__(self, weight_ledger_mode: str = WEIGHT_LEDGER_SINGLE_SLOT):
        self._events: List[dict] = []
        self._lifecycle = PolicyLifecycle.UNINITIALIZED
        self._project_id: Optional[int] = None
        self._allow_list: FrozenSet[str] = frozenset()
        self._weight_ledger_mode = weight_ledger_mode
        self._policy_version: Optional[str] = None
        self._last_issued_weight = 0
        self._payment_count = 0
        self._authorized_payments = 0
        self._authorized_redemptions = 0

    def apply(self, event_type: str, payload: dict) -> None:
        self._events.append({"event_type": event_type, "payload": payload})

        if event_type == POLICY_INITIALIZED_V1:
            self._lifecycle = PolicyLifecycle.ACTIVE
            self._project_id = payload["project_id"]
            self._allow_list = frozenset(payload["allow_list"])
            self._weight_ledger_mode = payload["weight_ledger_mode"]
            self._policy_version = payload["policy_version"]

        elif event_type == WEIGHT_RECORDED_V1:
            adjusted = payload["adjusted_weight"]
            if self._weight_ledger_mode == WEIGHT_LEDGER_ACCUMULATE:
                self._last_issued_weight += adjusted
            else:
                if self._payment_count >= 1:
                    logger.warning(
                        f"Single-slot weight ledger overwritten: "
                        f"{self._last_issued_weight} -> {adjusted} "
                        f"(project={self._project_id})"
                    )
                self._last_issued_weight = adjusted
            self._payment_count += 1

        elif event_type == PAYMENT_AUTHORIZED_V1:
            self._authorized_payments += 1

        elif event_type == REDEMPTION_AUTHORIZED_V1:
            self._authorized_redemptions += 1

    def is_allowed(self, payer: str) -> bool:
        return payer in self._allow_list

    def redemption_bound(self, highest_bonus_percent: int) -> int:
        """Largest reclaim amount with reclaim // highest <= last weight."""
        return (self._last_issued_weight + 1) * highest_bonus_percent - 1

    @property
    def lifecycle(self) -> PolicyLifecycle:
        return self._lifecycle

    @property
    def project_id(self) -> Optional[int]:
        return self._project_id

    @property
    def last_issued_weight(self) -> int:
        return self._last_issued_weight

    @property
    def weight_ledger_mode(self) -> str:
        return self._weight_ledger_mode

    @property
    def payment_count(self) -> int:
        return self._payment_count

    @property
    def single_slot_warning(self) -> bool:
        """True once a single-slot ledger has dropped an earlier weight."""
        return (
            self._weight_ledger_mode == WEIGHT_LEDGER_SINGLE_SLOT
            and self._payment_count > 1
        )

    @property
    def event_count(self) -> int:
        return len(self._events)

    def snapshot(self) -> PolicyState:
        return PolicyState(
            lifecycle=self._lifecycle,
            project_id=self._project_id,
            allow_list=self._allow_list,
            last_issued_weight=self._last_issued_weight,
            weight_ledger_mode=self._weight_ledger_mode,
            payment_count=self._payment_count,
            authorized_payments=self._authorized_payments,
            authorized_redemptions=self._authorized_redemptions,
            policy_version=self._policy_version,
        )


# ══════════════════════════════════════════════════════════════
# TERMS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PaymentTerms:
    weight: int
    memo: str
    delegate: Any


@dataclass(frozen=True)
class RedemptionTerms:
    reclaim_amount: int
    memo: str
    delegate: Any


@dataclass(frozen=True)
class _HookContext:
    """What the authorization rules read."""
    project_id: int
    directory: TerminalDirectory


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class TreasuryPolicyService:
    """Treasury Policy Engine application service."""

    def __init__(
        self,
        *,
        config: PolicyConfig,
        event_factory: EventFactoryProtocol,
        persist_event: PersistEventProtocol,
        policy_engine: PolicyEngine | None = None,
        projection_store: PolicyProjectionStore | None = None,
    ):
        self._config = config
        self._event_factory = event_factory
        self._persist_event = persist_event
        self._policy_engine = policy_engine or PolicyEngine(
            build_authorization_registry(config.policy_version)
        )
        if not self._policy_engine.registry.has_version(config.policy_version):
            raise PolicyVersionNotFound(config.policy_version)
        self._projection_store = projection_store or PolicyProjectionStore(
            weight_ledger_mode=config.weight_ledger_mode,
        )
        self._directory: Optional[TerminalDirectory] = None
        self._in_progress: Optional[str] = None

    # ── guards ────────────────────────────────────────────────

    @contextmanager
    def _non_reentrant(self, operation: str):
        if self._in_progress is not None:
            logger.warning(
                f"Rejected reentrant {operation} during {self._in_progress}"
            )
            raise ReentrantCallError(operation, self._in_progress)
        self._in_progress = operation
        try:
            yield
        finally:
            self._in_progress = None

    def _lifecycle_value(self) -> str:
        return self._projection_store.lifecycle.value

    def _require_active(self, operation: str) -> None:
        rejection = policy_must_be_active_policy(
            None, lifecycle_lookup=self._lifecycle_value,
        )
        if rejection is not None:
            logger.info(f"Rejected {operation}: [{rejection.code}]")
            raise NotInitialized(operation)

    # ── journal ───────────────────────────────────────────────

    def _record(self, request, *, project_id: int, actor_id: str, **derived) -> dict:
        event_type = resolve_treasury_policy_event_type(request.command_type)
        if event_type is None:
            raise ValueError(
                f"Unsupported treasury policy command: {request.command_type}"
            )
        payload = PAYLOAD_BUILDERS[event_type](request, **derived)
        event_data = self._event_factory(
            event_type=event_type,
            payload=payload,
            project_id=project_id,
            actor_id=actor_id,
        )
        self._persist_event(event_data)
        self._projection_store.apply(event_type=event_type, payload=payload)
        return event_data

    # ── lifecycle ─────────────────────────────────────────────

    def initialize(
        self,
        project_id: int,
        directory: TerminalDirectory,
        allow_list: Iterable[str] = (),
        actor_id: str = "deployer",
    ) -> PolicyState:
        """Bind this instance to a project and seed the allow-list. One-shot."""
        with self._non_reentrant("initialize"):
            rejection = policy_must_be_uninitialized_policy(
                None, lifecycle_lookup=self._lifecycle_value,
            )
            if rejection is not None:
                logger.info(
                    f"Rejected initialize: already bound to "
                    f"project {self._projection_store.project_id}"
                )
                raise AlreadyInitialized(self._projection_store.project_id)

            request = InitializePolicyRequest(
                project_id=project_id,
                allow_list=tuple(allow_list),
                actor_id=actor_id,
                bonus_tiers=tuple(self._config.bonus_schedule.to_list()),
                weight_ledger_mode=self._config.weight_ledger_mode,
                policy_version=self._config.policy_version,
            )
            self._record(request, project_id=project_id, actor_id=actor_id)
            self._directory = directory

        logger.info(
            f"Treasury policy initialized: project={project_id} "
            f"payers={len(request.allow_list)} "
            f"mode={self._config.weight_ledger_mode}"
        )
        return self.state

    # ── reads ─────────────────────────────────────────────────

    def is_allowed(self, payer: str) -> bool:
        return self._projection_store.is_allowed(payer)

    def bonus_percent_for(self, base_weight: int) -> int:
        return self._config.bonus_schedule.bonus_percent_for(base_weight)

    def compute_adjusted_weight(self, base_weight: int) -> int:
        """Pure: base weight scaled by the matching tier's percent."""
        return self._config.bonus_schedule.adjusted_weight(base_weight)

    def redemption_bound(self) -> int:
        return self._projection_store.redemption_bound(
            self._config.bonus_schedule.highest_bonus_percent
        )

    @property
    def last_issued_weight(self) -> int:
        return self._projection_store.last_issued_weight

    @property
    def lifecycle(self) -> PolicyLifecycle:
        return self._projection_store.lifecycle

    @property
    def state(self) -> PolicyState:
        return self._projection_store.snapshot()

    @property
    def projection_store(self) -> PolicyProjectionStore:
        return self._projection_store

    def supports(self, capability: str) -> bool:
        return capability in SUPPORTED_CAPABILITIES

    # ── quotes ────────────────────────────────────────────────

    def quote_payment_terms(
        self, base_weight: int, memo: str = "", actor_id: str = "host",
    ) -> PaymentTerms:
        """Adjust the base weight and record it for the redemption guard."""
        with self._non_reentrant("quote_payment_terms"):
            self._require_active("quote_payment_terms")
            request = QuotePaymentRequest(base_weight=base_weight, memo=memo)
            percent = self.bonus_percent_for(base_weight)
            adjusted = self.compute_adjusted_weight(base_weight)
            self._record(
                request,
                project_id=self._projection_store.project_id,
                actor_id=actor_id,
                bonus_percent=percent,
                adjusted_weight=adjusted,
            )

        logger.info(
            f"Payment quoted: base={base_weight} percent={percent} "
            f"adjusted={adjusted}"
        )
        return PaymentTerms(weight=adjusted, memo=memo, delegate=self)

    def check_redemption(self, reclaim_amount: int) -> None:
        """Raise OverRedemption if the amount exceeds the bound. No mutation."""
        request = QuoteRedemptionRequest(reclaim_amount=reclaim_amount)
        bound = self.redemption_bound()
        rejection = redemption_within_bound_policy(
            request, bound_lookup=lambda: bound,
        )
        if rejection is not None:
            logger.info(f"Redemption rejected: [{rejection.code}] {rejection.message}")
            raise OverRedemption(rejection, bound=bound, requested=reclaim_amount)

    def quote_redemption_terms(
        self, reclaim_amount: int, memo: str = "",
    ) -> RedemptionTerms:
        self._require_active("quote_redemption_terms")
        request = QuoteRedemptionRequest(reclaim_amount=reclaim_amount, memo=memo)
        self.check_redemption(request.reclaim_amount)
        return RedemptionTerms(
            reclaim_amount=reclaim_amount, memo=memo, delegate=self,
        )

    # ── hooks ─────────────────────────────────────────────────

    def _authorize(self, notice, error_cls) -> None:
        context = _HookContext(
            project_id=self._projection_store.project_id,
            directory=self._directory,
        )
        decision = self._policy_engine.evaluate(
            command=notice,
            context=context,
            policy_version=self._config.policy_version,
        )
        if not decision.allowed:
            logger.info(
                f"{notice.command_type} rejected: "
                f"rules={list(decision.violated_rule_ids)}"
            )
            raise error_cls(
                caller=notice.caller,
                project_id=notice.project_id,
                attached_value=notice.attached_value,
                violated_rules=decision.violated_rule_ids,
                explanation=decision.to_payload(),
            )

    def on_payment_completed(self, notice: PaymentCompletedNotice) -> None:
        """Authorize a completed payment: structural checks, then allow-list."""
        with self._non_reentrant("on_payment_completed"):
            self._require_active("on_payment_completed")
            self._authorize(notice, InvalidPaymentEvent)

            rejection = payer_allowed_policy(
                notice, allow_lookup=self._projection_store.is_allowed,
            )
            if rejection is not None:
                logger.info(f"Payment rejected: [{rejection.code}] {rejection.message}")
                raise PayerNotAllowed(rejection, payer=notice.payer)

            self._record(
                notice,
                project_id=self._projection_store.project_id,
                actor_id=notice.caller,
            )
        logger.info(f"Payment authorized: payer={notice.payer} caller={notice.caller}")

    def on_redemption_completed(self, notice: RedemptionCompletedNotice) -> None:
        """Authorize a completed redemption. No allow-list applies."""
        with self._non_reentrant("on_redemption_completed"):
            self._require_active("on_redemption_completed")
            self._authorize(notice, InvalidRedemptionEvent)
            self._record(
                notice,
                project_id=self._projection_store.project_id,
                actor_id=notice.caller,
            )
        logger.info(f"Redemption authorized: caller={notice.caller}")

    # ── replay ────────────────────────────────────────────────

    def replay(
        self, events: Iterable[dict], directory: TerminalDirectory,
    ) -> PolicyState:
        """
        Rebuild the projection from journal events (replay order).

        Only allowed on a fresh instance. Nothing is re-persisted.
        """
        with self._non_reentrant("replay"):
            if self._projection_store.lifecycle is not PolicyLifecycle.UNINITIALIZED:
                raise AlreadyInitialized(self._projection_store.project_id)

            store = PolicyProjectionStore(
                weight_ledger_mode=self._config.weight_ledger_mode,
            )
            for event in events:
                store.apply(event_type=event["event_type"], payload=event["payload"])

            snapshot = store.snapshot()
            if snapshot.policy_version not in (None, self._config.policy_version):
                logger.warning(
                    f"Replayed journal was written under policy "
                    f"{snapshot.policy_version}, running {self._config.policy_version}"
                )
            self._projection_store = store
            self._directory = directory

        logger.info(
            f"Treasury policy replayed: project={snapshot.project_id} "
            f"events={store.event_count}"
        )
        return snapshot
