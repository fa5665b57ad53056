"""
BTP Core Config - Bonus Schedule Rules
========================================
Doctrine: No hardcoded thresholds in engine logic.
Bonus tiers and the weight ledger mode come from configuration,
fixed when a policy instance is constructed.

Percent semantics:
    bonus_percent is a whole-number percentage multiplier.
    100 is the IDENTITY (no bonus), 150 is a 50% bonus.
    Values below 100 are rejected; a bonus never shrinks issuance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


IDENTITY_PERCENT = 100

# ── Weight ledger modes ───────────────────────────────────────

WEIGHT_LEDGER_SINGLE_SLOT = "SINGLE_SLOT"   # last payment overwrites
WEIGHT_LEDGER_ACCUMULATE = "ACCUMULATE"     # payments are summed

VALID_WEIGHT_LEDGER_MODES = frozenset({
    WEIGHT_LEDGER_SINGLE_SLOT, WEIGHT_LEDGER_ACCUMULATE,
})


# ══════════════════════════════════════════════════════════════
# BONUS TIER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BonusTier:
    """
    One bonus tier.

    Either a single `threshold` (weight at or above it matches) or a
    closed range `[min_contribution, max_contribution]`. Never both.
    """

    bonus_percent: int
    threshold: Optional[int] = None
    min_contribution: Optional[int] = None
    max_contribution: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.bonus_percent, int) or isinstance(self.bonus_percent, bool):
            raise ValueError("bonus_percent must be an int.")
        if self.bonus_percent < IDENTITY_PERCENT:
            raise ValueError(
                f"bonus_percent must be >= {IDENTITY_PERCENT} "
                f"(100 is the identity), got {self.bonus_percent}."
            )

        has_range = (
            self.min_contribution is not None
            or self.max_contribution is not None
        )
        if self.threshold is not None and has_range:
            raise ValueError(
                "Tier must define either threshold or a contribution range, not both."
            )

        if self.threshold is not None:
            if self.threshold < 0:
                raise ValueError(f"threshold must be >= 0, got {self.threshold}.")
        elif has_range:
            if self.min_contribution is None or self.max_contribution is None:
                raise ValueError(
                    "Range tier needs both min_contribution and max_contribution."
                )
            if self.min_contribution < 0:
                raise ValueError("min_contribution must be >= 0.")
            if self.min_contribution > self.max_contribution:
                raise ValueError(
                    f"min_contribution {self.min_contribution} exceeds "
                    f"max_contribution {self.max_contribution}."
                )
        else:
            raise ValueError(
                "Tier must define a threshold or a contribution range."
            )

    @property
    def is_range(self) -> bool:
        return self.threshold is None

    def matches(self, weight: int) -> bool:
        """True if the weight qualifies for this tier."""
        if self.is_range:
            return self.min_contribution <= weight <= self.max_contribution
        return weight >= self.threshold

    def to_dict(self) -> dict:
        if self.is_range:
            return {
                "bonus_percent": self.bonus_percent,
                "min_contribution": self.min_contribution,
                "max_contribution": self.max_contribution,
            }
        return {
            "bonus_percent": self.bonus_percent,
            "threshold": self.threshold,
        }


# ══════════════════════════════════════════════════════════════
# BONUS SCHEDULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BonusSchedule:
    """
    Ordered set of bonus tiers with a total, deterministic mapping.

    Evaluation order:
        Threshold tiers: highest threshold first, independent of the
        order they were configured in.
        Range tiers: configured order. Overlaps are rejected here.

    A schedule holds one tier kind only.
    """

    tiers: Tuple[BonusTier, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.tiers, tuple):
            raise TypeError("tiers must be a tuple of BonusTier.")
        for tier in self.tiers:
            if not isinstance(tier, BonusTier):
                raise TypeError(
                    f"Expected BonusTier, got {type(tier).__name__}."
                )

        kinds = {tier.is_range for tier in self.tiers}
        if len(kinds) > 1:
            raise ValueError(
                "Cannot mix threshold tiers and range tiers in one schedule."
            )

        if self.uses_ranges:
            self._check_no_overlap()
        else:
            thresholds = [t.threshold for t in self.tiers]
            if len(thresholds) != len(set(thresholds)):
                raise ValueError("Duplicate tier thresholds are ambiguous.")

    def _check_no_overlap(self) -> None:
        ordered = sorted(self.tiers, key=lambda t: t.min_contribution)
        for lower, upper in zip(ordered, ordered[1:]):
            if upper.min_contribution <= lower.max_contribution:
                raise ValueError(
                    f"Overlapping contribution ranges: "
                    f"[{lower.min_contribution}, {lower.max_contribution}] and "
                    f"[{upper.min_contribution}, {upper.max_contribution}]."
                )

    @property
    def uses_ranges(self) -> bool:
        return bool(self.tiers) and self.tiers[0].is_range

    @property
    def evaluation_order(self) -> Tuple[BonusTier, ...]:
        if self.uses_ranges:
            return self.tiers
        return tuple(sorted(self.tiers, key=lambda t: t.threshold, reverse=True))

    @property
    def highest_bonus_percent(self) -> int:
        """Most generous percent configured; identity when no tiers."""
        if not self.tiers:
            return IDENTITY_PERCENT
        return max(t.bonus_percent for t in self.tiers)

    def bonus_percent_for(self, weight: int) -> int:
        for tier in self.evaluation_order:
            if tier.matches(weight):
                return tier.bonus_percent
        return IDENTITY_PERCENT

    def adjusted_weight(self, base_weight: int) -> int:
        """base_weight * bonus_percent // 100, truncating."""
        if base_weight < 0:
            raise ValueError(f"base_weight must be >= 0, got {base_weight}.")
        if base_weight == 0:
            return 0
        return base_weight * self.bonus_percent_for(base_weight) // IDENTITY_PERCENT

    def to_list(self) -> list:
        return [tier.to_dict() for tier in self.tiers]

    # ── Builders ──────────────────────────────────────────────

    @classmethod
    def from_mappings(cls, items: Iterable[Mapping[str, Any]]) -> "BonusSchedule":
        return cls(tiers=tuple(
            BonusTier(
                bonus_percent=item["bonus_percent"],
                threshold=item.get("threshold"),
                min_contribution=item.get("min_contribution"),
                max_contribution=item.get("max_contribution"),
            )
            for item in items
        ))

    @classmethod
    def from_three_tier(
        cls,
        payout_bonus_1: int,
        payout_bonus_2: int,
        payout_bonus_3: int,
        bonus_threshold_1: int,
        bonus_threshold_2: int,
        bonus_threshold_3: int,
    ) -> "BonusSchedule":
        """Convert the fixed three-pair configuration into threshold tiers."""
        return cls(tiers=(
            BonusTier(bonus_percent=payout_bonus_1, threshold=bonus_threshold_1),
            BonusTier(bonus_percent=payout_bonus_2, threshold=bonus_threshold_2),
            BonusTier(bonus_percent=payout_bonus_3, threshold=bonus_threshold_3),
        ))


# ══════════════════════════════════════════════════════════════
# POLICY CONFIG
# ══════════════════════════════════════════════════════════════

_THREE_TIER_KEYS = (
    "payout_bonus_1", "payout_bonus_2", "payout_bonus_3",
    "bonus_threshold_1", "bonus_threshold_2", "bonus_threshold_3",
)


@dataclass(frozen=True)
class PolicyConfig:
    """Construction-time configuration of one policy instance. Immutable."""

    bonus_schedule: BonusSchedule = field(default_factory=BonusSchedule)
    weight_ledger_mode: str = WEIGHT_LEDGER_SINGLE_SLOT
    policy_version: str = "1.0.0"

    def __post_init__(self) -> None:
        if not isinstance(self.bonus_schedule, BonusSchedule):
            raise TypeError("bonus_schedule must be a BonusSchedule.")
        if self.weight_ledger_mode not in VALID_WEIGHT_LEDGER_MODES:
            raise ValueError(
                f"Invalid weight_ledger_mode: {self.weight_ledger_mode}"
            )
        if not self.policy_version or not isinstance(self.policy_version, str):
            raise ValueError("policy_version must be a non-empty string.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PolicyConfig":
        """
        Build from a settings mapping.

        Accepts `bonus_tiers` (list of tier mappings) OR the six
        three-tier keys, never both.
        """
        has_tiers = "bonus_tiers" in data
        present = [k for k in _THREE_TIER_KEYS if k in data]
        if has_tiers and present:
            raise ValueError(
                "Configure bonus_tiers or the three-tier keys, not both."
            )

        if has_tiers:
            schedule = BonusSchedule.from_mappings(data["bonus_tiers"])
        elif present:
            missing = [k for k in _THREE_TIER_KEYS if k not in data]
            if missing:
                raise ValueError(f"Missing three-tier keys: {missing}")
            schedule = BonusSchedule.from_three_tier(
                **{k: data[k] for k in _THREE_TIER_KEYS}
            )
        else:
            schedule = BonusSchedule()

        kwargs: Dict[str, Any] = {"bonus_schedule": schedule}
        if "weight_ledger_mode" in data:
            kwargs["weight_ledger_mode"] = data["weight_ledger_mode"]
        if "policy_version" in data:
            kwargs["policy_version"] = data["policy_version"]
        return cls(**kwargs)
