"""
BTP Core Config - Tests
=========================
Bonus tiers, schedule evaluation order, PolicyConfig construction
and the Django settings loader.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from core.config import (
    IDENTITY_PERCENT,
    WEIGHT_LEDGER_ACCUMULATE,
    WEIGHT_LEDGER_SINGLE_SLOT,
    BonusSchedule,
    BonusTier,
    PolicyConfig,
    load_policy_config,
)


def two_tier_schedule() -> BonusSchedule:
    return BonusSchedule(tiers=(
        BonusTier(bonus_percent=150, threshold=1000),
        BonusTier(bonus_percent=120, threshold=500),
    ))


# ══════════════════════════════════════════════════════════════
# BONUS TIER
# ══════════════════════════════════════════════════════════════

class TestBonusTier:
    def test_threshold_tier_matches_at_and_above(self):
        tier = BonusTier(bonus_percent=120, threshold=500)
        assert not tier.matches(499)
        assert tier.matches(500)
        assert tier.matches(10_000)

    def test_range_tier_is_closed_interval(self):
        tier = BonusTier(bonus_percent=110, min_contribution=10, max_contribution=20)
        assert tier.is_range
        assert tier.matches(10)
        assert tier.matches(20)
        assert not tier.matches(9)
        assert not tier.matches(21)

    def test_percent_below_identity_rejected(self):
        with pytest.raises(ValueError, match="identity"):
            BonusTier(bonus_percent=99, threshold=0)

    def test_threshold_and_range_together_rejected(self):
        with pytest.raises(ValueError):
            BonusTier(bonus_percent=120, threshold=5, min_contribution=1, max_contribution=9)

    def test_neither_threshold_nor_range_rejected(self):
        with pytest.raises(ValueError):
            BonusTier(bonus_percent=120)

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            BonusTier(bonus_percent=120, threshold=-1)

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError):
            BonusTier(bonus_percent=120, min_contribution=50, max_contribution=10)

    def test_half_open_range_rejected(self):
        with pytest.raises(ValueError):
            BonusTier(bonus_percent=120, min_contribution=50)

    def test_bool_percent_rejected(self):
        with pytest.raises(ValueError):
            BonusTier(bonus_percent=True, threshold=0)

    def test_to_dict(self):
        assert BonusTier(bonus_percent=150, threshold=1000).to_dict() == {
            "bonus_percent": 150, "threshold": 1000,
        }
        assert BonusTier(
            bonus_percent=110, min_contribution=1, max_contribution=2,
        ).to_dict() == {
            "bonus_percent": 110, "min_contribution": 1, "max_contribution": 2,
        }


# ══════════════════════════════════════════════════════════════
# BONUS SCHEDULE
# ══════════════════════════════════════════════════════════════

class TestBonusSchedule:
    def test_high_tier_applies(self):
        assert two_tier_schedule().adjusted_weight(1200) == 1800

    def test_middle_tier_applies(self):
        assert two_tier_schedule().adjusted_weight(600) == 720

    def test_below_all_thresholds_is_identity(self):
        schedule = two_tier_schedule()
        assert schedule.bonus_percent_for(100) == IDENTITY_PERCENT
        assert schedule.adjusted_weight(100) == 100

    def test_zero_weight_is_zero(self):
        assert two_tier_schedule().adjusted_weight(0) == 0

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            two_tier_schedule().adjusted_weight(-1)

    def test_highest_threshold_wins_regardless_of_configured_order(self):
        ascending = BonusSchedule(tiers=(
            BonusTier(bonus_percent=120, threshold=500),
            BonusTier(bonus_percent=150, threshold=1000),
        ))
        assert ascending.bonus_percent_for(1200) == 150
        assert ascending.bonus_percent_for(700) == 120

    def test_truncating_division(self):
        schedule = BonusSchedule(tiers=(BonusTier(bonus_percent=133, threshold=0),))
        # 7 * 133 = 931 -> 9
        assert schedule.adjusted_weight(7) == 9

    def test_empty_schedule_is_identity(self):
        schedule = BonusSchedule()
        assert schedule.adjusted_weight(4242) == 4242
        assert schedule.highest_bonus_percent == IDENTITY_PERCENT

    def test_highest_bonus_percent(self):
        assert two_tier_schedule().highest_bonus_percent == 150

    def test_deterministic_under_repeated_calls(self):
        schedule = two_tier_schedule()
        results = {schedule.adjusted_weight(1200) for _ in range(5)}
        assert results == {1800}

    def test_range_tiers_use_configured_order(self):
        schedule = BonusSchedule(tiers=(
            BonusTier(bonus_percent=130, min_contribution=100, max_contribution=199),
            BonusTier(bonus_percent=110, min_contribution=0, max_contribution=99),
        ))
        assert schedule.uses_ranges
        assert schedule.evaluation_order == schedule.tiers
        assert schedule.bonus_percent_for(150) == 130
        assert schedule.bonus_percent_for(50) == 110
        assert schedule.bonus_percent_for(500) == IDENTITY_PERCENT

    def test_overlapping_ranges_rejected(self):
        with pytest.raises(ValueError, match="Overlapping"):
            BonusSchedule(tiers=(
                BonusTier(bonus_percent=110, min_contribution=0, max_contribution=100),
                BonusTier(bonus_percent=120, min_contribution=100, max_contribution=200),
            ))

    def test_mixed_tier_kinds_rejected(self):
        with pytest.raises(ValueError, match="mix"):
            BonusSchedule(tiers=(
                BonusTier(bonus_percent=110, threshold=10),
                BonusTier(bonus_percent=120, min_contribution=0, max_contribution=5),
            ))

    def test_duplicate_thresholds_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            BonusSchedule(tiers=(
                BonusTier(bonus_percent=110, threshold=10),
                BonusTier(bonus_percent=120, threshold=10),
            ))

    def test_non_tuple_rejected(self):
        with pytest.raises(TypeError):
            BonusSchedule(tiers=[BonusTier(bonus_percent=110, threshold=10)])

    def test_from_mappings_round_trips_to_list(self):
        items = [
            {"bonus_percent": 150, "threshold": 1000},
            {"bonus_percent": 120, "threshold": 500},
        ]
        schedule = BonusSchedule.from_mappings(items)
        assert schedule == two_tier_schedule()
        assert schedule.to_list() == items

    def test_from_three_tier(self):
        schedule = BonusSchedule.from_three_tier(
            payout_bonus_1=110, payout_bonus_2=130, payout_bonus_3=200,
            bonus_threshold_1=100, bonus_threshold_2=500, bonus_threshold_3=1000,
        )
        assert len(schedule.tiers) == 3
        assert schedule.highest_bonus_percent == 200
        assert schedule.bonus_percent_for(1500) == 200
        assert schedule.bonus_percent_for(600) == 130
        assert schedule.bonus_percent_for(150) == 110
        assert schedule.bonus_percent_for(50) == IDENTITY_PERCENT


# ══════════════════════════════════════════════════════════════
# POLICY CONFIG
# ══════════════════════════════════════════════════════════════

class TestPolicyConfig:
    def test_defaults(self):
        config = PolicyConfig()
        assert config.bonus_schedule == BonusSchedule()
        assert config.weight_ledger_mode == WEIGHT_LEDGER_SINGLE_SLOT
        assert config.policy_version == "1.0.0"

    def test_invalid_ledger_mode_rejected(self):
        with pytest.raises(ValueError):
            PolicyConfig(weight_ledger_mode="SOMETIMES")

    def test_schedule_type_enforced(self):
        with pytest.raises(TypeError):
            PolicyConfig(bonus_schedule=[])

    def test_from_mapping_with_tiers(self):
        config = PolicyConfig.from_mapping({
            "bonus_tiers": [
                {"bonus_percent": 150, "threshold": 1000},
                {"bonus_percent": 120, "threshold": 500},
            ],
            "weight_ledger_mode": WEIGHT_LEDGER_ACCUMULATE,
            "policy_version": "1.0.0",
        })
        assert config.bonus_schedule == two_tier_schedule()
        assert config.weight_ledger_mode == WEIGHT_LEDGER_ACCUMULATE

    def test_from_mapping_with_three_tier_keys(self):
        config = PolicyConfig.from_mapping({
            "payout_bonus_1": 110, "payout_bonus_2": 130, "payout_bonus_3": 200,
            "bonus_threshold_1": 100, "bonus_threshold_2": 500, "bonus_threshold_3": 1000,
        })
        assert config.bonus_schedule.highest_bonus_percent == 200

    def test_from_mapping_partial_three_tier_rejected(self):
        with pytest.raises(ValueError, match="Missing"):
            PolicyConfig.from_mapping({"payout_bonus_1": 110})

    def test_from_mapping_both_shapes_rejected(self):
        with pytest.raises(ValueError, match="not both"):
            PolicyConfig.from_mapping({
                "bonus_tiers": [],
                "payout_bonus_1": 110,
            })

    def test_from_empty_mapping_gives_defaults(self):
        assert PolicyConfig.from_mapping({}) == PolicyConfig()


class TestLoadPolicyConfig:
    def test_reads_treasury_policy_setting(self):
        settings = SimpleNamespace(TREASURY_POLICY={
            "bonus_tiers": [{"bonus_percent": 200, "threshold": 0}],
        })
        config = load_policy_config(settings)
        assert config.bonus_schedule.highest_bonus_percent == 200

    def test_missing_setting_gives_defaults(self):
        assert load_policy_config(SimpleNamespace()) == PolicyConfig()

    def test_reads_django_settings_by_default(self):
        config = load_policy_config()
        assert config.bonus_schedule == two_tier_schedule()
