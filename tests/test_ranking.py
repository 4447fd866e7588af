"""Rank ordinal encoding: ladder order, clamps and bad input."""

import pytest

from api.services.ranking import (
    DIVISION_TIERS,
    TIERS,
    normalize_division,
    normalize_tier,
    ordinal_from_rank,
    tier_index,
)

DIVISIONS = ["IV", "III", "II", "I"]


def test_reference_values():
    assert ordinal_from_rank("IRON", "IV", 0) == 0
    assert ordinal_from_rank("GOLD", "II", 40) == pytest.approx(3 * 5 + 2 + 0.4)
    assert ordinal_from_rank("DIAMOND", "I", 75) == pytest.approx(6 * 5 + 3 + 0.75)
    assert ordinal_from_rank("MASTER", None, 500) == pytest.approx(7 * 5 + 4 + 0.5)
    assert ordinal_from_rank("GRANDMASTER", "I", 250) == pytest.approx(8 * 5 + 4 + 0.25)
    assert ordinal_from_rank("CHALLENGER", None, 1500) == pytest.approx(9 * 5 + 4 + 0.5)


def test_lp_clamps():
    assert ordinal_from_rank("GOLD", "IV", 5000) == ordinal_from_rank("GOLD", "IV", 1000)
    assert ordinal_from_rank("GOLD", "IV", -50) == ordinal_from_rank("GOLD", "IV", 0)
    assert ordinal_from_rank("MASTER", None, 9999) == pytest.approx(7 * 5 + 5)
    assert ordinal_from_rank("CHALLENGER", None, 9999) == pytest.approx(9 * 5 + 5)


@pytest.mark.parametrize("lower, higher", list(zip(TIERS, TIERS[1:])))
def test_higher_tier_always_wins(lower, higher):
    best_lower = max(ordinal_from_rank(lower, d, lp) for d in DIVISIONS for lp in (0, 50, 99))
    worst_higher = min(ordinal_from_rank(higher, d, 0) for d in DIVISIONS)
    assert best_lower < worst_higher


@pytest.mark.parametrize("tier", DIVISION_TIERS)
def test_division_dominates_lp(tier):
    for low, high in zip(DIVISIONS, DIVISIONS[1:]):
        for lp in (0, 42, 99):
            assert ordinal_from_rank(tier, low, lp) < ordinal_from_rank(tier, high, 0)


def test_unknown_tier_is_zero():
    assert ordinal_from_rank("UNRANKED", "I", 99) == 0
    assert ordinal_from_rank("", "I", 99) == 0
    assert ordinal_from_rank(None, None, None) == 0


def test_unknown_tier_sorts_below_iron_iv():
    assert ordinal_from_rank("WOOD", "IV", 0) <= ordinal_from_rank("IRON", "IV", 0)
    assert ordinal_from_rank("WOOD", "I", 80) < ordinal_from_rank("IRON", "IV", 1)


def test_challenger_lp_is_monotonic():
    assert ordinal_from_rank("CHALLENGER", None, 5000) > ordinal_from_rank("CHALLENGER", None, 0)
    assert ordinal_from_rank("CHALLENGER", None, 2000) > ordinal_from_rank("CHALLENGER", None, 1000)


def test_input_is_case_insensitive():
    assert ordinal_from_rank("gold", "ii", 40) == ordinal_from_rank("GOLD", "II", 40)
    assert ordinal_from_rank(" Platinum ", "iii", 10) == ordinal_from_rank("PLATINUM", "III", 10)


def test_missing_or_bad_division_counts_as_iv():
    assert ordinal_from_rank("SILVER", None, 10) == ordinal_from_rank("SILVER", "IV", 10)
    assert ordinal_from_rank("SILVER", "V", 10) == ordinal_from_rank("SILVER", "IV", 10)


def test_malformed_lp_degrades_to_zero():
    assert ordinal_from_rank("GOLD", "I", "lots") == ordinal_from_rank("GOLD", "I", 0)
    assert ordinal_from_rank("GOLD", "I", None) == ordinal_from_rank("GOLD", "I", 0)
    assert ordinal_from_rank("GOLD", "I", float("nan")) == ordinal_from_rank("GOLD", "I", 0)
    assert ordinal_from_rank("GOLD", "I", "55") == ordinal_from_rank("GOLD", "I", 55)


def test_promotion_resets_lp_inside_the_new_division():
    # 99 LP in IV is still below 0 LP in III: the scale is segmented per division
    assert ordinal_from_rank("EMERALD", "IV", 99) < ordinal_from_rank("EMERALD", "III", 0)


def test_tier_helpers():
    assert tier_index("iron") == 0
    assert tier_index("Challenger") == 9
    assert tier_index("unranked") == -1
    assert normalize_tier("emerald") == "EMERALD"
    assert normalize_tier("nope") is None
    assert normalize_division("ii") == "II"
    assert normalize_division("V") is None
    assert normalize_division(None) is None
