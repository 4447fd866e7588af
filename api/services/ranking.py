"""
Ranked ladder ordering.

Every (tier, division, LP) triple maps to a single float so standings can be
sorted with a plain numeric comparison. Each tier spans five units: divisions
IV..I take offsets 0..3 and LP adds a fraction on top. Tiers without divisions
(Master and above) sit at offset 4 with LP scaled into [0, 1].

LP resets after a promotion, so the value is segmented per division rather
than a flat scale. That mirrors the ladder itself.
"""

from typing import Optional, Union

TIERS = [
    "IRON",
    "BRONZE",
    "SILVER",
    "GOLD",
    "PLATINUM",
    "EMERALD",
    "DIAMOND",
    "MASTER",
    "GRANDMASTER",
    "CHALLENGER",
]

DIVISION_TIERS = TIERS[:7]
APEX_TIERS = TIERS[7:]

DIVISION_OFFSETS = {"IV": 0, "III": 1, "II": 2, "I": 3}

TIER_STEPS = 5
APEX_OFFSET = 4

LP_CAP = 1000
CHALLENGER_LP_CAP = 3000


def tier_index(tier: Optional[str]) -> int:
    """Position of a tier on the ladder, or -1 when unknown."""
    if not tier:
        return -1
    try:
        return TIERS.index(str(tier).strip().upper())
    except ValueError:
        return -1


def _clamp_lp(lp: Union[int, float, str, None], cap: int) -> float:
    try:
        value = float(lp) if lp is not None else 0.0
    except (TypeError, ValueError):
        value = 0.0
    if value != value:  # NaN
        value = 0.0
    return max(0.0, min(value, float(cap)))


def ordinal_from_rank(
    tier: Optional[str],
    division: Optional[str] = None,
    lp: Union[int, float, str, None] = 0,
) -> float:
    """
    Encode a ranked position as a comparable number.

    Unknown or missing tiers return 0, below Iron IV 0 LP, so players without
    data always sort last. Never raises.
    """
    ti = tier_index(tier)
    if ti < 0:
        return 0.0

    t = TIERS[ti]
    if t in DIVISION_TIERS:
        div = DIVISION_OFFSETS.get(str(division or "IV").strip().upper(), 0)
        return ti * TIER_STEPS + div + _clamp_lp(lp, LP_CAP) / 100

    base = ti * TIER_STEPS + APEX_OFFSET
    if t == "CHALLENGER":
        return base + _clamp_lp(lp, CHALLENGER_LP_CAP) / CHALLENGER_LP_CAP
    return base + _clamp_lp(lp, LP_CAP) / LP_CAP


def normalize_tier(tier: Optional[str]) -> Optional[str]:
    ti = tier_index(tier)
    return TIERS[ti] if ti >= 0 else None


def normalize_division(division: Optional[str]) -> Optional[str]:
    if not division:
        return None
    d = str(division).strip().upper()
    return d if d in DIVISION_OFFSETS else None
