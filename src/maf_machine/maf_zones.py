"""MAF heart-rate targets, zone bounds, and zone membership."""

from __future__ import annotations

from typing import Dict, Tuple

from maf_machine.constants import (
    DEFAULT_AGE,
    MAF_BASE,
    MAF_MODIFIERS,
    MAF_ZONE_HALF_WIDTH,
)

ZONE_BELOW = 'below'
ZONE_IN = 'in_zone'
ZONE_QUALIFYING = 'qualifying'
ZONE_OUTSIDE = 'outside'

HR_BAND_LABELS: Dict[str, str] = {
    ZONE_BELOW: 'Below zone',
    ZONE_IN: 'MAF zone',
    ZONE_QUALIFYING: 'Qualifying',
    ZONE_OUTSIDE: 'Above target',
}


def normalize_age(age, default: int = DEFAULT_AGE) -> int:
    """Return a usable age value."""
    try:
        value = int(age or 0)
    except (TypeError, ValueError):
        value = 0
    if value <= 0:
        return int(default)
    return value


def compute_maf_hr(age, modifier: int = 0) -> int:
    """180 - age + training-status modifier."""
    if modifier not in MAF_MODIFIERS:
        raise ValueError(f"modifier must be one of {MAF_MODIFIERS}, got {modifier!r}")
    return MAF_BASE - normalize_age(age) + modifier


def get_zone_bounds(maf_hr) -> Tuple[int, int]:
    """Return (low, high) of the closed MAF zone around the target HR."""
    return maf_hr - MAF_ZONE_HALF_WIDTH, maf_hr + MAF_ZONE_HALF_WIDTH


def in_zone(hr_value, zone_low, zone_high) -> bool:
    """Closed-interval membership; both boundaries count as in-zone."""
    return zone_low <= hr_value <= zone_high


def classify_hr_band(hr_value, zone_low, zone_high, qualifying_high) -> str:
    """Classify an average HR against the MAF zone and the qualifying ceiling."""
    if hr_value < zone_low:
        return ZONE_BELOW
    if in_zone(hr_value, zone_low, zone_high):
        return ZONE_IN
    if hr_value <= qualifying_high:
        return ZONE_QUALIFYING
    return ZONE_OUTSIDE
