"""Velocity/pace conversion and display formatting."""

from __future__ import annotations

import math

from maf_machine.constants import METERS_PER_KM, METERS_PER_MILE, PACE_PLACEHOLDER


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (display rounding)."""
    return int(math.floor(value + 0.5))


def unit_distance_meters(unit: str) -> float:
    return METERS_PER_MILE if unit == 'mi' else METERS_PER_KM


def velocity_to_pace(meters_per_second, unit: str) -> float:
    """Convert m/s into minutes per km or per mile; 0 for non-positive speed."""
    if meters_per_second is None or meters_per_second <= 0:
        return 0.0
    return (unit_distance_meters(unit) / meters_per_second) / 60


def format_pace(pace_minutes: float, unit: str) -> str:
    """
    Render pace as "M:SS /unit".

    Seconds are rounded independently of the minutes, so a fractional minute
    that rounds up to 60 seconds renders as "M:60" rather than carrying over.
    """
    minutes = math.floor(pace_minutes)
    seconds = round_half_up((pace_minutes - minutes) * 60)
    return f"{minutes}:{seconds:02d} /{unit}"


def format_pace_or_placeholder(pace_minutes, unit: str) -> str:
    if not pace_minutes or pace_minutes <= 0:
        return PACE_PLACEHOLDER
    return format_pace(pace_minutes, unit)


def format_ef(value: float) -> str:
    return f"{value:.2f}"
