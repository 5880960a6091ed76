"""Athlete zone configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from maf_machine.constants import (
    DEFAULT_AGE,
    DEFAULT_MODIFIER,
    DEFAULT_QUALIFYING_TOLERANCE,
    DEFAULT_UNITS,
    MAF_MODIFIERS,
    MAX_AGE,
    MIN_AGE,
    SUPPORTED_UNITS,
)
from maf_machine.maf_zones import compute_maf_hr, get_zone_bounds
from maf_machine.models import parse_timestamp


@dataclass(frozen=True)
class AthleteSettings:
    age: int = DEFAULT_AGE
    modifier: int = DEFAULT_MODIFIER
    units: str = DEFAULT_UNITS
    qualifying_tolerance: int = DEFAULT_QUALIFYING_TOLERANCE
    start_date: Optional[str] = None

    def __post_init__(self):
        if not (MIN_AGE <= self.age <= MAX_AGE):
            raise ValueError(f"age must be between {MIN_AGE} and {MAX_AGE}, got {self.age!r}")
        if self.modifier not in MAF_MODIFIERS:
            raise ValueError(f"modifier must be one of {MAF_MODIFIERS}, got {self.modifier!r}")
        if self.units not in SUPPORTED_UNITS:
            raise ValueError(f"units must be one of {SUPPORTED_UNITS}, got {self.units!r}")
        if self.qualifying_tolerance < 0:
            raise ValueError("qualifying_tolerance must not be negative")
        if self.start_date:
            parse_timestamp(self.start_date)

    @property
    def maf_hr(self) -> int:
        return compute_maf_hr(self.age, self.modifier)

    @property
    def maf_zone_low(self) -> int:
        return get_zone_bounds(self.maf_hr)[0]

    @property
    def maf_zone_high(self) -> int:
        return get_zone_bounds(self.maf_hr)[1]

    @property
    def qualifying_high(self) -> int:
        return self.maf_zone_high + self.qualifying_tolerance

    @property
    def start_timestamp(self) -> Optional[datetime]:
        return parse_timestamp(self.start_date) if self.start_date else None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AthleteSettings':
        """Build settings from a stored/settings-API payload, applying defaults."""
        data = data or {}
        try:
            age = int(data['age']) if data.get('age') is not None else DEFAULT_AGE
            modifier = int(data['modifier']) if data.get('modifier') is not None else DEFAULT_MODIFIER
            tolerance = (
                int(data['qualifying_tolerance'])
                if data.get('qualifying_tolerance') is not None
                else DEFAULT_QUALIFYING_TOLERANCE
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid settings payload: {exc}") from exc

        return cls(
            age=age,
            modifier=modifier,
            units=data.get('units') or DEFAULT_UNITS,
            qualifying_tolerance=tolerance,
            start_date=data.get('start_date') or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'configured': True,
            'age': self.age,
            'modifier': self.modifier,
            'units': self.units,
            'maf_hr': self.maf_hr,
            'maf_zone_low': self.maf_zone_low,
            'maf_zone_high': self.maf_zone_high,
            'qualifying_tolerance': self.qualifying_tolerance,
            'start_date': self.start_date,
        }
