"""
Typed records flowing through the MAF analysis engine.

Raw platform payloads are converted once, here, into frozen dataclasses.
Everything downstream of the boundary works on these records and never
re-validates. Derived records serialize with `to_dict()` using the field
names the rendering and persistence layers depend on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

STREAM_KEYS: Tuple[str, ...] = (
    'heartrate',
    'cadence',
    'velocity_smooth',
    'time',
    'distance',
    'altitude',
)


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (or datetime) into a UTC-aware datetime."""
    if value is None or value == '':
        raise ValueError("missing timestamp")
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"unparseable timestamp {value!r}") from exc
    if pd.isna(ts):
        raise ValueError(f"unparseable timestamp {value!r}")
    if ts.tzinfo is None:
        ts = ts.tz_localize(timezone.utc)
    return ts.tz_convert(timezone.utc).to_pydatetime()


def _to_float(value, default: float = 0.0) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return default


def _to_optional_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _clean_series(values) -> List[float]:
    cleaned = []
    for value in values or []:
        try:
            cleaned.append(float(value) if value is not None else 0.0)
        except (TypeError, ValueError):
            cleaned.append(0.0)
    return cleaned


@dataclass(frozen=True)
class RawActivity:
    id: int
    name: str
    start_date: str
    timestamp: datetime
    elapsed_time: float
    distance: float
    average_speed: float
    total_elevation_gain: float = 0.0
    moving_time: float = 0.0
    average_heartrate: Optional[float] = None
    average_cadence: Optional[float] = None
    sport_type: str = 'Run'

    @classmethod
    def from_strava(cls, payload: Dict[str, Any]) -> 'RawActivity':
        """Validate a Strava activity summary dict into a RawActivity."""
        if not isinstance(payload, dict):
            raise ValueError(f"activity payload must be a dict, got {type(payload).__name__}")
        activity_id = payload.get('id')
        if activity_id is None:
            raise ValueError("activity payload has no id")
        start_date = payload.get('start_date')
        timestamp = parse_timestamp(start_date)

        return cls(
            id=activity_id,
            name=str(payload.get('name') or ''),
            start_date=str(start_date),
            timestamp=timestamp,
            elapsed_time=_to_float(payload.get('elapsed_time')),
            distance=_to_float(payload.get('distance')),
            average_speed=_to_float(payload.get('average_speed')),
            total_elevation_gain=_to_float(payload.get('total_elevation_gain')),
            moving_time=_to_float(payload.get('moving_time')),
            average_heartrate=_to_optional_float(payload.get('average_heartrate')),
            average_cadence=_to_optional_float(payload.get('average_cadence')),
            sport_type=str(payload.get('sport_type') or payload.get('type') or 'Run'),
        )


@dataclass(frozen=True)
class SensorStreamSet:
    heartrate: List[float] = field(default_factory=list)
    cadence: List[float] = field(default_factory=list)
    velocity_smooth: List[float] = field(default_factory=list)
    time: List[float] = field(default_factory=list)
    distance: List[float] = field(default_factory=list)
    altitude: List[float] = field(default_factory=list)

    @classmethod
    def from_strava(cls, payload) -> Optional['SensorStreamSet']:
        """
        Accept Strava's key_by_type shape ({'heartrate': {'data': [...]}}),
        its list shape ([{'type': 'heartrate', 'data': [...]}]) or plain lists.
        Returns None when nothing usable is present.
        """
        if not payload:
            return None
        if isinstance(payload, list):
            payload = {item.get('type'): item for item in payload if isinstance(item, dict)}
        if not isinstance(payload, dict):
            return None

        series = {}
        for key in STREAM_KEYS:
            raw = payload.get(key)
            if isinstance(raw, dict):
                raw = raw.get('data')
            series[key] = _clean_series(raw)

        if not any(series.values()):
            return None
        return cls(**series)

    @property
    def has_hr_and_velocity(self) -> bool:
        return bool(self.heartrate) and bool(self.velocity_smooth)


@dataclass(frozen=True)
class AnalyzedActivity:
    id: int
    date: str
    name: str
    duration_seconds: float
    distance_meters: float
    avg_hr: float
    avg_cadence: float
    avg_pace: float
    time_in_maf_zone_pct: float
    time_in_qualifying_zone_pct: float
    maf_pace: float
    elevation_gain: float
    cardiac_drift: Optional[float]
    aerobic_decoupling: Optional[float]
    cadence_in_zone: Optional[float]
    efficiency_factor: float
    qualifying: bool
    excluded: bool

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalyzedActivity':
        """Rebuild a cached record (e.g. from a previous JSON export)."""
        date = str(data['date'])
        parse_timestamp(date)
        return cls(
            id=data['id'],
            date=date,
            name=str(data.get('name') or ''),
            duration_seconds=_to_float(data.get('duration_seconds')),
            distance_meters=_to_float(data.get('distance_meters')),
            avg_hr=_to_float(data.get('avg_hr')),
            avg_cadence=_to_float(data.get('avg_cadence')),
            avg_pace=_to_float(data.get('avg_pace')),
            time_in_maf_zone_pct=_to_float(data.get('time_in_maf_zone_pct')),
            time_in_qualifying_zone_pct=_to_float(data.get('time_in_qualifying_zone_pct')),
            maf_pace=_to_float(data.get('maf_pace')),
            elevation_gain=_to_float(data.get('elevation_gain')),
            cardiac_drift=_to_optional_float(data.get('cardiac_drift')),
            aerobic_decoupling=_to_optional_float(data.get('aerobic_decoupling')),
            cadence_in_zone=_to_optional_float(data.get('cadence_in_zone')),
            efficiency_factor=_to_float(data.get('efficiency_factor')),
            qualifying=bool(data.get('qualifying')),
            excluded=bool(data.get('excluded')),
        )


@dataclass(frozen=True)
class MAFTrend:
    date: str
    avg_hr: float
    rolling_hr: Optional[float]
    maf_pace: float
    rolling_maf_pace: Optional[float]
    ef: float
    rolling_ef: Optional[float]
    cadence: Optional[float]
    rolling_cadence: Optional[float]
    decoupling: Optional[float]
    rolling_decoupling: Optional[float]
    time_in_zone_pct: float
    qualifying: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date,
            'avgHr': self.avg_hr,
            'rollingHr': self.rolling_hr,
            'mafPace': self.maf_pace,
            'rollingMafPace': self.rolling_maf_pace,
            'ef': self.ef,
            'rollingEf': self.rolling_ef,
            'cadence': self.cadence,
            'rollingCadence': self.rolling_cadence,
            'decoupling': self.decoupling,
            'rollingDecoupling': self.rolling_decoupling,
            'timeInZonePct': self.time_in_zone_pct,
            'qualifying': self.qualifying,
        }


@dataclass(frozen=True)
class MAFSummary:
    current_avg_hr: Optional[float]
    hr_trend_direction: str
    hr_trend_slope: Optional[float]
    zone_discipline: Optional[float]
    current_maf_pace: Optional[float]
    pace_trend_direction: str
    pace_trend_slope: Optional[float]
    current_ef: Optional[float]
    ef_trend_direction: str
    avg_decoupling: Optional[float]
    avg_cadence: Optional[float]
    total_runs: int
    total_qualifying_runs: int
    qualifying_pct: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currentAvgHr': self.current_avg_hr,
            'hrTrendDirection': self.hr_trend_direction,
            'hrTrendSlope': self.hr_trend_slope,
            'zoneDiscipline': self.zone_discipline,
            'currentMafPace': self.current_maf_pace,
            'paceTrendDirection': self.pace_trend_direction,
            'paceTrendSlope': self.pace_trend_slope,
            'currentEf': self.current_ef,
            'efTrendDirection': self.ef_trend_direction,
            'avgDecoupling': self.avg_decoupling,
            'avgCadence': self.avg_cadence,
            'totalRuns': self.total_runs,
            'totalQualifyingRuns': self.total_qualifying_runs,
            'qualifyingPct': self.qualifying_pct,
        }


@dataclass(frozen=True)
class Advice:
    headline: str
    body: str
    focus: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
