"""
MAF Activity Analyzer - Core Analysis Engine
Turns one raw activity (plus optional sensor streams) into a per-run metric set.
Missing heart-rate or speed data degrades to 0/None, never to an exception.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from maf_machine.constants import (
    NO_STREAM_IN_ZONE_PCT,
    NO_STREAM_OUT_OF_ZONE_PCT,
    QUALIFYING_MIN_SECONDS,
    QUALIFYING_MIN_ZONE_PCT,
    SUPPORTED_SPORTS,
)
from maf_machine.maf_zones import in_zone
from maf_machine.models import AnalyzedActivity, RawActivity, SensorStreamSet
from maf_machine.settings import AthleteSettings
from maf_machine.units import unit_distance_meters, velocity_to_pace

logger = logging.getLogger(__name__)


def compute_efficiency_factor(avg_speed_mps, avg_hr) -> float:
    """Speed in meters/minute per heartbeat."""
    if not avg_hr or not avg_speed_mps or avg_hr <= 0 or avg_speed_mps <= 0:
        return 0.0
    return (avg_speed_mps * 60) / avg_hr


def is_qualifying(duration_seconds, qualifying_zone_pct, excluded: bool) -> bool:
    return (
        not excluded
        and duration_seconds >= QUALIFYING_MIN_SECONDS
        and qualifying_zone_pct >= QUALIFYING_MIN_ZONE_PCT
    )


def calculate_cardiac_drift(hr: np.ndarray) -> Optional[float]:
    """Percent change in mean HR from the first half to the second half."""
    mid = len(hr) // 2
    if mid == 0:
        return None
    first_half = float(hr[:mid].mean())
    second_half = float(hr[mid:].mean())
    if first_half <= 0:
        return None
    return ((second_half - first_half) / first_half) * 100


def calculate_aerobic_decoupling(hr: np.ndarray, velocity: np.ndarray) -> Optional[float]:
    """
    Pa:HR decoupling across the two halves of a run.

    Positive values mean the pace held up better than the heart rate did;
    negative values mean HR climbed relative to pace.
    """
    mid = len(hr) // 2
    if mid == 0:
        return None
    v1, v2 = float(velocity[:mid].mean()), float(velocity[mid:].mean())
    h1, h2 = float(hr[:mid].mean()), float(hr[mid:].mean())
    if v1 <= 0 or h1 <= 0:
        return None
    pace_ratio = v2 / v1
    hr_ratio = h2 / h1
    if hr_ratio <= 0:
        return None
    return ((pace_ratio / hr_ratio) - 1) * 100


def compute_stream_metrics(
    streams: SensorStreamSet,
    zone_low,
    zone_high,
    qualifying_high,
    unit: str,
) -> Dict[str, Any]:
    """
    Zone time, in-zone pace/cadence, drift and decoupling from aligned streams.

    HR and velocity are truncated to the shorter of the two; cadence is used
    wherever it overlaps that range.
    """
    n = min(len(streams.heartrate), len(streams.velocity_smooth))
    hr = np.asarray(streams.heartrate[:n], dtype=float)
    velocity = np.asarray(streams.velocity_smooth[:n], dtype=float)

    zone_mask = (hr >= zone_low) & (hr <= zone_high)
    qualifying_mask = (hr >= zone_low) & (hr <= qualifying_high)
    zone_count = int(zone_mask.sum())
    qualifying_count = int(qualifying_mask.sum())

    # Stationary in-zone samples still count toward the divisor.
    moving_in_zone = velocity[zone_mask & (velocity > 0)]
    pace_sum = float(((unit_distance_meters(unit) / moving_in_zone) / 60).sum())

    cadence_in_zone = None
    if streams.cadence:
        cad_len = min(len(streams.cadence), n)
        cadence = np.asarray(streams.cadence[:cad_len], dtype=float)
        cad_mask = zone_mask[:cad_len] & (cadence > 0)
        if cad_mask.any():
            cadence_in_zone = float((cadence[cad_mask] * 2).sum()) / int(cad_mask.sum())

    return {
        'sample_count': n,
        'time_in_maf_zone_pct': (zone_count / n) * 100 if n > 0 else 0.0,
        'time_in_qualifying_zone_pct': (qualifying_count / n) * 100 if n > 0 else 0.0,
        'maf_pace': pace_sum / zone_count if zone_count > 0 else None,
        'cadence_in_zone': cadence_in_zone,
        'cardiac_drift': calculate_cardiac_drift(hr),
        'aerobic_decoupling': calculate_aerobic_decoupling(hr, velocity),
    }


def estimate_zone_time(avg_hr, zone_low, zone_high, qualifying_high) -> Dict[str, float]:
    """Coarse 75/25 zone-time estimate from the activity's average HR alone."""
    if not avg_hr or avg_hr <= 0:
        return {'time_in_maf_zone_pct': 0.0, 'time_in_qualifying_zone_pct': 0.0}
    return {
        'time_in_maf_zone_pct': (
            NO_STREAM_IN_ZONE_PCT if in_zone(avg_hr, zone_low, zone_high) else NO_STREAM_OUT_OF_ZONE_PCT
        ),
        'time_in_qualifying_zone_pct': (
            NO_STREAM_IN_ZONE_PCT if in_zone(avg_hr, zone_low, qualifying_high) else NO_STREAM_OUT_OF_ZONE_PCT
        ),
    }


def analyze_activity(
    raw: RawActivity,
    streams: Optional[SensorStreamSet],
    maf_hr,
    zone_low,
    zone_high,
    qualifying_tolerance,
    unit: str,
    excluded: bool,
) -> AnalyzedActivity:
    """
    Analyze a single activity against the athlete's MAF zone.

    Zone membership uses the explicit bounds; maf_hr is accepted so callers
    pass the full athlete configuration in one place.
    """
    avg_pace = velocity_to_pace(raw.average_speed, unit)
    avg_hr = raw.average_heartrate or 0.0
    ef = compute_efficiency_factor(raw.average_speed, avg_hr)
    qualifying_high = zone_high + qualifying_tolerance

    maf_pace = avg_pace
    cardiac_drift = None
    aerobic_decoupling = None
    cadence_in_zone = None

    if streams is not None and streams.has_hr_and_velocity:
        metrics = compute_stream_metrics(streams, zone_low, zone_high, qualifying_high, unit)
        zone_pct = metrics['time_in_maf_zone_pct']
        qualifying_pct = metrics['time_in_qualifying_zone_pct']
        if metrics['maf_pace'] is not None:
            maf_pace = metrics['maf_pace']
        cardiac_drift = metrics['cardiac_drift']
        aerobic_decoupling = metrics['aerobic_decoupling']
        cadence_in_zone = metrics['cadence_in_zone']
    else:
        estimate = estimate_zone_time(avg_hr, zone_low, zone_high, qualifying_high)
        zone_pct = estimate['time_in_maf_zone_pct']
        qualifying_pct = estimate['time_in_qualifying_zone_pct']

    excluded = bool(excluded)
    return AnalyzedActivity(
        id=raw.id,
        date=raw.start_date,
        name=raw.name,
        duration_seconds=raw.elapsed_time,
        distance_meters=raw.distance,
        avg_hr=avg_hr,
        avg_cadence=raw.average_cadence * 2 if raw.average_cadence else 0.0,
        avg_pace=avg_pace,
        time_in_maf_zone_pct=zone_pct,
        time_in_qualifying_zone_pct=qualifying_pct,
        maf_pace=maf_pace,
        elevation_gain=raw.total_elevation_gain,
        cardiac_drift=cardiac_drift,
        aerobic_decoupling=aerobic_decoupling,
        cadence_in_zone=cadence_in_zone,
        efficiency_factor=ef,
        qualifying=is_qualifying(raw.elapsed_time, qualifying_pct, excluded),
        excluded=excluded,
    )


def requalify(activity: AnalyzedActivity, excluded: bool) -> AnalyzedActivity:
    """Return a copy with a new exclusion flag and the qualification re-derived."""
    excluded = bool(excluded)
    return replace(
        activity,
        excluded=excluded,
        qualifying=is_qualifying(activity.duration_seconds, activity.time_in_qualifying_zone_pct, excluded),
    )


StreamsInput = Union[SensorStreamSet, Dict[str, Any], List[Any], None]


def _lookup_streams(streams_by_id: Optional[Mapping[Any, StreamsInput]], activity_id) -> Optional[SensorStreamSet]:
    if not streams_by_id:
        return None
    streams = streams_by_id.get(activity_id)
    if streams is None:
        streams = streams_by_id.get(str(activity_id))
    if streams is None or isinstance(streams, SensorStreamSet):
        return streams
    return SensorStreamSet.from_strava(streams)


class MAFAnalyzer:
    """Batch-analyzes raw platform activities for one athlete's settings."""

    def __init__(self, settings: Optional[AthleteSettings] = None, output_callback=None, progress_callback=None):
        self.settings = settings or AthleteSettings()
        self.output_callback = output_callback or self._default_output
        self.progress_callback = progress_callback

    def _default_output(self, text: str):
        print(text)

    def _emit(self, text: str):
        self.output_callback(text)

    def analyze(self, raw: RawActivity, streams: Optional[SensorStreamSet] = None, excluded: bool = False) -> AnalyzedActivity:
        s = self.settings
        return analyze_activity(
            raw,
            streams,
            s.maf_hr,
            s.maf_zone_low,
            s.maf_zone_high,
            s.qualifying_tolerance,
            s.units,
            excluded,
        )

    def prepare(self, payloads: Iterable[Union[RawActivity, Dict[str, Any]]]) -> List[RawActivity]:
        """Validate payloads, keeping supported runs on or after the start date."""
        start = self.settings.start_timestamp
        prepared = []
        for payload in payloads or []:
            if isinstance(payload, RawActivity):
                raw = payload
            else:
                try:
                    raw = RawActivity.from_strava(payload)
                except ValueError as exc:
                    logger.warning("Skipping invalid activity payload: %s", exc)
                    continue
            if raw.sport_type not in SUPPORTED_SPORTS:
                logger.debug("Skipping activity %s with sport type %s", raw.id, raw.sport_type)
                continue
            if start is not None and raw.timestamp < start:
                continue
            prepared.append(raw)
        return prepared

    def analyze_activities(
        self,
        payloads: Iterable[Union[RawActivity, Dict[str, Any]]],
        streams_by_id: Optional[Mapping[Any, StreamsInput]] = None,
        excluded_ids: Optional[Iterable[Any]] = None,
    ) -> List[AnalyzedActivity]:
        excluded = {str(i) for i in (excluded_ids or ())}
        raws = self.prepare(payloads)
        total = len(raws)
        results = []
        for i, raw in enumerate(raws):
            if self.progress_callback:
                self.progress_callback(i + 1, total)
            streams = _lookup_streams(streams_by_id, raw.id)
            logger.debug(
                "Analyzing activity %s (%s)",
                raw.id,
                "streams" if streams is not None else "average-HR estimate",
            )
            results.append(self.analyze(raw, streams, excluded=str(raw.id) in excluded))

        self._emit(f"Analyzed {len(results)} run(s)")
        return results
