"""Point-in-time MAF summary: current values, 8-week trends, zone discipline."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import numpy as np

from maf_machine.constants import (
    CURRENT_WINDOW_DAYS,
    EF_SLOPE_THRESHOLD,
    HR_SLOPE_THRESHOLD,
    PACE_SLOPE_THRESHOLD,
    TREND_IMPROVING,
    TREND_INSUFFICIENT,
    TREND_MIN_POINTS,
    TREND_PLATEAU,
    TREND_REGRESSING,
    TREND_WINDOW_DAYS,
)
from maf_machine.models import AnalyzedActivity, MAFSummary
from maf_machine.trends import build_activity_frame, sort_included

SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def linear_slope(x, y) -> float:
    """Ordinary least-squares slope; 0 for fewer than 2 points or a vertical fit."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = len(x)
    if n < 2:
        return 0.0
    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()
    denom = n * sum_xx - sum_x * sum_x
    if denom == 0:
        return 0.0
    return float((n * sum_xy - sum_x * sum_y) / denom)


def classify_slope(slope: float, threshold: float, lower_is_better: bool) -> str:
    if lower_is_better:
        slope = -slope
    if slope > threshold:
        return TREND_IMPROVING
    if slope < -threshold:
        return TREND_REGRESSING
    return TREND_PLATEAU


def empty_summary() -> MAFSummary:
    return MAFSummary(
        current_avg_hr=None,
        hr_trend_direction=TREND_INSUFFICIENT,
        hr_trend_slope=None,
        zone_discipline=None,
        current_maf_pace=None,
        pace_trend_direction=TREND_INSUFFICIENT,
        pace_trend_slope=None,
        current_ef=None,
        ef_trend_direction=TREND_INSUFFICIENT,
        avg_decoupling=None,
        avg_cadence=None,
        total_runs=0,
        total_qualifying_runs=0,
        qualifying_pct=0.0,
    )


def _mean_or_none(values) -> Optional[float]:
    values = [v for v in values if v is not None]
    if not values:
        return None
    return float(np.mean(values))


def compute_summary(activities: Sequence[AnalyzedActivity], now: Optional[datetime] = None) -> MAFSummary:
    """
    Summarize non-excluded activities relative to `now` (default: current UTC time).

    Current values average the trailing 4 weeks, falling back to the latest
    run. Trend slopes are fitted over the trailing 8 weeks in units per week;
    the pace slope is reported in seconds per week.
    """
    ordered = sort_included(activities)
    if not ordered:
        return empty_summary()

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    df = build_activity_frame(ordered)
    qualifying = [a for a in ordered if a.qualifying]

    recent = df[df['date_obj'] >= now - timedelta(days=CURRENT_WINDOW_DAYS)]
    trend_window = df[df['date_obj'] >= now - timedelta(days=TREND_WINDOW_DAYS)]

    if len(recent) > 0:
        current_avg_hr = float(np.mean(recent['avg_hr'].to_numpy()))
        current_maf_pace = float(np.mean(recent['maf_pace'].to_numpy()))
        current_ef = float(np.mean(recent['efficiency_factor'].to_numpy()))
    else:
        latest = ordered[-1]
        current_avg_hr = latest.avg_hr
        current_maf_pace = latest.maf_pace
        current_ef = latest.efficiency_factor

    hr_slope = None
    pace_slope = None
    hr_direction = pace_direction = ef_direction = TREND_INSUFFICIENT

    if len(trend_window) >= TREND_MIN_POINTS:
        base = trend_window['date_obj'].iloc[0]
        weeks = (trend_window['date_obj'] - base).dt.total_seconds().to_numpy() / SECONDS_PER_WEEK

        # HR dropping at the same effort means the aerobic base is adapting.
        hr_slope = linear_slope(weeks, trend_window['avg_hr'])
        hr_direction = classify_slope(hr_slope, HR_SLOPE_THRESHOLD, lower_is_better=True)

        pace_slope = linear_slope(weeks, trend_window['maf_pace']) * 60
        pace_direction = classify_slope(pace_slope, PACE_SLOPE_THRESHOLD, lower_is_better=True)

        ef_slope = linear_slope(weeks, trend_window['efficiency_factor'])
        ef_direction = classify_slope(ef_slope, EF_SLOPE_THRESHOLD, lower_is_better=False)

    total_runs = len(ordered)
    return MAFSummary(
        current_avg_hr=current_avg_hr,
        hr_trend_direction=hr_direction,
        hr_trend_slope=hr_slope,
        zone_discipline=_mean_or_none(a.time_in_maf_zone_pct for a in ordered),
        current_maf_pace=current_maf_pace,
        pace_trend_direction=pace_direction,
        pace_trend_slope=pace_slope,
        current_ef=current_ef,
        ef_trend_direction=ef_direction,
        avg_decoupling=_mean_or_none(a.aerobic_decoupling for a in qualifying),
        avg_cadence=_mean_or_none(a.cadence_in_zone for a in qualifying),
        total_runs=total_runs,
        total_qualifying_runs=len(qualifying),
        qualifying_pct=(len(qualifying) / total_runs) * 100,
    )
