"""Plain-text rendering of runs, summary, and advice for terminal output."""

from __future__ import annotations

from typing import List, Optional, Sequence

from maf_machine.constants import (
    CADENCE_TARGET,
    TREND_ARROWS,
    TREND_INSUFFICIENT,
    TREND_LABELS,
)
from maf_machine.maf_zones import HR_BAND_LABELS, classify_hr_band
from maf_machine.models import Advice, AnalyzedActivity, MAFSummary
from maf_machine.settings import AthleteSettings
from maf_machine.units import format_ef, format_pace_or_placeholder, round_half_up

DASH = '-'


def trend_label(direction: str, metric: str) -> str:
    if direction == TREND_INSUFFICIENT:
        return 'Not enough data'
    return TREND_LABELS.get(metric, {}).get(direction, direction)


def trend_badge(direction: str, metric: str) -> str:
    return f"{TREND_ARROWS.get(direction, DASH)} {trend_label(direction, metric)}"


def hr_deviation_text(current_avg_hr: Optional[float], maf_hr) -> str:
    if current_avg_hr is None:
        return DASH
    deviation = current_avg_hr - maf_hr
    if deviation > 0:
        return f"+{round_half_up(deviation)} above target"
    if deviation < 0:
        return f"{-round_half_up(-deviation)} below target"
    return 'On target'


def cadence_note(avg_cadence: Optional[float]) -> str:
    if avg_cadence is None:
        return DASH
    return 'On target' if avg_cadence >= CADENCE_TARGET else f"Below {CADENCE_TARGET} target"


def format_signed(value: Optional[float], suffix: str) -> str:
    if value is None:
        return DASH
    sign = '+' if value > 0 else ''
    return f"{sign}{value:.1f}{suffix}"


def activity_line(activity: AnalyzedActivity, settings: AthleteSettings) -> str:
    band = classify_hr_band(activity.avg_hr, settings.maf_zone_low, settings.maf_zone_high, settings.qualifying_high)
    ef = format_ef(activity.efficiency_factor) if activity.efficiency_factor > 0 else DASH
    flags = 'Q' if activity.qualifying else '.'
    if activity.excluded:
        flags = 'x'
    return (
        f"{activity.date[:10]}  {activity.name[:28]:<28}  "
        f"{round_half_up(activity.avg_hr):>3} bpm ({HR_BAND_LABELS[band]:<12})  "
        f"{round_half_up(activity.time_in_maf_zone_pct):>3}%  "
        f"{format_pace_or_placeholder(activity.avg_pace, settings.units):>10}  "
        f"EF {ef:>4}  {flags}"
    )


def summary_lines(summary: MAFSummary, settings: AthleteSettings) -> List[str]:
    units = settings.units
    hr = f"{round_half_up(summary.current_avg_hr)} bpm" if summary.current_avg_hr is not None else DASH
    pace = format_pace_or_placeholder(summary.current_maf_pace, units) if summary.current_maf_pace else DASH
    ef = format_ef(summary.current_ef) if summary.current_ef is not None else DASH
    zone = f"{round_half_up(summary.zone_discipline)}%" if summary.zone_discipline is not None else DASH
    cadence = f"{round_half_up(summary.avg_cadence)} spm" if summary.avg_cadence is not None else DASH
    decoupling = f"{summary.avg_decoupling:.1f}%" if summary.avg_decoupling is not None else DASH

    return [
        f"MAF HR:     {settings.maf_hr} bpm  (zone {settings.maf_zone_low}-{settings.maf_zone_high}, "
        f"qual: {settings.qualifying_high})",
        f"Avg HR:     {hr}  {hr_deviation_text(summary.current_avg_hr, settings.maf_hr)}  "
        f"[{trend_badge(summary.hr_trend_direction, 'hr')}, {format_signed(summary.hr_trend_slope, ' bpm/wk')}]",
        f"MAF Pace:   {pace}  [{trend_badge(summary.pace_trend_direction, 'pace')}, "
        f"{format_signed(summary.pace_trend_slope, 's/wk')}]",
        f"Efficiency: {ef}  [{trend_badge(summary.ef_trend_direction, 'ef')}]",
        f"In Zone:    {zone}",
        f"Cadence:    {cadence}  ({cadence_note(summary.avg_cadence)})",
        f"Decoupling: {decoupling}",
        f"Qualifying: {summary.total_qualifying_runs}/{summary.total_runs} "
        f"({round_half_up(summary.qualifying_pct)}%)",
    ]


def advice_lines(advice: Advice) -> List[str]:
    return [f"{advice.headline}  [{advice.focus}]", advice.body]


def build_report(
    activities: Sequence[AnalyzedActivity],
    summary: MAFSummary,
    advice: Optional[Advice],
    settings: AthleteSettings,
) -> List[str]:
    lines = [f"RUNS ({len(activities)})", "-" * 50]
    lines.extend(activity_line(a, settings) for a in activities)
    lines.extend(["", "SUMMARY", "-" * 50])
    lines.extend(summary_lines(summary, settings))
    if advice is not None:
        lines.extend(["", "NEXT RUN", "-" * 50])
        lines.extend(advice_lines(advice))
    return lines
