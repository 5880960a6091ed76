"""
Run advisor: a fixed-priority decision table over the summary and run list.

Rules are checked top to bottom and the first match wins:

    1. Consistency gap      (3+ days since the last run)
    2. HR control           (current HR more than 5 bpm over MAF HR)
    3. Zone discipline      (under 60% of time in zone)
    4. Recovery             (HR trend regressing)
    5. Cadence              (known in-zone cadence under 170 spm)
    6. Volume               (under 3 runs this week while HR plateaus)
    7. Duration             (HR improving and decoupling under 5%)
    8. Encouragement        (HR improving)
    9. Stay consistent      (fallback)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from maf_machine.constants import (
    CADENCE_TARGET,
    CONSISTENCY_GAP_DAYS,
    DECOUPLING_LIMIT,
    DEFAULT_LONG_RUN_MIN,
    FOCUS_CADENCE,
    FOCUS_CONSISTENCY,
    FOCUS_DURATION,
    FOCUS_HR_CONTROL,
    FOCUS_RECOVERY,
    FOCUS_VOLUME,
    FOCUS_ZONE_DISCIPLINE,
    HR_DEVIATION_LIMIT,
    LONG_RUN_EXTENSION_MIN,
    NO_RUN_DAYS,
    TREND_IMPROVING,
    TREND_PLATEAU,
    TREND_REGRESSING,
    WEEKLY_RUNS_TARGET,
    WEEKLY_WINDOW_DAYS,
    ZONE_DISCIPLINE_MIN_PCT,
)
from maf_machine.models import Advice, AnalyzedActivity, MAFSummary
from maf_machine.units import round_half_up


def days_since_last_run(activities: Sequence[AnalyzedActivity], now: datetime) -> int:
    if not activities:
        return NO_RUN_DAYS
    last = max(a.timestamp for a in activities)
    return int((now - last) // timedelta(days=1))


def runs_in_last_week(activities: Sequence[AnalyzedActivity], now: datetime):
    cutoff = now - timedelta(days=WEEKLY_WINDOW_DAYS)
    return [a for a in activities if a.timestamp >= cutoff]


def suggested_long_run_minutes(recent_runs: Sequence[AnalyzedActivity]) -> int:
    longest = max((a.duration_seconds for a in recent_runs), default=0)
    if longest > 0:
        return round_half_up(longest / 60) + LONG_RUN_EXTENSION_MIN
    return DEFAULT_LONG_RUN_MIN


def select_advice(
    summary: MAFSummary,
    activities: Sequence[AnalyzedActivity],
    maf_hr,
    zone_low,
    zone_high,
    unit: str,
    now: Optional[datetime] = None,
) -> Advice:
    """Pick the single most important piece of guidance for the next run."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    zone = f"{zone_low}-{zone_high} bpm"
    gap_days = days_since_last_run(activities, now)
    recent_runs = runs_in_last_week(activities, now)
    weekly_count = len(recent_runs)

    zone_discipline = summary.zone_discipline or 0
    avg_cadence = summary.avg_cadence or 0
    avg_decoupling = summary.avg_decoupling or 0
    hr_deviation = summary.current_avg_hr - maf_hr if summary.current_avg_hr is not None else 0
    hr_trend = summary.hr_trend_direction

    if gap_days >= CONSISTENCY_GAP_DAYS:
        return Advice(
            headline='Time to Run!',
            body=(
                f"It's been {gap_days} days since your last run. Get out for an easy 30-40 minute run. "
                f"The key: keep your heart rate in the {zone} zone. Walk uphills if needed; "
                f"the pace doesn't matter, the HR does."
            ),
            focus=FOCUS_CONSISTENCY,
        )

    if hr_deviation > HR_DEVIATION_LIMIT:
        return Advice(
            headline='Bring Your Heart Rate Down',
            body=(
                f"Your average HR is running {round_half_up(hr_deviation)} bpm above your MAF target of {maf_hr}. "
                f"This is the #1 thing to fix. Slow down significantly and walk if you have to. "
                f"Your target zone is {zone}. The pace will feel painfully slow at first, but that's the point. "
                f"Your aerobic system needs this."
            ),
            focus=FOCUS_HR_CONTROL,
        )

    if zone_discipline < ZONE_DISCIPLINE_MIN_PCT:
        return Advice(
            headline='Stay in the Zone',
            body=(
                f"Only {round_half_up(zone_discipline)}% of your run time is in the MAF zone ({zone}). "
                f"You're likely starting too fast or pushing on hills. Warm up with 5 minutes of walking, "
                f"then ease into a pace where your HR stays between {zone_low}-{zone_high}. "
                f"Walk uphills. Target: >75% time in zone."
            ),
            focus=FOCUS_ZONE_DISCIPLINE,
        )

    if hr_trend == TREND_REGRESSING:
        return Advice(
            headline='Recovery Week',
            body=(
                f"Your heart rate is trending upward over the past 8 weeks. Possible causes: overtraining, "
                f"poor sleep, illness, or heat stress. Consider a recovery week: 3 easy runs of 25-30 minutes max, "
                f"keeping HR firmly in {zone}. Reassess in 7 days."
            ),
            focus=FOCUS_RECOVERY,
        )

    if 0 < avg_cadence < CADENCE_TARGET:
        return Advice(
            headline='Work on Cadence',
            body=(
                f"Your average cadence is {round_half_up(avg_cadence)} spm, below the {CADENCE_TARGET} target. "
                f"Higher cadence at MAF HR means lighter, more efficient steps. Try a cadence drill: "
                f"30 seconds at 180+ spm every 5 minutes during your next run. Keep HR in {zone}."
            ),
            focus=FOCUS_CADENCE,
        )

    if weekly_count < WEEKLY_RUNS_TARGET and hr_trend == TREND_PLATEAU:
        return Advice(
            headline='Add Another Run',
            body=(
                f"Your HR trend has plateaued and you're running {weekly_count}x per week. "
                f"Adding a 4th easy run at MAF HR ({zone}) can help your aerobic system adapt faster. "
                f"Duration: 40-60 minutes."
            ),
            focus=FOCUS_VOLUME,
        )

    if hr_trend == TREND_IMPROVING and avg_decoupling < DECOUPLING_LIMIT:
        minutes = suggested_long_run_minutes(recent_runs)
        return Advice(
            headline='Extend Your Long Run',
            body=(
                f"Your aerobic system is adapting well: HR is dropping and decoupling is under {DECOUPLING_LIMIT}%. "
                f"Try {minutes} minutes this week at MAF HR ({zone}). Your body is ready for more volume."
            ),
            focus=FOCUS_DURATION,
        )

    if hr_trend == TREND_IMPROVING:
        return Advice(
            headline='Keep It Up!',
            body=(
                f"Your heart rate is trending down and your aerobic system is building. "
                f"Stay consistent with your current training at {zone}. No changes needed, just patience."
            ),
            focus=FOCUS_CONSISTENCY,
        )

    return Advice(
        headline='Stay Consistent',
        body=(
            f"Keep running 3-4 times per week with your heart rate in {zone}. Focus on the HR, not the pace. "
            f"Walk uphills, slow down on hot days. Progress takes patience, so trust the process."
        ),
        focus=FOCUS_CONSISTENCY,
    )
