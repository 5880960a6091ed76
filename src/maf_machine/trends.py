"""Rolling 4-week trend points, one per included activity."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from maf_machine.constants import ROLLING_MIN_SAMPLES, ROLLING_WINDOW_DAYS
from maf_machine.models import AnalyzedActivity, MAFTrend

ROLLING_COLUMNS = ('avg_hr', 'maf_pace', 'efficiency_factor', 'cadence_in_zone', 'aerobic_decoupling')


def sort_included(activities: Sequence[AnalyzedActivity]) -> List[AnalyzedActivity]:
    """Non-excluded activities, oldest first (stable for equal timestamps)."""
    return sorted((a for a in activities if not a.excluded), key=lambda a: a.timestamp)


def build_activity_frame(activities: Sequence[AnalyzedActivity]) -> pd.DataFrame:
    """DataFrame of metric columns plus a UTC `date_obj`, in the given order."""
    df = pd.DataFrame(
        {col: [getattr(a, col) for a in activities] for col in ROLLING_COLUMNS}
    )
    for col in ROLLING_COLUMNS:
        df[col] = df[col].astype(float)
    df['date_obj'] = pd.to_datetime([a.timestamp for a in activities], utc=True)
    df['qualifying'] = [a.qualifying for a in activities]
    return df


def window_mean(values: pd.Series, min_samples: int = ROLLING_MIN_SAMPLES) -> Optional[float]:
    """Mean of the non-null values, or None with fewer than `min_samples`."""
    present = values.dropna()
    if len(present) < min_samples:
        return None
    return float(np.mean(present.to_numpy()))


def compute_trends(activities: Sequence[AnalyzedActivity]) -> List[MAFTrend]:
    """
    One trend point per non-excluded activity, oldest first.

    Each point's rolling values average the activities at or before it whose
    timestamp falls within the trailing 28 days (inclusive on both ends).
    The window is rebuilt from the full prefix for every point.
    """
    ordered = sort_included(activities)
    if not ordered:
        return []

    df = build_activity_frame(ordered)
    window_length = pd.Timedelta(days=ROLLING_WINDOW_DAYS)

    trends = []
    for i, activity in enumerate(ordered):
        cutoff = df['date_obj'].iloc[i] - window_length
        prefix = df.iloc[: i + 1]
        window = prefix[prefix['date_obj'] >= cutoff]

        trends.append(MAFTrend(
            date=activity.date,
            avg_hr=activity.avg_hr,
            rolling_hr=window_mean(window['avg_hr']),
            maf_pace=activity.maf_pace,
            rolling_maf_pace=window_mean(window['maf_pace']),
            ef=activity.efficiency_factor,
            rolling_ef=window_mean(window['efficiency_factor']),
            cadence=activity.cadence_in_zone,
            rolling_cadence=window_mean(window['cadence_in_zone']),
            decoupling=activity.aerobic_decoupling,
            rolling_decoupling=window_mean(window['aerobic_decoupling']),
            time_in_zone_pct=activity.time_in_maf_zone_pct,
            qualifying=activity.qualifying,
        ))
    return trends
