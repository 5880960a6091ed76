"""Activity collection lifecycle: merging, exclusions, recomputation, and CSV export."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

import pandas as pd

from maf_machine.advisor import select_advice
from maf_machine.analyzer import MAFAnalyzer, requalify
from maf_machine.models import Advice, AnalyzedActivity, MAFSummary, MAFTrend
from maf_machine.settings import AthleteSettings
from maf_machine.summary import compute_summary
from maf_machine.trends import compute_trends
from maf_machine.units import format_pace_or_placeholder

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    'date',
    'name',
    'distance_meters',
    'duration_seconds',
    'avg_pace_str',
    'maf_pace_str',
    'avg_hr',
    'avg_cadence',
    'time_in_maf_zone_pct',
    'time_in_qualifying_zone_pct',
    'efficiency_factor',
    'cardiac_drift',
    'aerobic_decoupling',
    'cadence_in_zone',
    'elevation_gain',
    'qualifying',
    'excluded',
]

DATA_DICTIONARY = """

=== DATA DICTIONARY ===

MAF HR:
- 180 - age + training-status modifier (-10, -5, 0, +5)
- MAF zone: MAF HR +/- 5 bpm (both ends included)
- Qualifying zone: MAF zone widened upward by the qualifying tolerance

TIME IN ZONE (time_in_maf_zone_pct / time_in_qualifying_zone_pct):
- Percentage of sampled seconds inside the zone
- Runs without a heart-rate stream use a coarse 75/25 estimate from average HR

MAF PACE (maf_pace_str):
- Average pace over in-zone samples only; falls back to the run's average pace

EFFICIENCY FACTOR (EF):
- Speed (m/min) divided by average heart rate
- Higher is better - more speed per heartbeat

CARDIAC DRIFT:
- Percent change in mean HR from first half to second half of the run

AEROBIC DECOUPLING:
- Percent change in pace ratio relative to HR ratio across the two halves
- Averages under 5% on qualifying runs indicate a durable aerobic base

QUALIFYING:
- Not excluded, at least 20 minutes long, and >= 60% of time in the qualifying zone
"""


class MAFDataManager:
    """Owns the analyzed activity set and everything derived from it."""

    def __init__(self, settings: Optional[AthleteSettings] = None, excluded_ids: Optional[Iterable[Any]] = None):
        self.settings = settings or AthleteSettings()
        self.excluded_ids: Set[str] = {str(i) for i in (excluded_ids or ())}
        self.activities: List[AnalyzedActivity] = []
        self.df: Optional[pd.DataFrame] = None

    # --- Loading -------------------------------------------------------------

    def _rebuild_dataframe(self) -> None:
        if self.activities:
            self.df = pd.DataFrame([a.to_dict() for a in self.activities])
            self.df['date_obj'] = pd.to_datetime([a.timestamp for a in self.activities], utc=True)
        else:
            self.df = None

    def set_activities(self, activities: Iterable[AnalyzedActivity]) -> List[AnalyzedActivity]:
        """Replace the activity set, re-applying the current exclusions."""
        self.activities = [self._apply_exclusion(a) for a in activities or []]
        self._sort()
        self._rebuild_dataframe()
        return self.activities

    def load_cached(self, records: Iterable[Dict[str, Any]]) -> List[AnalyzedActivity]:
        """Restore previously exported activity dicts, skipping unreadable ones."""
        restored = []
        for record in records or []:
            try:
                restored.append(AnalyzedActivity.from_dict(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Ignoring bad cached activity: %s", exc)
        return self.set_activities(restored)

    def merge(self, activities: Iterable[AnalyzedActivity]) -> List[AnalyzedActivity]:
        """Merge by id; an incoming record replaces the stored one with the same id."""
        by_id = {str(a.id): a for a in self.activities}
        for activity in activities or []:
            by_id[str(activity.id)] = activity
        return self.set_activities(by_id.values())

    def sync(self, payloads, streams_by_id=None, output_callback=None, progress_callback=None) -> List[AnalyzedActivity]:
        """Analyze freshly fetched platform payloads and merge them in."""
        analyzer = MAFAnalyzer(self.settings, output_callback=output_callback, progress_callback=progress_callback)
        analyzed = analyzer.analyze_activities(payloads, streams_by_id, self.excluded_ids)
        return self.merge(analyzed)

    def _sort(self) -> None:
        # Newest first, matching the run list ordering.
        self.activities.sort(key=lambda a: a.timestamp, reverse=True)

    # --- Exclusions ----------------------------------------------------------

    def _apply_exclusion(self, activity: AnalyzedActivity) -> AnalyzedActivity:
        excluded = str(activity.id) in self.excluded_ids
        if excluded == activity.excluded:
            return activity
        return requalify(activity, excluded)

    def set_excluded(self, activity_id, excluded: bool) -> None:
        key = str(activity_id)
        if excluded:
            self.excluded_ids.add(key)
        else:
            self.excluded_ids.discard(key)
        self.set_activities(self.activities)

    def toggle_exclude(self, activity_id) -> bool:
        """Flip one run's exclusion; returns the new state."""
        excluded = str(activity_id) not in self.excluded_ids
        self.set_excluded(activity_id, excluded)
        return excluded

    # --- Derived views -------------------------------------------------------

    def trends(self) -> List[MAFTrend]:
        return compute_trends(self.activities)

    def summary(self, now: Optional[datetime] = None) -> MAFSummary:
        return compute_summary(self.activities, now=now)

    def advice(self, now: Optional[datetime] = None, summary: Optional[MAFSummary] = None) -> Optional[Advice]:
        if not self.activities:
            return None
        s = self.settings
        return select_advice(
            summary or self.summary(now=now),
            self.activities,
            s.maf_hr,
            s.maf_zone_low,
            s.maf_zone_high,
            s.units,
            now=now,
        )

    def to_payload(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """JSON-ready snapshot of activities, trends, summary, and advice."""
        summary = self.summary(now=now)
        advice = self.advice(now=now, summary=summary)
        return {
            'settings': self.settings.to_dict(),
            'activities': [a.to_dict() for a in self.activities],
            'trends': [t.to_dict() for t in self.trends()],
            'summary': summary.to_dict(),
            'advice': advice.to_dict() if advice else None,
        }

    # --- Export --------------------------------------------------------------

    def _generate_csv_content(self, df: Optional[pd.DataFrame] = None) -> str:
        """CSV body plus a data dictionary describing each metric."""
        export_df = self.df if df is None else df
        if export_df is None or export_df.empty:
            raise ValueError("No data to export")

        units = self.settings.units
        prepared_df = export_df.copy()
        prepared_df['avg_pace_str'] = prepared_df['avg_pace'].apply(lambda p: format_pace_or_placeholder(p, units))
        prepared_df['maf_pace_str'] = prepared_df['maf_pace'].apply(lambda p: format_pace_or_placeholder(p, units))
        for col in EXPORT_COLUMNS:
            if col not in prepared_df.columns:
                prepared_df[col] = ''

        csv_content = prepared_df[EXPORT_COLUMNS].to_csv(index=False)
        return csv_content + DATA_DICTIONARY

    def export_csv(self, destination_dir=None) -> str:
        """Write CSV export to disk and return the saved file path."""
        full_content = self._generate_csv_content(self.df)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"maf_analysis_{timestamp}.csv"
        output_dir = destination_dir or os.path.expanduser("~/Downloads")
        os.makedirs(output_dir, exist_ok=True)
        file_path = os.path.join(output_dir, filename)

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(full_content)

        return file_path
