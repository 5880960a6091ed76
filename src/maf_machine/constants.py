"""Shared thresholds, windows, and display labels for MAF analysis."""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

# --- Units ---
METERS_PER_MILE = 1609.344
METERS_PER_KM = 1000.0
SUPPORTED_UNITS: Tuple[str, ...] = ('km', 'mi')
DEFAULT_UNITS = 'mi'
PACE_PLACEHOLDER = '--:--'

# --- Athlete defaults ---
MAF_BASE = 180
DEFAULT_AGE = 50
DEFAULT_MODIFIER = -5
MAF_MODIFIERS: Tuple[int, ...] = (-10, -5, 0, 5)
MAF_ZONE_HALF_WIDTH = 5
DEFAULT_QUALIFYING_TOLERANCE = 10
MIN_AGE = 10
MAX_AGE = 100

MODIFIER_DESCRIPTIONS: Dict[int, str] = {
    -10: 'Recovering from illness/surgery or on regular medication',
    -5: 'Injured, regressed, frequent colds, allergies, or just starting',
    0: 'Training consistently 4x/week for up to 2 years',
    5: 'Training 2+ years with no issues and improving',
}

# Strava `type` / `sport_type` values treated as runs.
SUPPORTED_SPORTS: FrozenSet[str] = frozenset({'Run', 'TrailRun', 'VirtualRun'})

# --- Per-activity analysis ---
QUALIFYING_MIN_SECONDS = 1200
QUALIFYING_MIN_ZONE_PCT = 60.0
NO_STREAM_IN_ZONE_PCT = 75.0
NO_STREAM_OUT_OF_ZONE_PCT = 25.0

# --- Windows (days) ---
ROLLING_WINDOW_DAYS = 28
CURRENT_WINDOW_DAYS = 28
TREND_WINDOW_DAYS = 56
WEEKLY_WINDOW_DAYS = 7
ROLLING_MIN_SAMPLES = 2
TREND_MIN_POINTS = 3

# --- Trend thresholds (per week) ---
HR_SLOPE_THRESHOLD = 0.3        # bpm/week
PACE_SLOPE_THRESHOLD = 1.0      # seconds/week
EF_SLOPE_THRESHOLD = 0.01

TREND_IMPROVING = 'improving'
TREND_PLATEAU = 'plateau'
TREND_REGRESSING = 'regressing'
TREND_INSUFFICIENT = 'insufficient'

TREND_ARROWS: Dict[str, str] = {
    TREND_IMPROVING: '↓',
    TREND_PLATEAU: '→',
    TREND_REGRESSING: '↑',
    TREND_INSUFFICIENT: '-',
}

TREND_LABELS: Dict[str, Dict[str, str]] = {
    'hr': {TREND_IMPROVING: 'HR dropping', TREND_PLATEAU: 'Stable', TREND_REGRESSING: 'HR rising'},
    'pace': {TREND_IMPROVING: 'Getting faster', TREND_PLATEAU: 'Stable', TREND_REGRESSING: 'Slowing'},
    'ef': {TREND_IMPROVING: 'Improving', TREND_PLATEAU: 'Stable', TREND_REGRESSING: 'Declining'},
}

# --- Advisory thresholds ---
CONSISTENCY_GAP_DAYS = 3
NO_RUN_DAYS = 999
HR_DEVIATION_LIMIT = 5
ZONE_DISCIPLINE_MIN_PCT = 60
CADENCE_TARGET = 170
WEEKLY_RUNS_TARGET = 3
DECOUPLING_LIMIT = 5
LONG_RUN_EXTENSION_MIN = 10
DEFAULT_LONG_RUN_MIN = 50

FOCUS_CONSISTENCY = 'Consistency'
FOCUS_HR_CONTROL = 'HR Control'
FOCUS_ZONE_DISCIPLINE = 'Zone Discipline'
FOCUS_RECOVERY = 'Recovery'
FOCUS_CADENCE = 'Cadence'
FOCUS_VOLUME = 'Volume'
FOCUS_DURATION = 'Duration'
