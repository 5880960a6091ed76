import unittest
from datetime import datetime, timedelta, timezone

from maf_machine.models import AnalyzedActivity
from maf_machine.trends import compute_trends

BASE = datetime(2026, 1, 1, 7, 0, tzinfo=timezone.utc)


def _iso(ts):
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def _activity(activity_id, when, hr=145.0, pace=9.5, ef=1.2, cadence=None, decoupling=None,
              excluded=False, qualifying=True):
    if not isinstance(when, datetime):
        when = BASE + timedelta(days=when)
    return AnalyzedActivity(
        id=activity_id,
        date=_iso(when),
        name=f"Run {activity_id}",
        duration_seconds=2400,
        distance_meters=7000,
        avg_hr=hr,
        avg_cadence=170,
        avg_pace=pace,
        time_in_maf_zone_pct=80.0,
        time_in_qualifying_zone_pct=90.0,
        maf_pace=pace,
        elevation_gain=20,
        cardiac_drift=None,
        aerobic_decoupling=decoupling,
        cadence_in_zone=cadence,
        efficiency_factor=ef,
        qualifying=qualifying,
        excluded=excluded,
    )


class TrendBuilderTests(unittest.TestCase):
    def test_empty_input(self):
        self.assertEqual(compute_trends([]), [])

    def test_rolling_window_drops_runs_older_than_four_weeks(self):
        trends = compute_trends([
            _activity(1, 0, hr=150),
            _activity(2, 10, hr=140),
            _activity(3, 35, hr=130),
        ])
        self.assertEqual(len(trends), 3)
        self.assertIsNone(trends[0].rolling_hr)
        self.assertAlmostEqual(trends[1].rolling_hr, 145.0)
        self.assertAlmostEqual(trends[2].rolling_hr, 135.0)
        self.assertEqual(trends[2].avg_hr, 130)

    def test_window_boundary_is_inclusive(self):
        trends = compute_trends([_activity(1, 0, hr=150), _activity(2, 28, hr=140)])
        self.assertAlmostEqual(trends[1].rolling_hr, 145.0)

        trends = compute_trends([
            _activity(1, 0, hr=150),
            _activity(2, BASE + timedelta(days=28, seconds=1), hr=140),
        ])
        self.assertIsNone(trends[1].rolling_hr)

    def test_window_uses_full_timestamp_not_calendar_day(self):
        early = datetime(2026, 1, 1, 6, 0, tzinfo=timezone.utc)
        late = datetime(2026, 1, 29, 8, 0, tzinfo=timezone.utc)
        trends = compute_trends([_activity(1, early), _activity(2, late)])
        self.assertIsNone(trends[1].rolling_hr)

        noon = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        trends = compute_trends([_activity(1, noon), _activity(2, late)])
        self.assertIsNotNone(trends[1].rolling_hr)

    def test_sorted_ascending_and_excluded_runs_ignored(self):
        trends = compute_trends([
            _activity(3, 20, hr=130),
            _activity(1, 0, hr=150),
            _activity(2, 10, hr=100, excluded=True),
        ])
        self.assertEqual([t.avg_hr for t in trends], [150, 130])
        self.assertAlmostEqual(trends[1].rolling_hr, 140.0)

    def test_rolling_pace_and_ef(self):
        trends = compute_trends([
            _activity(1, 0, pace=10.0, ef=1.0),
            _activity(2, 7, pace=9.0, ef=1.2),
        ])
        self.assertIsNone(trends[0].rolling_maf_pace)
        self.assertIsNone(trends[0].rolling_ef)
        self.assertAlmostEqual(trends[1].rolling_maf_pace, 9.5)
        self.assertAlmostEqual(trends[1].rolling_ef, 1.1)

    def test_cadence_and_decoupling_need_two_present_values(self):
        trends = compute_trends([
            _activity(1, 0, cadence=170.0, decoupling=4.0),
            _activity(2, 3, cadence=None, decoupling=None),
            _activity(3, 6, cadence=180.0, decoupling=None),
        ])
        self.assertIsNone(trends[1].rolling_cadence)
        self.assertIsNone(trends[1].rolling_decoupling)
        self.assertIsNotNone(trends[1].rolling_hr)
        self.assertAlmostEqual(trends[2].rolling_cadence, 175.0)
        self.assertIsNone(trends[2].rolling_decoupling)
        self.assertIsNone(trends[1].cadence)

    def test_serialized_shape(self):
        point = compute_trends([_activity(1, 0, cadence=172.0)])[0].to_dict()
        self.assertEqual(
            set(point),
            {
                "date", "avgHr", "rollingHr", "mafPace", "rollingMafPace", "ef", "rollingEf",
                "cadence", "rollingCadence", "decoupling", "rollingDecoupling",
                "timeInZonePct", "qualifying",
            },
        )
        self.assertEqual(point["cadence"], 172.0)
        self.assertIsNone(point["rollingCadence"])
        self.assertEqual(point["timeInZonePct"], 80.0)
        self.assertTrue(point["qualifying"])


if __name__ == "__main__":
    unittest.main()
