import os
import tempfile
import unittest
from datetime import datetime, timezone

from maf_machine.data_manager import EXPORT_COLUMNS, MAFDataManager
from maf_machine.settings import AthleteSettings

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _payload(activity_id, start_date, hr, name=None, sport_type="Run"):
    return {
        "id": activity_id,
        "name": name or f"Morning Run {activity_id}",
        "start_date": start_date,
        "elapsed_time": 2400,
        "moving_time": 2350,
        "distance": 6000.0,
        "average_speed": 2.5,
        "average_heartrate": hr,
        "average_cadence": 85,
        "total_elevation_gain": 35.0,
        "sport_type": sport_type,
    }


PAYLOADS = [
    _payload(101, "2026-02-20T07:00:00Z", 125),
    _payload(102, "2026-02-25T07:00:00Z", 150),
    _payload(103, "2026-02-26T07:00:00Z", 125, sport_type="Ride"),
]


class MAFDataManagerTests(unittest.TestCase):
    def setUp(self):
        self.messages = []
        self.progress = []
        self.manager = MAFDataManager(AthleteSettings(units="km"))

    def _sync(self, payloads=PAYLOADS):
        return self.manager.sync(
            payloads,
            output_callback=self.messages.append,
            progress_callback=lambda done, total: self.progress.append((done, total)),
        )

    def test_sync_analyzes_runs_newest_first(self):
        activities = self._sync()
        self.assertEqual([a.id for a in activities], [102, 101])
        self.assertEqual(self.messages, ["Analyzed 2 run(s)"])
        self.assertEqual(self.progress, [(1, 2), (2, 2)])

        by_id = {a.id: a for a in activities}
        self.assertTrue(by_id[101].qualifying)
        self.assertEqual(by_id[101].time_in_maf_zone_pct, 75.0)
        self.assertFalse(by_id[102].qualifying)
        self.assertEqual(by_id[102].time_in_maf_zone_pct, 25.0)
        self.assertEqual(by_id[101].avg_cadence, 170)

    def test_merge_replaces_by_id(self):
        self._sync()
        activities = self._sync([_payload(101, "2026-02-20T07:00:00Z", 125, name="Renamed")])
        self.assertEqual(len(activities), 2)
        self.assertEqual({a.id: a.name for a in activities}[101], "Renamed")
        self.assertEqual(len(self.manager.df), 2)

    def test_initial_exclusions_apply_on_sync(self):
        manager = MAFDataManager(AthleteSettings(units="km"), excluded_ids=["101"])
        activities = manager.sync(PAYLOADS, output_callback=lambda _: None)
        excluded = {a.id: a for a in activities}[101]
        self.assertTrue(excluded.excluded)
        self.assertFalse(excluded.qualifying)

    def test_toggle_exclude_requalifies(self):
        self._sync()
        self.assertTrue(self.manager.toggle_exclude(101))
        activity = {a.id: a for a in self.manager.activities}[101]
        self.assertTrue(activity.excluded)
        self.assertFalse(activity.qualifying)
        self.assertEqual(self.manager.summary(now=NOW).total_runs, 1)
        self.assertEqual(len(self.manager.trends()), 1)

        self.assertFalse(self.manager.toggle_exclude(101))
        activity = {a.id: a for a in self.manager.activities}[101]
        self.assertFalse(activity.excluded)
        self.assertTrue(activity.qualifying)
        self.assertEqual(self.manager.summary(now=NOW).total_runs, 2)

    def test_payload_snapshot(self):
        self._sync()
        payload = self.manager.to_payload(now=NOW)
        self.assertEqual(set(payload), {"settings", "activities", "trends", "summary", "advice"})
        self.assertEqual(payload["settings"]["maf_hr"], 125)
        self.assertEqual(len(payload["activities"]), 2)
        self.assertEqual(len(payload["trends"]), 2)
        self.assertEqual(payload["summary"]["totalRuns"], 2)
        self.assertEqual(payload["summary"]["totalQualifyingRuns"], 1)
        self.assertEqual(payload["advice"]["headline"], "Time to Run!")
        self.assertIn("It's been 4 days", payload["advice"]["body"])

    def test_empty_manager(self):
        payload = self.manager.to_payload(now=NOW)
        self.assertIsNone(payload["advice"])
        self.assertEqual(payload["activities"], [])
        self.assertEqual(payload["summary"]["hrTrendDirection"], "insufficient")
        with self.assertRaises(ValueError):
            self.manager._generate_csv_content()

    def test_csv_content(self):
        self._sync()
        content = self.manager._generate_csv_content()
        lines = content.splitlines()
        self.assertEqual(lines[0], ",".join(EXPORT_COLUMNS))
        self.assertIn("6:40 /km", lines[1])
        self.assertIn("=== DATA DICTIONARY ===", content)

    def test_export_csv_writes_file(self):
        self._sync()
        with tempfile.TemporaryDirectory() as tmp_dir:
            target = os.path.join(tmp_dir, "exports")
            path = self.manager.export_csv(target)
            self.assertTrue(os.path.exists(path))
            self.assertTrue(os.path.basename(path).startswith("maf_analysis_"))
            self.assertTrue(path.endswith(".csv"))
            with open(path, encoding="utf-8") as f:
                self.assertEqual(f.read(), self.manager._generate_csv_content())

    def test_load_cached_skips_bad_records(self):
        self._sync()
        records = [a.to_dict() for a in self.manager.activities]

        restored = MAFDataManager(AthleteSettings(units="km"), excluded_ids=[102])
        with self.assertLogs("maf_machine.data_manager", "WARNING") as logs:
            activities = restored.load_cached(records + [{"name": "no id"}, {"id": 7, "date": "garbage"}])
        self.assertEqual(len(logs.output), 2)
        self.assertEqual([a.id for a in activities], [102, 101])
        self.assertTrue(activities[0].excluded)
        self.assertEqual(activities[1], self.manager.activities[1])


if __name__ == "__main__":
    unittest.main()
