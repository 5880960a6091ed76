import unittest
from datetime import datetime, timezone

from maf_machine.maf_zones import (
    ZONE_BELOW,
    ZONE_IN,
    ZONE_OUTSIDE,
    ZONE_QUALIFYING,
    classify_hr_band,
    compute_maf_hr,
    get_zone_bounds,
    in_zone,
)
from maf_machine.settings import AthleteSettings


class MAFZoneTests(unittest.TestCase):
    def test_compute_maf_hr(self):
        self.assertEqual(compute_maf_hr(50, -5), 125)
        self.assertEqual(compute_maf_hr(40, 0), 140)
        self.assertEqual(compute_maf_hr(30, 5), 155)

    def test_missing_age_uses_default(self):
        self.assertEqual(compute_maf_hr(None, 0), 130)
        self.assertEqual(compute_maf_hr(0, 0), 130)

    def test_unknown_modifier(self):
        with self.assertRaises(ValueError):
            compute_maf_hr(40, 3)

    def test_zone_bounds_and_membership(self):
        low, high = get_zone_bounds(140)
        self.assertEqual((low, high), (135, 145))
        self.assertTrue(in_zone(135, low, high))
        self.assertTrue(in_zone(145, low, high))
        self.assertFalse(in_zone(145.5, low, high))

    def test_classify_hr_band(self):
        self.assertEqual(classify_hr_band(130, 135, 145, 155), ZONE_BELOW)
        self.assertEqual(classify_hr_band(140, 135, 145, 155), ZONE_IN)
        self.assertEqual(classify_hr_band(155, 135, 145, 155), ZONE_QUALIFYING)
        self.assertEqual(classify_hr_band(156, 135, 145, 155), ZONE_OUTSIDE)


class AthleteSettingsTests(unittest.TestCase):
    def test_defaults(self):
        settings = AthleteSettings()
        self.assertEqual(settings.maf_hr, 125)
        self.assertEqual((settings.maf_zone_low, settings.maf_zone_high), (120, 130))
        self.assertEqual(settings.qualifying_high, 140)
        self.assertEqual(settings.units, "mi")
        self.assertIsNone(settings.start_timestamp)

    def test_custom_values(self):
        settings = AthleteSettings(age=40, modifier=0, units="km", qualifying_tolerance=5)
        self.assertEqual(settings.maf_hr, 140)
        self.assertEqual(settings.qualifying_high, 150)

    def test_validation(self):
        for kwargs in (
            {"age": 5},
            {"age": 101},
            {"modifier": 2},
            {"units": "yards"},
            {"qualifying_tolerance": -1},
            {"start_date": "not a date"},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    AthleteSettings(**kwargs)

    def test_start_timestamp_is_utc(self):
        settings = AthleteSettings(start_date="2026-01-15")
        self.assertEqual(settings.start_timestamp, datetime(2026, 1, 15, tzinfo=timezone.utc))

    def test_from_dict_applies_defaults(self):
        settings = AthleteSettings.from_dict({"age": "38", "units": None})
        self.assertEqual(settings.age, 38)
        self.assertEqual(settings.modifier, -5)
        self.assertEqual(settings.units, "mi")
        self.assertEqual(AthleteSettings.from_dict(None), AthleteSettings())

    def test_from_dict_rejects_garbage(self):
        with self.assertRaises(ValueError):
            AthleteSettings.from_dict({"age": "old"})

    def test_to_dict(self):
        data = AthleteSettings(age=40, modifier=0).to_dict()
        self.assertTrue(data["configured"])
        self.assertEqual(data["maf_hr"], 140)
        self.assertEqual(data["maf_zone_low"], 135)
        self.assertEqual(data["maf_zone_high"], 145)
        self.assertEqual(AthleteSettings.from_dict(data), AthleteSettings(age=40, modifier=0))


if __name__ == "__main__":
    unittest.main()
