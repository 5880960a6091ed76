import unittest

from maf_machine.units import (
    format_ef,
    format_pace,
    format_pace_or_placeholder,
    round_half_up,
    velocity_to_pace,
)


class PaceConversionTests(unittest.TestCase):
    def test_velocity_to_pace_metric(self):
        self.assertAlmostEqual(velocity_to_pace(3.0, "km"), 1000 / 3.0 / 60)
        self.assertAlmostEqual(velocity_to_pace(3.0, "km"), 5.5556, places=4)

    def test_velocity_to_pace_imperial(self):
        self.assertAlmostEqual(velocity_to_pace(3.0, "mi"), 1609.344 / 3.0 / 60)

    def test_non_positive_velocity(self):
        self.assertEqual(velocity_to_pace(0, "km"), 0)
        self.assertEqual(velocity_to_pace(-2.5, "mi"), 0)
        self.assertEqual(velocity_to_pace(None, "mi"), 0)

    def test_format_pace(self):
        self.assertEqual(format_pace(velocity_to_pace(3.0, "km"), "km"), "5:33 /km")
        self.assertEqual(format_pace(velocity_to_pace(3.0, "mi"), "mi"), "8:56 /mi")
        self.assertEqual(format_pace(8.0, "mi"), "8:00 /mi")
        self.assertEqual(format_pace(7.5, "km"), "7:30 /km")

    def test_format_pace_does_not_carry_sixty_seconds(self):
        self.assertEqual(format_pace(5.995, "km"), "5:60 /km")

    def test_placeholder_for_missing_pace(self):
        self.assertEqual(format_pace_or_placeholder(0, "km"), "--:--")
        self.assertEqual(format_pace_or_placeholder(None, "km"), "--:--")
        self.assertEqual(format_pace_or_placeholder(6.0, "km"), "6:00 /km")

    def test_format_ef(self):
        self.assertEqual(format_ef(1.2), "1.20")
        self.assertEqual(format_ef(1.234), "1.23")
        self.assertEqual(format_ef(0), "0.00")

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(2.49), 2)


if __name__ == "__main__":
    unittest.main()
