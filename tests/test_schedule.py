import unittest
from datetime import time

from giyatra.errors import InvalidConfiguration
from giyatra.models import BreakItem, TravelItem, TravelLeg, VisitItem, Waypoint
from giyatra.schedule import clock_minutes, format_clock, pack_day, parse_time_string


def candidate(name, leg_minutes, visit_minutes, origin="Start", warning=None):
    waypoint = Waypoint(id=name, name=name, latitude=0.0, longitude=0.0,
                        typical_visit_duration=visit_minutes)
    leg = TravelLeg(origin_id=None, origin_name=origin, destination_id=name, destination_name=name,
                    distance_km=1.5, duration_minutes=leg_minutes, warning=warning)
    return waypoint, leg


def assert_contiguous(test, items):
    for before, after in zip(items, items[1:]):
        test.assertEqual(before.end_time, after.start_time)


class TestClockHelpers(unittest.TestCase):
    def test_parse_time_string(self):
        self.assertEqual(parse_time_string("09:30"), time(9, 30))
        with self.assertRaises(InvalidConfiguration):
            parse_time_string("9h30")

    def test_clock_round_trip(self):
        self.assertEqual(clock_minutes("18:00"), 1080)
        self.assertEqual(clock_minutes(time(7, 5)), 425)
        self.assertEqual(format_clock(425), "07:05")


class TestPackDay(unittest.TestCase):
    def test_packs_until_slack_guard(self):
        candidates = [
            candidate("A", 10, 60),
            candidate("B", 30, 60, origin="A"),
            candidate("C", 20, 30, origin="B"),
        ]
        result = pack_day("09:00", "12:00", candidates)
        self.assertEqual(result.consumed, 2)
        # 15 minutes left after B is under the slack threshold: stop quietly
        self.assertEqual(result.warnings, [])
        spans = [(type(i).__name__, i.start_time, i.end_time) for i in result.items]
        self.assertEqual(spans, [
            ("TravelItem", "09:00", "09:15"),
            ("VisitItem", "09:15", "10:15"),
            ("TravelItem", "10:15", "10:45"),
            ("VisitItem", "10:45", "11:45"),
        ])
        self.assertEqual(result.items[0].duration_minutes, 15)  # floored from 10
        self.assertEqual(result.items[2].from_name, "A")
        self.assertEqual(result.summary.travel_time, 45)
        self.assertEqual(result.summary.visit_time, 120)
        self.assertEqual(result.summary.total_time, 165)
        self.assertEqual(result.summary.locations_visited, 2)

    def test_candidate_that_does_not_fit_ends_day(self):
        candidates = [candidate("A", 10, 60), candidate("B", 30, 100), candidate("C", 15, 15)]
        result = pack_day("09:00", "12:00", candidates, day_number=3)
        self.assertEqual(result.consumed, 1)
        self.assertEqual(result.warnings, ["Day 3: Not enough time for B (needs 2h 10m, have 1h 45m)"])
        # C would fit but placement never skips ahead
        self.assertEqual([i.location.name for i in result.items if isinstance(i, VisitItem)], ["A"])

    def test_first_candidate_too_long_gives_empty_day(self):
        result = pack_day("09:00", "10:30", [candidate("A", 20, 120)])
        self.assertEqual(result.items, [])
        self.assertEqual(result.consumed, 0)
        self.assertEqual(result.summary.total_time, 0)
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("Not enough time for A", result.warnings[0])

    def test_resumes_from_start_index(self):
        candidates = [candidate("A", 15, 60), candidate("B", 15, 60, origin="A")]
        result = pack_day("09:00", "18:00", candidates, start_index=1)
        self.assertEqual(result.consumed, 1)
        self.assertEqual(result.items[0].from_name, "A")
        self.assertEqual(result.items[1].location.name, "B")

    def test_default_visit_duration(self):
        result = pack_day("09:00", "18:00", [candidate("A", 15, None)])
        self.assertEqual(result.items[1].duration_minutes, 120)

    def test_breaks_between_visits(self):
        candidates = [candidate("A", 10, 60), candidate("B", 30, 60, origin="A")]
        result = pack_day("09:00", "13:00", candidates, break_minutes=15)
        self.assertEqual(result.consumed, 2)
        kinds = [type(i) for i in result.items]
        self.assertEqual(kinds, [TravelItem, VisitItem, BreakItem, TravelItem, VisitItem])
        assert_contiguous(self, result.items)
        summary = result.summary
        self.assertEqual(summary.break_time, 15)
        self.assertEqual(summary.total_time, summary.travel_time + summary.visit_time + summary.break_time)

    def test_leg_warning_reported_for_placed_location(self):
        candidates = [candidate("A", 15, 60, warning="Road travel time unavailable for A")]
        result = pack_day("09:00", "18:00", candidates, day_number=2)
        self.assertEqual(result.warnings, ["Day 2: Road travel time unavailable for A"])

    def test_contiguity_and_conservation(self):
        candidates = [candidate(str(i), 5 * i, 30 + i) for i in range(1, 8)]
        result = pack_day("08:00", "20:00", candidates)
        assert_contiguous(self, result.items)
        summary = result.summary
        self.assertEqual(summary.total_time, summary.travel_time + summary.visit_time)

    def test_end_before_start_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            pack_day("18:00", "09:00", [candidate("A", 15, 60)])


if __name__ == "__main__":
    unittest.main()
