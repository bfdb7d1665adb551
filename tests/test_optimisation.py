import random
import unittest
from unittest import mock

from giyatra.models import Coordinate, Waypoint
from giyatra.optimisation import nearest_neighbor, sequence
from giyatra.routing import haversine_distance

ORIGIN = Coordinate(0.0, 0.0)


def wp(wid, lat, lon, minutes=60):
    return Waypoint(id=wid, name=f"W{wid}", latitude=lat, longitude=lon, typical_visit_duration=minutes)


class TestNearestNeighbor(unittest.TestCase):
    def test_nearest_neighbor(self):
        dist = [
            [0, 2, 9, 10],
            [1, 0, 6, 4],
            [15, 7, 0, 8],
            [6, 3, 12, 0],
        ]
        route = nearest_neighbor(dist, start=0)
        # Starting at 0, nearest is 1, then 3, then 2
        self.assertEqual(route, [0, 1, 3, 2])

    def test_ties_follow_input_order(self):
        dist = [
            [0, 5, 5, 5],
            [5, 0, 1, 1],
            [5, 1, 0, 1],
            [5, 1, 1, 0],
        ]
        self.assertEqual(nearest_neighbor(dist, start=0), [0, 1, 2, 3])

    def test_stationary_index_does_not_move_position(self):
        dist = [
            [0, 1, 3, 9],
            [0, 0, 5, 0],
            [3, 0, 0, 1],
            [9, 0, 1, 0],
        ]
        # 1 is picked first but the search continues from 0
        self.assertEqual(nearest_neighbor(dist, start=0, stationary={1}), [0, 1, 2, 3])

    def test_empty(self):
        self.assertEqual(nearest_neighbor([]), [])


class TestSequence(unittest.TestCase):
    def test_empty_waypoints(self):
        self.assertEqual(sequence(ORIGIN, []), ([], []))

    def test_single_waypoint_leg_from_origin(self):
        order, legs = sequence(ORIGIN, [wp(1, 0.0, 0.1)], origin_name="Home")
        self.assertEqual([w.id for w in order], [1])
        self.assertEqual(len(legs), 1)
        self.assertEqual(legs[0].origin_name, "Home")
        self.assertIsNone(legs[0].origin_id)
        self.assertAlmostEqual(legs[0].distance_km, 11.12, places=2)
        self.assertEqual(legs[0].duration_minutes, 17)
        self.assertEqual(legs[0].source, "estimate")

    def test_orders_by_distance_and_chains_legs(self):
        far, near, mid = wp(1, 0.0, 0.3), wp(2, 0.0, 0.1), wp(3, 0.0, 0.2)
        order, legs = sequence(ORIGIN, [far, near, mid])
        self.assertEqual([w.id for w in order], [2, 3, 1])
        self.assertEqual([leg.origin_name for leg in legs], ["Starting Point", "W2", "W3"])
        self.assertEqual([leg.destination_id for leg in legs], [2, 3, 1])

    def test_completeness_and_greedy_choice(self):
        rng = random.Random(7)
        waypoints = [wp(i, 12 + rng.random(), 76 + rng.random()) for i in range(12)]
        origin = Coordinate(12.5, 76.5)
        order, legs = sequence(origin, waypoints)

        self.assertEqual(len(order), len(waypoints))
        self.assertEqual(len(legs), len(waypoints))
        self.assertEqual(sorted(w.id for w in order), sorted(w.id for w in waypoints))

        current = tuple(origin)
        remaining = list(waypoints)
        for chosen in order:
            chosen_dist = haversine_distance(current, tuple(chosen.coordinate))
            for other in remaining:
                self.assertLessEqual(chosen_dist, haversine_distance(current, tuple(other.coordinate)))
            remaining.remove(chosen)
            current = tuple(chosen.coordinate)

    def test_invalid_coordinates_flagged(self):
        bad = wp(9, float("nan"), 0.0)
        good = wp(1, 0.0, 0.1)
        order, legs = sequence(ORIGIN, [good, bad])
        self.assertEqual(len(order), 2)
        bad_leg = legs[[w.id for w in order].index(9)]
        self.assertEqual(bad_leg.distance_km, 0.0)
        self.assertEqual(bad_leg.duration_minutes, 0)
        self.assertIn("invalid coordinates", bad_leg.warning)

    @mock.patch("giyatra.optimisation.road_leg_minutes")
    def test_road_times_replace_estimates(self, mock_road):
        mock_road.return_value = [25, 40]
        order, legs = sequence(ORIGIN, [wp(1, 0.0, 0.1), wp(2, 0.0, 0.2)], use_road_times=True)
        self.assertEqual([leg.duration_minutes for leg in legs], [25, 40])
        self.assertTrue(all(leg.source == "road" for leg in legs))
        self.assertTrue(all(leg.warning is None for leg in legs))
        # order is still decided by straight-line distance
        self.assertEqual([w.id for w in order], [1, 2])

    @mock.patch("giyatra.optimisation.road_leg_minutes")
    def test_road_time_failure_falls_back(self, mock_road):
        mock_road.return_value = None
        _, legs = sequence(ORIGIN, [wp(1, 0.0, 0.1)], use_road_times=True)
        self.assertEqual(legs[0].duration_minutes, 17)
        self.assertEqual(legs[0].source, "estimate")
        self.assertIn("straight-line estimate", legs[0].warning)


if __name__ == "__main__":
    unittest.main()
