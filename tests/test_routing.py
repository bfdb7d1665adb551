import math
import unittest
from unittest import mock

import requests

from giyatra.routing import (
    compute_haversine_matrix,
    compute_osrm_table,
    estimate_duration_minutes,
    haversine_distance,
    road_leg_minutes,
)

BANGALORE = (12.9716, 77.5946)
MYSORE = (12.2958, 76.6394)


class TestHaversine(unittest.TestCase):
    def test_haversine_distance(self):
        # Bangalore to Mysore is roughly 128 km in a straight line
        dist = haversine_distance(BANGALORE, MYSORE)
        self.assertAlmostEqual(dist, 128, delta=3)

    def test_symmetric_and_zero(self):
        self.assertEqual(haversine_distance(BANGALORE, MYSORE), haversine_distance(MYSORE, BANGALORE))
        self.assertEqual(haversine_distance(MYSORE, MYSORE), 0.0)

    def test_nan_propagates(self):
        self.assertTrue(math.isnan(haversine_distance((float("nan"), 0.0), (0.0, 0.0))))

    def test_haversine_matrix(self):
        coords = [(0, 0), (0, 1), (1, 0)]
        dist_matrix = compute_haversine_matrix(coords)
        # Distance from (0,0) to (0,1) ~111 km
        self.assertAlmostEqual(dist_matrix[0][1], 111, delta=2)
        self.assertEqual(dist_matrix[1][1], 0.0)
        self.assertEqual(dist_matrix[0][2], dist_matrix[2][0])


class TestDurationEstimate(unittest.TestCase):
    def test_rounds_up_at_forty_kmh(self):
        # 11.12 km at 40 km/h is 16.7 minutes
        self.assertEqual(estimate_duration_minutes(11.1195), 17)
        self.assertEqual(estimate_duration_minutes(40.0), 60)

    def test_no_minimum_clamp(self):
        self.assertEqual(estimate_duration_minutes(0.0), 0)
        self.assertEqual(estimate_duration_minutes(1.0), 2)

    def test_speed_override(self):
        self.assertEqual(estimate_duration_minutes(50.0, speed_kmh=50), 60)

    def test_rejects_non_positive_speed(self):
        with self.assertRaises(ValueError):
            estimate_duration_minutes(10.0, speed_kmh=-5)

    def test_rejects_zero_speed(self):
        with self.assertRaises(ValueError):
            estimate_duration_minutes(10.0, speed_kmh=0)

    def test_rejects_non_finite_distance(self):
        with self.assertRaises(ValueError):
            estimate_duration_minutes(float("nan"))
        with self.assertRaises(ValueError):
            estimate_duration_minutes(math.inf)


class TestOsrm(unittest.TestCase):
    def _response(self, payload):
        resp = mock.MagicMock()
        resp.json.return_value = payload
        return resp

    @mock.patch("giyatra.routing.requests.get")
    def test_table_converts_units(self, mock_get):
        mock_get.return_value = self._response({
            "code": "Ok",
            "distances": [[0, 2500], [2600, 0]],
            "durations": [[0, 600], [620, None]],
        })
        dist, dur = compute_osrm_table([BANGALORE, MYSORE], timeout=5)
        self.assertAlmostEqual(dist[0][1], 2.5)
        self.assertEqual(dur[1][0], 620)
        self.assertEqual(dur[1][1], float("inf"))
        url = mock_get.call_args[0][0]
        # OSRM wants lon,lat pairs
        self.assertIn("77.5946,12.9716;76.6394,12.2958", url)
        self.assertEqual(mock_get.call_args[1]["timeout"], 5)

    @mock.patch("giyatra.routing.requests.get")
    def test_table_failure_returns_none(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        self.assertIsNone(compute_osrm_table([BANGALORE, MYSORE]))

    @mock.patch("giyatra.routing.requests.get")
    def test_table_error_code_returns_none(self, mock_get):
        mock_get.return_value = self._response({"code": "InvalidQuery", "message": "bad"})
        self.assertIsNone(compute_osrm_table([BANGALORE, MYSORE]))

    def test_table_empty_coords(self):
        self.assertIsNone(compute_osrm_table([]))

    @mock.patch("giyatra.routing.compute_osrm_table")
    def test_road_leg_minutes(self, mock_table):
        mock_table.return_value = (
            [[0, 1, 2], [1, 0, 1], [2, 1, 0]],
            [[0, 610, 0], [0, 0, 1200], [0, 0, 0]],
        )
        self.assertEqual(road_leg_minutes([(0, 0), (0, 1), (0, 2)]), [11, 20])

    @mock.patch("giyatra.routing.compute_osrm_table")
    def test_road_leg_minutes_unroutable(self, mock_table):
        mock_table.return_value = ([[0, 0], [0, 0]], [[0, float("inf")], [0, 0]])
        self.assertIsNone(road_leg_minutes([(0, 0), (0, 1)]))

    def test_road_leg_minutes_single_point(self):
        self.assertEqual(road_leg_minutes([(0, 0)]), [])


if __name__ == "__main__":
    unittest.main()
