"""
Route ordering for GI Yatra.

This module orders the selected locations of a trip with the nearest
neighbour heuristic: starting from the trip's start location, always
travel next to the closest location not yet visited. The result is an
open path (no return leg to the start) together with one travel leg per
location.

    - ``nearest_neighbor``: visiting order over a distance matrix.
    - ``sequence``: order waypoints from an origin and build travel legs.

Nearest neighbour is a greedy approximation and is not globally
optimal. Ties are broken by input order so results are deterministic.
"""

from __future__ import annotations

import logging
import math
from typing import Collection, List, Optional, Sequence, Tuple

from giyatra import config
from giyatra.models import Coordinate, TravelLeg, Waypoint
from giyatra.routing import compute_haversine_matrix, estimate_duration_minutes, road_leg_minutes

logger = logging.getLogger(__name__)


def _as_distance(value: float) -> float:
    # non finite distances come from malformed coordinates
    return value if math.isfinite(value) else 0.0


def nearest_neighbor(
    dist_matrix: Sequence[Sequence[float]],
    start: int = 0,
    stationary: Collection[int] = (),
) -> List[int]:
    """Construct a route using the nearest neighbor heuristic.

    Args:
        dist_matrix: A square matrix of distances or travel times.
        start: Index of the start location in the matrix.
        stationary: Indices that are visited but never become the
            current position (locations without usable coordinates).

    Returns:
        A list of indices representing the visiting order, starting
        with ``start`` and including all other indices exactly once.
    """
    n = len(dist_matrix)
    if n == 0:
        return []
    unvisited = [i for i in range(n) if i != start]
    route = [start]
    current = start
    while unvisited:
        # min() keeps the first of equal candidates, i.e. input order
        next_city = min(unvisited, key=lambda j: _as_distance(dist_matrix[current][j]))
        route.append(next_city)
        unvisited.remove(next_city)
        if next_city not in stationary:
            current = next_city
    return route


def sequence(
    origin: Coordinate,
    waypoints: Sequence[Waypoint],
    origin_name: str = "Starting Point",
    speed_kmh: float = None,
    use_road_times: bool = False,
) -> Tuple[List[Waypoint], List[TravelLeg]]:
    """Order waypoints from ``origin`` and estimate each incoming leg.

    Args:
        origin: Start coordinate of the trip.
        waypoints: Locations to visit, in caller priority order.
        origin_name: Label of the start location used on the first leg.
        speed_kmh: Average speed for duration estimates.
        use_road_times: Replace estimated durations with one batched
            OSRM lookup once the order is fixed.

    Returns:
        ``(order, legs)`` where ``legs[i]`` leads into ``order[i]``.
    """
    if not waypoints:
        return [], []

    coords = [tuple(origin)] + [tuple(w.coordinate) for w in waypoints]
    stationary = {i + 1 for i, w in enumerate(waypoints) if not w.coordinate.is_valid()}
    if not Coordinate(*origin).is_valid():
        logger.warning("Start location %s has invalid coordinates %s", origin_name, origin)
    dist_matrix = compute_haversine_matrix(coords)
    route = nearest_neighbor(dist_matrix, start=0, stationary=stationary)

    order: List[Waypoint] = []
    legs: List[TravelLeg] = []
    current = 0
    for idx in route[1:]:
        waypoint = waypoints[idx - 1]
        previous = waypoints[current - 1] if current else None
        leg = TravelLeg(
            origin_id=previous.id if previous else None,
            origin_name=previous.name if previous else origin_name,
            destination_id=waypoint.id,
            destination_name=waypoint.name,
            distance_km=0.0,
            duration_minutes=0,
        )
        if idx in stationary:
            leg.warning = f"{waypoint.name} has invalid coordinates; travel time not estimated"
            logger.warning(leg.warning)
        else:
            distance = _as_distance(dist_matrix[current][idx])
            leg.distance_km = round(distance, 2)
            leg.duration_minutes = estimate_duration_minutes(distance, speed_kmh)
            current = idx
        order.append(waypoint)
        legs.append(leg)

    if use_road_times:
        _apply_road_times(origin, order, legs)
    return order, legs


def _apply_road_times(origin: Coordinate, order: Sequence[Waypoint], legs: List[TravelLeg]) -> None:
    """Overwrite leg durations with OSRM road times, keeping estimates on failure."""
    routable = [i for i, leg in enumerate(legs) if leg.warning is None]
    if not routable:
        return
    path = [tuple(origin)] + [tuple(order[i].coordinate) for i in routable]
    minutes: Optional[List[int]] = road_leg_minutes(path, timeout=config.OSRM_TIMEOUT)
    if minutes is None:
        for i in routable:
            legs[i].warning = (
                f"Road travel time unavailable for {legs[i].destination_name}; "
                "using straight-line estimate"
            )
        logger.warning("Falling back to straight-line travel estimates for %d legs", len(routable))
        return
    for i, leg_minutes in zip(routable, minutes):
        legs[i].duration_minutes = leg_minutes
        legs[i].source = "road"
