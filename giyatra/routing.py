"""
Routing utilities for GI Yatra.

This module estimates how far apart two locations are and how long it
takes to drive between them. Distances use the Haversine formula and
durations assume one constant average speed (``config.AVERAGE_SPEED_KMH``,
40 km/h by default, which allows for local roads and traffic).

Optionally the OSRM table service can supply road travel times for a
batch of coordinates. Any network or payload failure makes the lookup
return ``None`` so the caller can fall back to the Haversine estimate.

Example usage:

    bangalore = (12.9716, 77.5946)
    mysore = (12.2958, 76.6394)
    km = haversine_distance(bangalore, mysore)
    minutes = estimate_duration_minutes(km)
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import requests

from giyatra import config

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_distance(coord1: Tuple[float, float], coord2: Tuple[float, float]) -> float:
    """Compute the great‑circle distance between two coordinates in kilometers."""
    lat1, lon1 = coord1
    lat2, lon2 = coord2
    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def estimate_duration_minutes(distance_km: float, speed_kmh: float = None) -> int:
    """Convert a distance into whole minutes of travel at a constant speed.

    The result is rounded up and never negative. No minimum travel time
    is applied here; the day packer floors short legs itself. A non
    finite distance raises ``ValueError``.
    """
    speed = config.AVERAGE_SPEED_KMH if speed_kmh is None else speed_kmh
    if speed <= 0:
        raise ValueError("speed_kmh must be positive")
    if not math.isfinite(distance_km):
        raise ValueError(f"distance_km must be finite, got {distance_km!r}")
    minutes = math.ceil(distance_km / speed * 60)
    return max(0, int(minutes))


def compute_osrm_table(
    coords: Sequence[Tuple[float, float]],
    profile: str = None,
    timeout: float = None,
) -> Optional[Tuple[List[List[float]], List[List[float]]]]:
    """Call OSRM table service to compute distance and duration matrices.

    Args:
        coords: List of (lat, lon) tuples.
        profile: OSRM profile, ``config.OSRM_PROFILE`` when omitted.
        timeout: Request timeout in seconds, ``config.OSRM_TIMEOUT`` when omitted.

    Returns:
        A tuple (distance_matrix_km, duration_matrix_s) if successful, otherwise ``None``.
    """
    if not coords:
        return None
    profile = profile or config.OSRM_PROFILE
    timeout = timeout or config.OSRM_TIMEOUT
    # OSRM expects lon,lat order and semicolon separated list
    locs = ";".join(f"{lon},{lat}" for lat, lon in coords)
    url = f"{config.OSRM_URL}/table/v1/{profile}/{locs}"
    try:
        resp = requests.get(url, params={"annotations": "distance,duration"}, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("OSRM table request failed: %s", exc)
        return None
    if data.get("code") not in (None, "Ok"):
        logger.warning("OSRM table returned %s: %s", data.get("code"), data.get("message"))
        return None
    distances = data.get("distances")
    durations = data.get("durations")
    if not durations or len(durations) != len(coords):
        logger.warning("OSRM table response is missing durations")
        return None
    if not distances:
        distances = [[float("inf")] * len(coords) for _ in coords]
    # OSRM returns distances in meters and durations in seconds
    dist_matrix = [[d / 1000.0 if d is not None else float("inf") for d in row] for row in distances]
    dur_matrix = [[t if t is not None else float("inf") for t in row] for row in durations]
    return dist_matrix, dur_matrix


def compute_haversine_matrix(coords: Sequence[Tuple[float, float]]) -> List[List[float]]:
    """Compute a square matrix of Haversine distances in kilometers."""
    n = len(coords)
    dist_matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            dist_matrix[i][j] = haversine_distance(coords[i], coords[j])
    return dist_matrix


def road_leg_minutes(
    coords: Sequence[Tuple[float, float]],
    profile: str = None,
    timeout: float = None,
) -> Optional[List[int]]:
    """Road travel minutes for each consecutive pair along ``coords``.

    A single OSRM table request covers the whole path. Returns ``None``
    when the lookup fails or any leg is unroutable.
    """
    if len(coords) < 2:
        return []
    matrices = compute_osrm_table(coords, profile=profile, timeout=timeout)
    if matrices is None:
        return None
    _, dur_matrix = matrices
    minutes = []
    for i in range(len(coords) - 1):
        seconds = dur_matrix[i][i + 1]
        if not math.isfinite(seconds):
            logger.warning("OSRM could not route leg %d of %d", i + 1, len(coords) - 1)
            return None
        minutes.append(int(math.ceil(seconds / 60.0)))
    return minutes
