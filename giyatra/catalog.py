"""
Client for the GI location catalog REST API.

The catalog returns location records whose field names vary between
endpoints and versions (``district`` or ``district_name``, ``image`` or
``image_url``, coordinates as numbers or strings). ``normalize_location``
maps all of them onto the canonical ``Waypoint`` fields, and records
that cannot be used for scheduling are dropped with a log message.

Example usage:

    client = CatalogClient()
    waypoints = client.fetch_selected_waypoints([3, 7, 12])
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from giyatra import config
from giyatra.errors import CatalogError
from giyatra.models import Coordinate, Waypoint

logger = logging.getLogger(__name__)

LOCATIONS_PATH = "/api/gi-locations/"
DISTRICTS_PATH = "/api/gi-locations/districts/"


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def normalize_location(raw: Dict[str, Any]) -> Optional[Waypoint]:
    """Convert a raw catalog record into a ``Waypoint``.

    Returns ``None`` when the record has no id, no name or no usable
    coordinates.
    """
    location_id = raw.get("id")
    name = _first(raw, "name", "title")
    if location_id is None or not name:
        logger.warning("Skipping catalog record without id or name: %r", raw)
        return None
    try:
        lat = float(_first(raw, "latitude", "lat"))
        lon = float(_first(raw, "longitude", "lng", "lon"))
    except (TypeError, ValueError):
        logger.warning("Skipping %s: missing or non numeric coordinates", name)
        return None
    if not Coordinate(lat, lon).is_valid():
        logger.warning("Skipping %s: coordinates out of range (%s, %s)", name, lat, lon)
        return None

    district = _first(raw, "district", "district_name")
    if isinstance(district, dict):
        district = district.get("name")
    duration = _to_int(raw.get("typical_visit_duration"))
    return Waypoint(
        id=location_id,
        name=str(name),
        latitude=lat,
        longitude=lon,
        typical_visit_duration=duration if duration and duration > 0 else None,
        district=district,
        category=_first(raw, "category", "category_name"),
        image_url=_first(raw, "image_url", "image"),
        priority=_to_int(raw.get("priority")),
    )


def normalize_locations(records: Iterable[Dict[str, Any]]) -> List[Waypoint]:
    """Normalise many records, dropping the unusable ones."""
    waypoints = []
    for raw in records:
        waypoint = normalize_location(raw)
        if waypoint is not None:
            waypoints.append(waypoint)
    return waypoints


def sort_by_priority(waypoints: Sequence[Waypoint]) -> List[Waypoint]:
    """Stable sort by priority; locations without one keep their place at the front."""
    return sorted(waypoints, key=lambda w: w.priority or 0)


class CatalogClient:
    """Thin ``requests`` wrapper around the location catalog endpoints."""

    def __init__(self, base_url: str = None, timeout: float = None, session: requests.Session = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout or config.API_TIMEOUT
        self.session = session or requests.Session()

    def _get(self, path: str, params: Dict[str, Any] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params or {}, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            logger.error("Catalog request to %s failed: %s", url, exc)
            raise CatalogError(f"Catalog request failed: {exc}") from exc
        except ValueError as exc:
            logger.error("Catalog returned invalid JSON from %s", url)
            raise CatalogError("Catalog returned invalid JSON") from exc

    def list_locations(self, **params: Any) -> List[Dict[str, Any]]:
        """Raw location records; accepts plain lists and paginated payloads."""
        data = self._get(LOCATIONS_PATH, params)
        if isinstance(data, dict):
            data = data.get("results", data.get("locations"))
        if not isinstance(data, list):
            raise CatalogError("Unexpected catalog payload for locations")
        return data

    def list_districts(self) -> List[str]:
        data = self._get(DISTRICTS_PATH)
        if isinstance(data, dict):
            return data.get("districts") or []
        return data or []

    def fetch_waypoints(self, **params: Any) -> List[Waypoint]:
        return normalize_locations(self.list_locations(**params))

    def fetch_selected_waypoints(self, ids: Sequence[Any]) -> List[Waypoint]:
        """Waypoints for ``ids`` in the given order; unknown ids are logged and skipped."""
        by_id = {str(w.id): w for w in self.fetch_waypoints()}
        selected = []
        for location_id in ids:
            waypoint = by_id.get(str(location_id))
            if waypoint is None:
                logger.warning("Selected location %s not found in catalog", location_id)
                continue
            selected.append(waypoint)
        return selected
