"""
Trip persistence for GI Yatra.

``TripStore`` keeps trips, their selected locations and generated
schedules as JSON documents in a small key/value backend:

    giyatra_trips          – list of trip records
    giyatra_trip_counter   – last issued trip id

Two backends are provided: ``MemoryBackend`` for tests and short lived
sessions, and ``JsonFileBackend`` which writes every key to one JSON
file on disk. Anything with ``get``/``set``/``delete`` can be used.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from giyatra.errors import TripNotFound
from giyatra.models import Schedule, Waypoint

logger = logging.getLogger(__name__)

TRIPS_KEY = "giyatra_trips"
COUNTER_KEY = "giyatra_trip_counter"

TripId = Union[int, str]


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


class MemoryBackend:
    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend:
    """Key/value backend persisted as a single JSON object on disk."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as fh:
            return json.load(fh)

    def _dump(self, data: Dict[str, Any]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


class TripStore:
    """CRUD operations over stored trips and their schedules."""

    def __init__(self, backend=None) -> None:
        self.backend = backend if backend is not None else MemoryBackend()
        if self.backend.get(COUNTER_KEY) is None:
            self.backend.set(COUNTER_KEY, 0)

    # ── trips ────────────────────────────────────────────────────────────────

    def list_trips(self) -> List[Dict[str, Any]]:
        return list(self.backend.get(TRIPS_KEY) or [])

    def get_trip(self, trip_id: TripId) -> Optional[Dict[str, Any]]:
        for trip in self.list_trips():
            if trip["id"] == trip_id:
                return trip
        return None

    def _require_trip(self, trip_id: TripId) -> Dict[str, Any]:
        trip = self.get_trip(trip_id)
        if trip is None:
            raise TripNotFound(trip_id)
        return trip

    def save_trip(self, trip_data: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new trip under the next integer id."""
        trips = self.list_trips()
        counter = int(self.backend.get(COUNTER_KEY) or 0) + 1
        self.backend.set(COUNTER_KEY, counter)
        selected = trip_data.get("selectedLocations") or []
        trip = {
            **trip_data,
            "id": counter,
            "selected_locations_count": len(selected) or trip_data.get("selected_locations_count", 0),
            "created_at": _now(),
            "updated_at": _now(),
        }
        trips.append(trip)
        self.backend.set(TRIPS_KEY, trips)
        logger.info("Saved trip %s (%s)", counter, trip.get("title", ""))
        return trip

    def update_trip(self, trip_id: TripId, updated: Dict[str, Any]) -> Dict[str, Any]:
        trips = self.list_trips()
        for index, trip in enumerate(trips):
            if trip["id"] == trip_id:
                break
        else:
            raise TripNotFound(trip_id)
        merged = {**trip, **updated, "id": trip_id, "updated_at": _now()}
        selected = merged.get("selectedLocations") or []
        merged["selected_locations_count"] = len(selected) or merged.get("selected_locations_count", 0)
        trips[index] = merged
        self.backend.set(TRIPS_KEY, trips)
        logger.debug("Updated trip %s", trip_id)
        return merged

    def delete_trip(self, trip_id: TripId) -> bool:
        trips = self.list_trips()
        remaining = [trip for trip in trips if trip["id"] != trip_id]
        self.backend.set(TRIPS_KEY, remaining)
        logger.info("Deleted trip %s", trip_id)
        return len(remaining) != len(trips)

    def clear(self) -> None:
        self.backend.delete(TRIPS_KEY)
        self.backend.set(COUNTER_KEY, 0)

    # ── selected locations ───────────────────────────────────────────────────

    def add_location(self, trip_id: TripId, waypoint: Waypoint, priority: int = None) -> Dict[str, Any]:
        """Add a location once; priority defaults to the end of the list."""
        trip = self._require_trip(trip_id)
        selected = list(trip.get("selectedLocations") or [])
        if any(loc["id"] == waypoint.id for loc in selected):
            logger.debug("Location %s already added to trip %s", waypoint.id, trip_id)
            return trip
        record = waypoint.to_dict()
        record["priority"] = len(selected) + 1 if priority is None else priority
        selected.append(record)
        return self.update_trip(trip_id, {"selectedLocations": selected})

    def remove_location(self, trip_id: TripId, waypoint_id: Any) -> Dict[str, Any]:
        trip = self._require_trip(trip_id)
        selected = [loc for loc in trip.get("selectedLocations") or [] if loc["id"] != waypoint_id]
        for index, loc in enumerate(selected, start=1):
            loc["priority"] = index
        return self.update_trip(trip_id, {"selectedLocations": selected})

    def selected_waypoints(self, trip_id: TripId) -> List[Waypoint]:
        trip = self._require_trip(trip_id)
        return [Waypoint.from_dict(loc) for loc in trip.get("selectedLocations") or []]

    # ── schedules ────────────────────────────────────────────────────────────

    def save_schedule(self, trip_id: TripId, schedule: Schedule) -> Dict[str, Any]:
        return self.update_trip(trip_id, {"schedule": schedule.to_dict()})

    def load_schedule(self, trip_id: TripId) -> Optional[Schedule]:
        trip = self._require_trip(trip_id)
        data = trip.get("schedule")
        return Schedule.from_dict(data) if data else None

    def mark_visited(self, trip_id: TripId, waypoint_id: Any, visited: bool = True) -> Dict[str, Any]:
        """Set the visited flag of a location in the schedule and the selection."""
        trip = self._require_trip(trip_id)
        visited_at = _now() if visited else None
        updates: Dict[str, Any] = {}

        schedule = self.load_schedule(trip_id)
        if schedule is not None:
            for item in schedule.visits():
                if item.location.id == waypoint_id:
                    item.visited = visited
                    item.visited_at = visited_at
            updates["schedule"] = schedule.to_dict()

        selected = trip.get("selectedLocations")
        if selected:
            updates["selectedLocations"] = [
                {**loc, "visited": visited, "visited_at": visited_at} if loc["id"] == waypoint_id else loc
                for loc in selected
            ]
        logger.info("Marked location %s of trip %s visited=%s", waypoint_id, trip_id, visited)
        return self.update_trip(trip_id, updates)

    def trip_progress(self, trip_id: TripId) -> Dict[str, int]:
        trip = self.get_trip(trip_id)
        if not trip or not trip.get("selectedLocations"):
            return {"visited": 0, "total": 0, "percentage": 0}
        selected = trip["selectedLocations"]
        total = len(selected)
        visited = sum(1 for loc in selected if loc.get("visited"))
        return {"visited": visited, "total": total, "percentage": round(visited / total * 100)}

    # ── import / export ──────────────────────────────────────────────────────

    def export_trips(self) -> str:
        return json.dumps(self.list_trips(), ensure_ascii=False, indent=2)

    def import_trips(self, json_data: str) -> List[Dict[str, Any]]:
        """Replace all stored trips with the JSON list in ``json_data``."""
        trips = json.loads(json_data)
        if not isinstance(trips, list):
            raise ValueError("Invalid format: expected a list of trips")
        self.backend.set(TRIPS_KEY, trips)
        ids = [trip["id"] for trip in trips if isinstance(trip.get("id"), int)]
        counter = int(self.backend.get(COUNTER_KEY) or 0)
        self.backend.set(COUNTER_KEY, max([counter] + ids))
        logger.info("Imported %d trips", len(trips))
        return trips
