"""
Data structures for GI Yatra schedules.

Everything here is plain data: a generated ``Schedule`` holds no live
references to services or to the catalog, so it can be written to the
trip store and rendered by the UI after a round trip through JSON.
Every class offers ``to_dict()`` and ``from_dict()`` for that purpose.

Schedule items are a tagged union. The ``item_type`` key of the
serialised form selects the variant:

    "travel"   – ``TravelItem``
    "location" – ``VisitItem``
    "break"    – ``BreakItem``
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Union

from giyatra import config
from giyatra.errors import InvalidConfiguration

WaypointId = Union[int, str]


class Coordinate(NamedTuple):
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """True when both parts are finite and within the WGS84 ranges."""
        lat, lon = self
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


@dataclass(frozen=True)
class Waypoint:
    """A selectable point of interest with its expected visit duration."""

    id: WaypointId
    name: str
    latitude: float
    longitude: float
    typical_visit_duration: Optional[int] = None  # minutes
    district: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    priority: Optional[int] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    def visit_minutes(self, default: int = config.DEFAULT_VISIT_MINUTES) -> int:
        """Visit duration in minutes, falling back to ``default`` when unset or zero."""
        if not self.typical_visit_duration or self.typical_visit_duration < 1:
            return default
        return int(self.typical_visit_duration)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "typical_visit_duration": self.typical_visit_duration,
            "district": self.district,
            "category": self.category,
            "image_url": self.image_url,
            "priority": self.priority,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Waypoint":
        return cls(
            id=data["id"],
            name=data["name"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            typical_visit_duration=data.get("typical_visit_duration"),
            district=data.get("district"),
            category=data.get("category"),
            image_url=data.get("image_url"),
            priority=data.get("priority"),
        )


@dataclass
class TravelLeg:
    """A directed travel estimate between two consecutive stops."""

    origin_id: Optional[WaypointId]
    origin_name: str
    destination_id: WaypointId
    destination_name: str
    distance_km: float
    duration_minutes: int
    source: str = "estimate"  # "estimate" or "road"
    warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "origin_id": self.origin_id,
            "origin_name": self.origin_name,
            "destination_id": self.destination_id,
            "destination_name": self.destination_name,
            "distance_km": self.distance_km,
            "duration_minutes": self.duration_minutes,
            "source": self.source,
            "warning": self.warning,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TravelLeg":
        return cls(**data)


@dataclass
class TravelItem:
    from_name: str
    to_name: str
    start_time: str
    end_time: str
    duration_minutes: int
    distance_km: float = 0.0
    item_type: str = field(default="travel", init=False)

    @property
    def description(self) -> str:
        return f"Travel to {self.to_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_type": self.item_type,
            "description": self.description,
            "from": self.from_name,
            "to": self.to_name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_minutes": self.duration_minutes,
            "distance": self.distance_km,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TravelItem":
        return cls(
            from_name=data["from"],
            to_name=data["to"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            duration_minutes=int(data["duration_minutes"]),
            distance_km=float(data.get("distance") or 0.0),
        )


@dataclass
class VisitItem:
    location: Waypoint
    start_time: str
    end_time: str
    duration_minutes: int
    visited: bool = False
    visited_at: Optional[str] = None
    item_type: str = field(default="location", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_type": self.item_type,
            "location": self.location.to_dict(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_minutes": self.duration_minutes,
            "visited": self.visited,
            "visited_at": self.visited_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VisitItem":
        return cls(
            location=Waypoint.from_dict(data["location"]),
            start_time=data["start_time"],
            end_time=data["end_time"],
            duration_minutes=int(data["duration_minutes"]),
            visited=bool(data.get("visited", False)),
            visited_at=data.get("visited_at"),
        )


@dataclass
class BreakItem:
    description: str
    start_time: str
    end_time: str
    duration_minutes: int
    item_type: str = field(default="break", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_type": self.item_type,
            "description": self.description,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BreakItem":
        return cls(
            description=data["description"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            duration_minutes=int(data["duration_minutes"]),
        )


ScheduleItem = Union[TravelItem, VisitItem, BreakItem]

_ITEM_TYPES = {
    "travel": TravelItem,
    "location": VisitItem,
    "break": BreakItem,
}


def item_from_dict(data: Dict[str, Any]) -> ScheduleItem:
    """Rebuild a schedule item from its serialised form."""
    try:
        item_cls = _ITEM_TYPES[data["item_type"]]
    except KeyError:
        raise ValueError(f"Unknown schedule item type: {data.get('item_type')!r}")
    return item_cls.from_dict(data)


@dataclass
class DaySummary:
    total_time: int = 0
    travel_time: int = 0
    visit_time: int = 0
    break_time: int = 0
    locations_visited: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTime": self.total_time,
            "travelTime": self.travel_time,
            "visitTime": self.visit_time,
            "breakTime": self.break_time,
            "locationsVisited": self.locations_visited,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaySummary":
        return cls(
            total_time=int(data.get("totalTime", 0)),
            travel_time=int(data.get("travelTime", 0)),
            visit_time=int(data.get("visitTime", 0)),
            break_time=int(data.get("breakTime", 0)),
            locations_visited=int(data.get("locationsVisited", 0)),
        )


@dataclass
class Day:
    day_number: int
    date: str  # ISO calendar date
    items: List[ScheduleItem] = field(default_factory=list)
    summary: DaySummary = field(default_factory=DaySummary)

    def visits(self) -> List[VisitItem]:
        return [item for item in self.items if isinstance(item, VisitItem)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_number": self.day_number,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Day":
        return cls(
            day_number=int(data["day_number"]),
            date=data["date"],
            items=[item_from_dict(item) for item in data.get("items", [])],
            summary=DaySummary.from_dict(data.get("summary", {})),
        )


@dataclass
class ScheduleSummary:
    total_locations: int = 0
    covered_locations: int = 0
    uncovered_locations: List[str] = field(default_factory=list)
    total_travel_time: int = 0
    total_visit_time: int = 0
    is_feasible: bool = True
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalLocations": self.total_locations,
            "coveredLocations": self.covered_locations,
            "uncoveredLocations": list(self.uncovered_locations),
            "totalTravelTime": self.total_travel_time,
            "totalVisitTime": self.total_visit_time,
            "isFeasible": self.is_feasible,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleSummary":
        return cls(
            total_locations=int(data.get("totalLocations", 0)),
            covered_locations=int(data.get("coveredLocations", 0)),
            uncovered_locations=list(data.get("uncoveredLocations", [])),
            total_travel_time=int(data.get("totalTravelTime", 0)),
            total_visit_time=int(data.get("totalVisitTime", 0)),
            is_feasible=bool(data.get("isFeasible", True)),
            warnings=list(data.get("warnings", [])),
        )


@dataclass
class Schedule:
    trip_id: Optional[WaypointId]
    days: List[Day] = field(default_factory=list)
    summary: ScheduleSummary = field(default_factory=ScheduleSummary)
    generated_at: Optional[str] = None

    def visits(self) -> List[VisitItem]:
        return [visit for day in self.days for visit in day.visits()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trip_id": self.trip_id,
            "days": [day.to_dict() for day in self.days],
            "summary": self.summary.to_dict(),
            "generated_at": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        return cls(
            trip_id=data.get("trip_id"),
            days=[Day.from_dict(day) for day in data.get("days", [])],
            summary=ScheduleSummary.from_dict(data.get("summary", {})),
            generated_at=data.get("generated_at"),
        )


@dataclass
class TripParameters:
    """Inputs of one schedule generation run."""

    trip_id: Optional[WaypointId]
    title: str
    num_days: int
    start_name: str
    start: Coordinate
    preferred_start_time: str = config.DEFAULT_START_TIME
    preferred_end_time: str = config.DEFAULT_END_TIME
    start_date: Optional[str] = None  # ISO date; today when omitted

    @classmethod
    def from_dict(cls, trip: Dict[str, Any]) -> "TripParameters":
        """Build parameters from a stored trip record.

        Coordinates may arrive as strings (form input); they are parsed
        here. Missing or non numeric coordinates raise
        ``InvalidConfiguration`` so the caller can geocode the start
        location first.
        """
        try:
            lat = float(trip["start_location_latitude"])
            lon = float(trip["start_location_longitude"])
        except (KeyError, TypeError, ValueError):
            raise InvalidConfiguration("Start location coordinates are missing or not numeric")
        raw_days = trip.get("num_days")
        try:
            num_days = config.DEFAULT_NUM_DAYS if raw_days in (None, "") else int(raw_days)
        except (TypeError, ValueError):
            raise InvalidConfiguration(f"Invalid number of days: {trip.get('num_days')!r}")
        return cls(
            trip_id=trip.get("id"),
            title=trip.get("title", ""),
            num_days=num_days,
            start_name=trip.get("start_location_name") or "Starting Point",
            start=Coordinate(lat, lon),
            preferred_start_time=trip.get("preferred_start_time") or config.DEFAULT_START_TIME,
            preferred_end_time=trip.get("preferred_end_time") or config.DEFAULT_END_TIME,
            start_date=trip.get("start_date") or None,
        )
