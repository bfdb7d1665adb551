"""
Formatting helpers and trip statistics for GI Yatra schedules.

These functions turn a generated ``Schedule`` into text and numbers for
display. They never modify the schedule.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from giyatra.models import BreakItem, Schedule, TravelItem, VisitItem


def format_duration(minutes: int) -> str:
    """Format a number of minutes as ``45 mins``, ``2h`` or ``2h 15m``."""
    minutes = int(minutes)
    if minutes < 60:
        return f"{minutes} mins"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


def format_distance(km: float) -> str:
    """Format a distance, using metres below one kilometre."""
    if km < 1:
        return f"{round(km * 1000)} m"
    return f"{round(km, 2):g} km"


def calculate_trip_stats(schedule: Optional[Schedule]) -> Optional[Dict[str, Any]]:
    """Aggregate distance and time statistics over every day of a schedule.

    Returns ``None`` when there is no schedule or it has no days.
    """
    if schedule is None or not schedule.days:
        return None

    total_distance = 0.0
    total_travel = 0
    total_visit = 0
    total_locations = 0
    for day in schedule.days:
        for item in day.items:
            if isinstance(item, TravelItem):
                total_travel += item.duration_minutes
                total_distance += item.distance_km
            elif isinstance(item, VisitItem):
                total_visit += item.duration_minutes
                total_locations += 1

    busy = total_travel + total_visit
    return {
        "totalDistance": f"{total_distance:.2f}",
        "totalTravelTime": format_duration(total_travel),
        "totalVisitTime": format_duration(total_visit),
        "totalTime": format_duration(busy),
        "totalLocations": total_locations,
        "avgTimePerLocation": (
            format_duration(round(total_visit / total_locations)) if total_locations else "0"
        ),
        "travelPercentage": round(total_travel / busy * 100) if busy else 0,
    }


def format_schedule_text(schedule: Schedule) -> str:
    """Format the itinerary as plain text, one block per day."""
    lines: List[str] = [f"Itinerary for trip {schedule.trip_id}:" if schedule.trip_id else "Itinerary:"]
    for day in schedule.days:
        lines.append("")
        lines.append(f"Day {day.day_number} ({day.date})")
        if not day.items:
            lines.append("  Nothing scheduled")
        for item in day.items:
            span = f"{item.start_time}-{item.end_time}"
            if isinstance(item, TravelItem):
                lines.append(
                    f"  {span} Travel {item.from_name} -> {item.to_name} "
                    f"({format_duration(item.duration_minutes)}, {format_distance(item.distance_km)})"
                )
            elif isinstance(item, VisitItem):
                mark = " [visited]" if item.visited else ""
                lines.append(f"  {span} Visit {item.location.name}{mark}")
            elif isinstance(item, BreakItem):
                lines.append(f"  {span} {item.description}")

    summary = schedule.summary
    lines.append("")
    lines.append(f"Total travel time: {format_duration(summary.total_travel_time)}")
    lines.append(f"Total visit time: {format_duration(summary.total_visit_time)}")
    lines.append(f"Locations covered: {summary.covered_locations}/{summary.total_locations}")
    for warning in summary.warnings:
        lines.append(f"Note: {warning}")
    return "\n".join(lines)
