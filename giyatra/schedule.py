"""
Day packing for GI Yatra.

This module fills a single day's time window with locations taken, in
order, from the trip's global visiting order. Each location costs the
travel time of its incoming leg plus its visit duration. A location is
either placed whole or not at all; the first one that does not fit
ends the day and is left for the next day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import List, Sequence, Tuple, Union

from giyatra import config
from giyatra.errors import InvalidConfiguration
from giyatra.models import BreakItem, DaySummary, ScheduleItem, TravelItem, TravelLeg, VisitItem, Waypoint
from giyatra.summary import format_duration

Clock = Union[str, time]


@dataclass
class DayPackResult:
    items: List[ScheduleItem] = field(default_factory=list)
    consumed: int = 0
    summary: DaySummary = field(default_factory=DaySummary)
    warnings: List[str] = field(default_factory=list)


def parse_time_string(t: str) -> time:
    """Parse a HH:MM formatted time string into a datetime.time object."""
    try:
        h, m = map(int, t.strip().split(":"))
        return time(hour=h, minute=m)
    except (AttributeError, ValueError) as exc:
        raise InvalidConfiguration(f"Invalid time {t!r}, expected HH:MM") from exc


def clock_minutes(clock: Clock) -> int:
    """Minutes since midnight for a ``time`` or HH:MM string."""
    if not isinstance(clock, time):
        clock = parse_time_string(clock)
    return clock.hour * 60 + clock.minute


def format_clock(minutes: int) -> str:
    """Format minutes since midnight as HH:MM."""
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def pack_day(
    start_clock: Clock,
    end_clock: Clock,
    candidates: Sequence[Tuple[Waypoint, TravelLeg]],
    start_index: int = 0,
    day_number: int = 1,
    min_travel_minutes: int = None,
    default_visit_minutes: int = None,
    min_slack_minutes: int = None,
    break_minutes: int = 0,
) -> DayPackResult:
    """Pack as many candidates as fit into one day.

    Args:
        start_clock: Start of the day's window (HH:MM or ``time``).
        end_clock: End of the day's window, after ``start_clock``.
        candidates: Globally ordered ``(waypoint, incoming_leg)`` pairs.
        start_index: Position in ``candidates`` to resume from.
        day_number: 1‑based day number used in warnings.
        min_travel_minutes: Floor applied to every leg's duration.
        default_visit_minutes: Visit duration for waypoints without one.
        min_slack_minutes: Once at least one location is placed, stop
            when no more than this many minutes remain.
        break_minutes: Optional break placed before travelling on to
            every location after the first of the day.

    Returns:
        A ``DayPackResult`` with the placed items, the number of
        candidates consumed, the day summary and any warnings.
    """
    if min_travel_minutes is None:
        min_travel_minutes = config.MIN_TRAVEL_MINUTES
    if default_visit_minutes is None:
        default_visit_minutes = config.DEFAULT_VISIT_MINUTES
    if min_slack_minutes is None:
        min_slack_minutes = config.MIN_SLACK_MINUTES

    start = clock_minutes(start_clock)
    end = clock_minutes(end_clock)
    if end <= start:
        raise InvalidConfiguration(
            f"Day end {format_clock(end)} must be after day start {format_clock(start)}"
        )

    result = DayPackResult()
    summary = result.summary
    window = end - start
    remaining = window
    clock = start

    for waypoint, leg in candidates[start_index:]:
        if result.consumed and remaining <= min_slack_minutes:
            break
        travel_duration = max(leg.duration_minutes, min_travel_minutes)
        visit_duration = waypoint.visit_minutes(default_visit_minutes)
        rest = break_minutes if result.consumed and break_minutes > 0 else 0
        required = rest + travel_duration + visit_duration
        if required > remaining:
            result.warnings.append(
                f"Day {day_number}: Not enough time for {waypoint.name} "
                f"(needs {format_duration(required)}, have {format_duration(remaining)})"
            )
            break

        if rest:
            result.items.append(BreakItem(
                description="Break",
                start_time=format_clock(clock),
                end_time=format_clock(clock + rest),
                duration_minutes=rest,
            ))
            clock += rest
            summary.break_time += rest

        result.items.append(TravelItem(
            from_name=leg.origin_name,
            to_name=waypoint.name,
            start_time=format_clock(clock),
            end_time=format_clock(clock + travel_duration),
            duration_minutes=travel_duration,
            distance_km=leg.distance_km,
        ))
        clock += travel_duration
        summary.travel_time += travel_duration

        result.items.append(VisitItem(
            location=waypoint,
            start_time=format_clock(clock),
            end_time=format_clock(clock + visit_duration),
            duration_minutes=visit_duration,
        ))
        clock += visit_duration
        summary.visit_time += visit_duration
        summary.locations_visited += 1

        if leg.warning:
            result.warnings.append(f"Day {day_number}: {leg.warning}")
        remaining -= required
        result.consumed += 1

    summary.total_time = window - remaining
    return result
