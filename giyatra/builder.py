"""
Schedule generation for GI Yatra.

``generate_schedule`` turns a trip's parameters and its selected
locations into a day by day itinerary:

1. Order every location once, up front, with the nearest neighbour
   heuristic (``optimisation.sequence``).
2. Walk the days of the trip, packing locations into each day's window
   (``schedule.pack_day``) and resuming on the next day where the
   previous one stopped.
3. Summarise what was covered, what was not, and the time spent.

A trip that cannot fit every location still gets a schedule; it is
flagged as not feasible and lists the locations that were left out.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence, Union

from giyatra import config
from giyatra.errors import InvalidConfiguration, NoWaypointsSelected
from giyatra.models import Day, Schedule, ScheduleSummary, TripParameters, Waypoint
from giyatra.optimisation import sequence
from giyatra.schedule import clock_minutes, pack_day

logger = logging.getLogger(__name__)


def _resolve_start_date(start_date: Union[date, str, None], today: Optional[date]) -> date:
    if start_date is None:
        return today or date.today()
    if isinstance(start_date, date):
        return start_date
    try:
        return date.fromisoformat(start_date)
    except ValueError as exc:
        raise InvalidConfiguration(f"Invalid start date {start_date!r}, expected YYYY-MM-DD") from exc


def validate_trip(trip: TripParameters) -> None:
    """Raise ``InvalidConfiguration`` when the trip cannot be scheduled."""
    if trip.num_days < 1:
        raise InvalidConfiguration(f"Number of days must be at least 1, got {trip.num_days}")
    start = clock_minutes(trip.preferred_start_time)
    end = clock_minutes(trip.preferred_end_time)
    if end <= start:
        raise InvalidConfiguration(
            f"Preferred end time {trip.preferred_end_time} must be after "
            f"start time {trip.preferred_start_time}"
        )


def generate_schedule(
    trip: TripParameters,
    waypoints: Sequence[Waypoint],
    start_date: Union[date, str, None] = None,
    today: Optional[date] = None,
    use_road_times: Optional[bool] = None,
    break_minutes: int = 0,
) -> Schedule:
    """Generate a multi-day schedule for the selected locations.

    Args:
        trip: Trip parameters (start location, days, daily window).
        waypoints: Selected locations, already normalised.
        start_date: First calendar day; defaults to ``trip.start_date``
            and then to ``today``.
        today: Override for the current date.
        use_road_times: Ask OSRM for leg durations; defaults to
            ``config.USE_ROAD_TIMES``.
        break_minutes: Break between consecutive visits of a day.

    Returns:
        The complete ``Schedule``.

    Raises:
        InvalidConfiguration: If the day count or time window is invalid.
        NoWaypointsSelected: If ``waypoints`` is empty.
    """
    validate_trip(trip)
    if not waypoints:
        raise NoWaypointsSelected("No locations selected for trip")
    if use_road_times is None:
        use_road_times = config.USE_ROAD_TIMES

    logger.info(
        "Generating schedule for trip %s: %d locations over %d days (%s-%s)",
        trip.trip_id, len(waypoints), trip.num_days,
        trip.preferred_start_time, trip.preferred_end_time,
    )
    order, legs = sequence(
        trip.start,
        waypoints,
        origin_name=trip.start_name,
        use_road_times=use_road_times,
    )
    candidates = list(zip(order, legs))

    current_date = _resolve_start_date(start_date or trip.start_date, today)
    summary = ScheduleSummary(total_locations=len(order))
    schedule = Schedule(
        trip_id=trip.trip_id,
        summary=summary,
        generated_at=datetime.now().isoformat(timespec="seconds"),
    )

    global_index = 0
    for day_number in range(1, trip.num_days + 1):
        if global_index >= len(order):
            break
        packed = pack_day(
            trip.preferred_start_time,
            trip.preferred_end_time,
            candidates,
            start_index=global_index,
            day_number=day_number,
            break_minutes=break_minutes,
        )
        schedule.days.append(Day(
            day_number=day_number,
            date=current_date.isoformat(),
            items=packed.items,
            summary=packed.summary,
        ))
        summary.warnings.extend(packed.warnings)
        summary.total_travel_time += packed.summary.travel_time
        summary.total_visit_time += packed.summary.visit_time
        global_index += packed.consumed
        current_date += timedelta(days=1)

    summary.covered_locations = global_index
    summary.uncovered_locations = [w.name for w in order[global_index:]]
    summary.is_feasible = global_index == len(order)
    if summary.is_feasible:
        summary.warnings.append(f"All {len(order)} locations successfully scheduled!")
    else:
        missing = len(order) - global_index
        summary.warnings.append(
            f"Cannot cover all locations! {missing} location(s) not scheduled: "
            f"{', '.join(summary.uncovered_locations)}"
        )
        logger.info("Trip %s is not feasible, %d location(s) left out", trip.trip_id, missing)
    return schedule
