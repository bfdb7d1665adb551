"""
Map visualisation utilities for GI Yatra.

This module provides a helper function to build an interactive map of a
generated schedule using the Folium library. It renders the start
location, numbered markers for every scheduled visit, and one polyline
per day in that day's colour. The map can be embedded directly in a
Streamlit app via ``streamlit_folium``.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import folium

from giyatra.models import Schedule

DAY_COLOURS = ["blue", "red", "green", "purple", "orange", "darkred", "cadetblue", "darkgreen"]


def create_schedule_map(
    schedule: Schedule,
    origin: Tuple[float, float],
    origin_name: str = "Starting Point",
) -> folium.Map:
    """Create a Folium map with numbered visit markers and a route line per day.

    Args:
        schedule: Generated schedule.
        origin: (lat, lon) of the trip's start location.
        origin_name: Label for the start marker.

    Returns:
        A Folium Map object ready for display.
    """
    points: List[Tuple[float, float]] = [tuple(origin)]
    for visit in schedule.visits():
        points.append((visit.location.latitude, visit.location.longitude))
    # Compute map centre as the mean of all coordinates
    avg_lat = sum(lat for lat, _ in points) / len(points)
    avg_lon = sum(lon for _, lon in points) / len(points)
    m = folium.Map(location=[avg_lat, avg_lon], zoom_start=8, tiles="OpenStreetMap")

    folium.Marker(
        location=list(origin),
        popup=folium.Popup(origin_name, parse_html=True),
        icon=folium.Icon(color="black", icon="home"),
    ).add_to(m)

    previous = tuple(origin)
    order = 0
    for day in schedule.days:
        colour = DAY_COLOURS[(day.day_number - 1) % len(DAY_COLOURS)]
        line: List[Sequence[float]] = [list(previous)]
        for visit in day.visits():
            order += 1
            lat, lon = visit.location.latitude, visit.location.longitude
            folium.Marker(
                location=[lat, lon],
                popup=folium.Popup(
                    f"{order}. {visit.location.name} (Day {day.day_number}, "
                    f"{visit.start_time}-{visit.end_time})",
                    parse_html=True,
                ),
                icon=folium.DivIcon(html=(
                    f"<div style='font-size: 12px; color: white; background-color: {colour}; "
                    f"border-radius: 50%; width: 24px; height: 24px; text-align: center; "
                    f"line-height: 24px;'>{order}</div>"
                )),
            ).add_to(m)
            line.append([lat, lon])
            previous = (lat, lon)
        if len(line) > 1:
            folium.PolyLine(line, color=colour, weight=4, opacity=0.6,
                            tooltip=f"Day {day.day_number}").add_to(m)
    return m
