"""
Streamlit application for GI Yatra trip planning.

This script defines the user interface and orchestrates the underlying
modules to load GI locations from the catalog, store trips, generate a
day by day schedule, display it on an interactive map, and track which
locations have been visited.

To run this app locally for development, install the package and
execute:

    streamlit run giyatra/app.py

The catalog URL and other settings are read from the environment (see
``giyatra.config``).
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List

import streamlit as st
from streamlit_folium import folium_static

from giyatra import config
from giyatra.builder import generate_schedule
from giyatra.catalog import CatalogClient, normalize_locations, sort_by_priority
from giyatra.errors import CatalogError, GiyatraError
from giyatra.geocode import resolve_start_location
from giyatra.models import Schedule, TravelItem, TripParameters, VisitItem, Waypoint
from giyatra.storage import JsonFileBackend, TripStore
from giyatra.summary import calculate_trip_stats, format_distance, format_duration, format_schedule_text
from giyatra.visualisation import create_schedule_map

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


@st.cache_resource
def get_store() -> TripStore:
    return TripStore(JsonFileBackend(config.STORE_PATH))


@st.cache_data(ttl=600)
def load_catalog(base_url: str) -> List[Dict[str, Any]]:
    """Raw catalog records, cached for ten minutes."""
    return CatalogClient(base_url=base_url).list_locations()


def trip_form(store: TripStore) -> None:
    """Sidebar form that creates a new trip."""
    with st.sidebar.form("new_trip"):
        st.subheader("New trip")
        title = st.text_input("Title", value="My GI trip")
        num_days = st.number_input("Days", min_value=1, max_value=30, value=config.DEFAULT_NUM_DAYS)
        start_name = st.text_input("Start location", value="Bangalore")
        col_lat, col_lon = st.columns(2)
        with col_lat:
            start_lat = st.text_input("Latitude", value="", help="Leave empty to geocode the start location")
        with col_lon:
            start_lon = st.text_input("Longitude", value="")
        col_from, col_to = st.columns(2)
        with col_from:
            start_time = st.text_input("Day starts (HH:MM)", value=config.DEFAULT_START_TIME)
        with col_to:
            end_time = st.text_input("Day ends (HH:MM)", value=config.DEFAULT_END_TIME)
        start_date = st.date_input("First day", value=datetime.date.today())
        if st.form_submit_button("Create trip"):
            trip = store.save_trip({
                "title": title,
                "num_days": int(num_days),
                "start_location_name": start_name,
                "start_location_latitude": start_lat.strip() or None,
                "start_location_longitude": start_lon.strip() or None,
                "preferred_start_time": start_time,
                "preferred_end_time": end_time,
                "start_date": start_date.isoformat(),
                "selectedLocations": [],
            })
            st.session_state["trip_id"] = trip["id"]


def select_locations(store: TripStore, trip: Dict[str, Any]) -> None:
    """Multiselect over the catalog that keeps the trip's selection in sync."""
    try:
        catalog = normalize_locations(load_catalog(config.API_BASE_URL))
    except CatalogError as exc:
        st.error(f"Could not load locations: {exc}")
        return
    by_label = {f"{w.name} ({w.district or 'unknown district'})": w for w in catalog}
    current_ids = {loc["id"] for loc in trip.get("selectedLocations") or []}
    chosen = st.multiselect(
        "Locations to visit",
        options=list(by_label),
        default=[label for label, w in by_label.items() if w.id in current_ids],
    )
    chosen_ids = {by_label[label].id for label in chosen}
    for label in chosen:
        if by_label[label].id not in current_ids:
            store.add_location(trip["id"], by_label[label])
    for location_id in current_ids - chosen_ids:
        store.remove_location(trip["id"], location_id)


def show_schedule(store: TripStore, trip_id: int, schedule: Schedule, params: TripParameters) -> None:
    summary = schedule.summary
    if summary.is_feasible:
        st.success(summary.warnings[-1])
    else:
        st.warning(summary.warnings[-1])
    for warning in summary.warnings[:-1]:
        st.info(warning)

    stats = calculate_trip_stats(schedule)
    if stats:
        cols = st.columns(4)
        cols[0].metric("Locations", f"{summary.covered_locations}/{summary.total_locations}")
        cols[1].metric("Travel", stats["totalTravelTime"])
        cols[2].metric("Visits", stats["totalVisitTime"])
        cols[3].metric("Distance", format_distance(float(stats["totalDistance"])))

    for day in schedule.days:
        st.markdown(f"#### Day {day.day_number} · {day.date}")
        if not day.items:
            st.caption("Nothing fits into this day.")
        for index, item in enumerate(day.items):
            span = f"{item.start_time}–{item.end_time}"
            if isinstance(item, TravelItem):
                st.write(f"🚗 {span} {item.from_name} → {item.to_name} "
                         f"({format_duration(item.duration_minutes)}, {format_distance(item.distance_km)})")
            elif isinstance(item, VisitItem):
                checked = st.checkbox(
                    f"📍 {span} {item.location.name}",
                    value=item.visited,
                    key=f"visited_{day.day_number}_{index}",
                )
                if checked != item.visited:
                    store.mark_visited(trip_id, item.location.id, checked)
                    st.rerun()
            else:
                st.write(f"☕ {span} {item.description}")

    fol_map = create_schedule_map(schedule, tuple(params.start), params.start_name)
    folium_static(fol_map, width=700, height=500)
    st.text_area("Itinerary", format_schedule_text(schedule), height=240)


def main():
    st.set_page_config(page_title="GI Yatra", layout="wide")
    st.title("🗺️ GI Yatra trip planner")
    store = get_store()
    trip_form(store)

    trips = store.list_trips()
    if not trips:
        st.info("Create a trip in the sidebar to get started.")
        st.stop()
    labels = {f"{t['id']}: {t.get('title', 'Untitled')}": t["id"] for t in trips}
    default_id = st.session_state.get("trip_id", trips[-1]["id"])
    choice = st.selectbox(
        "Trip",
        options=list(labels),
        index=list(labels.values()).index(default_id) if default_id in labels.values() else 0,
    )
    trip_id = labels[choice]
    st.session_state["trip_id"] = trip_id
    trip = store.get_trip(trip_id)

    select_locations(store, trip)
    trip = store.get_trip(trip_id)
    progress = store.trip_progress(trip_id)
    st.progress(progress["percentage"] / 100.0, text=f"{progress['visited']}/{progress['total']} visited")

    try:
        params = TripParameters.from_dict(resolve_start_location(trip))
    except GiyatraError as exc:
        st.error(f"Trip cannot be scheduled: {exc}")
        st.stop()

    if st.button("Generate schedule"):
        waypoints: List[Waypoint] = sort_by_priority(store.selected_waypoints(trip_id))
        try:
            with st.spinner("Planning your trip…"):
                schedule = generate_schedule(params, waypoints)
        except GiyatraError as exc:
            st.error(str(exc))
            st.stop()
        store.save_schedule(trip_id, schedule)

    schedule = store.load_schedule(trip_id)
    if schedule is not None:
        show_schedule(store, trip_id, schedule, params)


if __name__ == "__main__":
    main()
