"""
GI Yatra package initialization.

This package provides the trip scheduling engine for the GI Yatra travel
planner together with thin adapters for the services around it: the
location catalog, trip storage, geocoding, and map visualisation.

Modules:
    routing       – Haversine distance, travel time estimation and the
                    optional OSRM road travel time lookup.
    optimisation  – Nearest neighbour ordering of the selected locations.
    schedule      – Packing ordered locations into a single day's window.
    builder       – Multi-day schedule generation and run summary.
    models        – Plain, JSON serialisable schedule data structures.
    catalog       – REST client for the GI location catalog.
    storage       – Trip persistence over a pluggable key/value backend.
    geocode       – Start location geocoding via Nominatim.
    summary       – Formatting helpers and trip statistics.
    visualisation – Folium based map creation utilities.

The nearest neighbour ordering is a greedy approximation and is not
guaranteed to produce the shortest possible route.
"""

__all__ = [
    "builder",
    "catalog",
    "config",
    "errors",
    "geocode",
    "models",
    "optimisation",
    "routing",
    "schedule",
    "storage",
    "summary",
    "visualisation",
]
