"""
Geocoding utilities for GI Yatra.

This module provides a thin wrapper around the `geopy` library to turn
a start location typed as free text ("Mysore Palace", "Hubli bus
stand") into coordinates when the trip form has no map pick. It uses
OpenStreetMap's Nominatim service via geopy's API. A small cache is
maintained in memory to avoid repeated queries for the same address.

Example usage:

    from giyatra.geocode import geocode_address
    lat, lon = geocode_address("Bangalore Palace")

The geocode function returns ``None`` if the address cannot be
geocoded.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeopyError
from geopy.geocoders import Nominatim

from giyatra import config

logger = logging.getLogger(__name__)

_geocoder: Optional[Nominatim] = None


def _get_geocoder() -> Nominatim:
    """Return a singleton Nominatim geocoder instance."""
    global _geocoder
    if _geocoder is None:
        # Nominatim's usage policy requires a custom user agent.
        _geocoder = Nominatim(user_agent=config.GEOCODER_USER_AGENT)
    return _geocoder


@lru_cache(maxsize=128)
def geocode_address(address: str) -> Optional[Tuple[float, float]]:
    """Geocode an address and return (latitude, longitude) or ``None``.

    To reduce API calls, results are cached in memory. If a timeout
    occurs, the request is retried once with a longer timeout.

    Args:
        address: Free form text to geocode.

    Returns:
        A tuple of (lat, lon) if geocoding succeeds, otherwise ``None``.
    """
    if not address or not address.strip():
        return None
    geocoder = _get_geocoder()
    try:
        location = geocoder.geocode(address, timeout=10)
    except (GeocoderTimedOut, GeocoderServiceError) as exc:
        logger.info("Geocoding %r failed (%s), retrying once", address, exc)
        try:
            location = geocoder.geocode(address, timeout=20)
        except GeopyError as retry_exc:
            logger.warning("Geocoding %r failed: %s", address, retry_exc)
            return None
    except GeopyError as exc:
        logger.warning("Geocoding %r failed: %s", address, exc)
        return None
    if location is None:
        logger.info("No geocoding result for %r", address)
        return None
    return location.latitude, location.longitude


def resolve_start_location(trip: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in start coordinates from the start location name when missing.

    Returns a copy of ``trip``; the original record is not modified. The
    copy is returned unchanged when coordinates are present or the name
    cannot be geocoded.
    """
    resolved = dict(trip)
    if resolved.get("start_location_latitude") not in (None, "") and \
            resolved.get("start_location_longitude") not in (None, ""):
        return resolved
    coords = geocode_address(resolved.get("start_location_name") or "")
    if coords is not None:
        resolved["start_location_latitude"], resolved["start_location_longitude"] = coords
    return resolved
