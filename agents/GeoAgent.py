"""
Place-name → coordinates resolution.

Well-known destinations come from a fixed table.  Anything else is looked
up on OpenStreetMap Nominatim, or mapped to the default region when
GEOCODE_FALLBACK=default.

Usage:
    from agents.GeoAgent import resolve

    coords = resolve("Denver")   # Coordinates(latitude=39.7392, longitude=-104.9903)
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

import config
from schemas import Coordinates

from .errors import LocationNotFound
from .outcomes import Degraded, Ok

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Static table
# ---------------------------------------------------------------------------

KNOWN_LOCATIONS = MappingProxyType({
    "denver": Coordinates(39.7392, -104.9903),
    "colorado": Coordinates(39.5501, -105.7821),
    "new york": Coordinates(40.7128, -74.006),
    "san francisco": Coordinates(37.7749, -122.4194),
    "london": Coordinates(51.5074, -0.1278),
    "paris": Coordinates(48.8566, 2.3522),
    "tokyo": Coordinates(35.6762, 139.6503),
})

DEFAULT_REGION = "colorado"


def normalize(place_name: str) -> str:
    return (place_name or "").strip().lower()


# ---------------------------------------------------------------------------
# Nominatim fallback
# ---------------------------------------------------------------------------

def _nominatim_lookup(place_name: str) -> Coordinates:
    """Geocode via Nominatim, keeping only the best match.

    Raises LocationNotFound when nothing matches; service and timeout errors
    propagate as geopy.exc.GeopyError.
    """
    geolocator = Nominatim(user_agent=config.nominatim_user_agent())
    result = geolocator.geocode(place_name, exactly_one=True, timeout=config.http_timeout())
    if not result:
        raise LocationNotFound(place_name)
    return Coordinates(result.latitude, result.longitude)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resolve(place_name: str) -> Coordinates:
    """Resolve a free-text place name to coordinates. No retry, no caching."""
    key = normalize(place_name)
    if key in KNOWN_LOCATIONS:
        return KNOWN_LOCATIONS[key]

    if config.geocode_fallback() == "default":
        log.info("No table entry for %r, using default region %s", place_name, DEFAULT_REGION)
        return KNOWN_LOCATIONS[DEFAULT_REGION]

    if not key:
        raise LocationNotFound(place_name)

    log.info("No table entry for %r, geocoding via Nominatim", place_name)
    return _nominatim_lookup(place_name.strip())


def locate(place_name: str):
    """Like resolve(), but returns Ok(coords) or Degraded(None, reason) instead of raising."""
    try:
        return Ok(resolve(place_name))
    except LocationNotFound as exc:
        log.warning("Geocoding skipped: %s", exc)
        return Degraded(None, str(exc))
    except GeopyError as exc:
        log.warning("Geocoding failed for %s: %s", place_name, exc)
        return Degraded(None, f"Geocoding error: {exc}")
