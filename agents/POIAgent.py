"""
Points of interest near a destination, from the OpenStreetMap Overpass API.

Interest tags pick which OSM features are queried:

  hiking / nature        → hiking routes, woods, peaks
  food / dining          → restaurants, cafes
  sightseeing / tourism  → attractions, viewpoints

Groups are additive.  Interests that match no group produce no query and an
empty result.  Failures degrade to an empty list rather than raising.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Optional

import requests

import config
from schemas import Coordinates, PointOfInterest

from . import GeoAgent
from .outcomes import PAYLOAD_ERRORS, Degraded, Ok

log = logging.getLogger(__name__)

_OVERPASS_URL = "https://overpass-api.de/api/interpreter"

SEARCH_RADIUS_M = 20000
MAX_POIS = 20

# (tag group, Overpass selectors)
OSM_FILTERS = MappingProxyType({
    frozenset({"hiking", "nature"}): (
        'way["route"="hiking"]',
        'way["natural"="wood"]',
        'node["natural"="peak"]',
    ),
    frozenset({"food", "dining"}): (
        'node["amenity"="restaurant"]',
        'node["amenity"="cafe"]',
    ),
    frozenset({"sightseeing", "tourism"}): (
        'node["tourism"="attraction"]',
        'node["tourism"="viewpoint"]',
    ),
})

_CATEGORY_TAGS = ("route", "natural", "amenity", "tourism")


def selectors_for(interests: Iterable[str]) -> list[str]:
    tags = {str(t).strip().lower() for t in interests}
    selectors: list[str] = []
    for group, group_selectors in OSM_FILTERS.items():
        if tags & group:
            selectors.extend(group_selectors)
    return selectors


def build_query(coords: Coordinates, selectors: list[str]) -> str:
    around = f"(around:{SEARCH_RADIUS_M},{coords.latitude},{coords.longitude});"
    body = "".join(f"{sel}{around}" for sel in selectors)
    # "out center" gives ways a centre point so every result has coordinates
    return f"[out:json][timeout:25];({body});out center {MAX_POIS};"


def _element_to_poi(element: dict) -> PointOfInterest:
    tags = element.get("tags") or {}
    category = next((tags[k] for k in _CATEGORY_TAGS if tags.get(k)), "point of interest")
    center = element.get("center") or {}
    return PointOfInterest(
        id=element["id"],
        name=tags.get("name") or "Unnamed location",
        category=category,
        latitude=element.get("lat", center.get("lat")),
        longitude=element.get("lon", center.get("lon")),
        description=tags.get("description") or None,
    )


def fetch_pois(destination: str, interests: Iterable[str], coords: Optional[Coordinates] = None):
    """Search POIs around *destination* for the given interest tags.

    *coords* skips geocoding when the caller has already resolved the place.
    """
    interests = list(interests)
    selectors = selectors_for(interests)
    if not selectors:
        log.info("No known interest groups in %s, skipping POI search", interests)
        return Ok([])

    if coords is None:
        location = GeoAgent.locate(destination)
        if isinstance(location, Degraded):
            return Degraded([], location.reason)
        coords = location.value

    try:
        query = build_query(coords, selectors)
        log.debug("Overpass query: %s", query)
        resp = requests.post(_OVERPASS_URL, data={"data": query}, timeout=config.http_timeout())
        resp.raise_for_status()
        elements = resp.json()["elements"]
        pois = [_element_to_poi(e) for e in elements[:MAX_POIS]]
    except requests.RequestException as exc:
        log.warning("POI lookup failed for %s: %s", destination, exc)
        return Degraded([], f"Overpass API error: {exc}")
    except PAYLOAD_ERRORS as exc:
        log.warning("Malformed Overpass payload for %s: %s", destination, exc)
        return Degraded([], f"Malformed Overpass payload: {exc}")

    log.info("Found %d POIs near %s", len(pois), destination)
    return Ok(pois)
