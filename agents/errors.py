"""Exceptions raised by the planning pipeline."""


class PlanningError(Exception):
    """Base class for failures that abort a planning request."""


class UpstreamUnavailable(PlanningError):
    """The language-model call itself failed (transport error or non-2xx status)."""


class LocationNotFound(PlanningError):
    """The geocoder returned no match for a place name."""

    def __init__(self, place_name: str):
        super().__init__(f"Could not find location for {place_name!r}")
        self.place_name = place_name
