"""
Pipeline data model and its JSON wire shape.

Field names are Pythonic; ``config(field_name=...)`` maps them to the keys the
chat UI reads. Optional fields are left out of the wire dict when unset.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from dataclasses_json import config, dataclass_json


def _wire(name: str, optional: bool = False) -> dict:
    if optional:
        return config(field_name=name, exclude=lambda value: value is None)
    return config(field_name=name)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass_json
@dataclass(frozen=True)
class WeatherDay:
    date: str
    # None where the provider had no value for that day; sent as null
    temp_max_c: Optional[int] = field(metadata=_wire("tempMax"))
    temp_min_c: Optional[int] = field(metadata=_wire("tempMin"))
    condition: str
    raw_code: Optional[int] = field(metadata=_wire("weatherCode"))


@dataclass_json
@dataclass(frozen=True)
class PointOfInterest:
    id: Union[str, int]
    name: str
    category: str = field(metadata=_wire("type"))
    latitude: Optional[float] = field(default=None, metadata=_wire("lat", optional=True))
    longitude: Optional[float] = field(default=None, metadata=_wire("lon", optional=True))
    description: Optional[str] = field(default=None, metadata=_wire("description", optional=True))


@dataclass_json
@dataclass(frozen=True)
class DayWeather:
    condition: str
    temp_c: Optional[float] = field(default=None, metadata=_wire("temp", optional=True))
    description: Optional[str] = field(default=None, metadata=_wire("description", optional=True))


@dataclass_json
@dataclass(frozen=True)
class Activity:
    time: str
    activity: str
    location: Optional[str] = field(default=None, metadata=_wire("location", optional=True))
    details: Optional[str] = field(default=None, metadata=_wire("details", optional=True))


@dataclass_json
@dataclass(frozen=True)
class ItineraryDay:
    day_number: int = field(metadata=_wire("day"))
    label: str = field(default="", metadata=_wire("date"))
    weather: Optional[DayWeather] = field(default=None, metadata=_wire("weather", optional=True))
    activities: List[Activity] = field(default_factory=list)


@dataclass_json
@dataclass(frozen=True)
class Itinerary:
    destination: str
    duration_label: str = field(metadata=_wire("duration"))
    days: List[ItineraryDay] = field(default_factory=list)
    budget: Optional[str] = field(default=None, metadata=_wire("budget", optional=True))
    recommendations: Optional[List[str]] = field(
        default=None, metadata=_wire("recommendations", optional=True)
    )

    @classmethod
    def from_model_payload(cls, payload: dict) -> "Itinerary":
        """Decode the synthesizer's JSON object, rejecting shapes the UI cannot render."""
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
        days = payload.get("days")
        if not isinstance(days, list) or not all(isinstance(d, dict) for d in days):
            raise ValueError("itinerary 'days' must be a list of objects")
        for day in days:
            if not isinstance(day.get("activities", []), list):
                raise ValueError("day 'activities' must be a list")
        duration = payload.get("duration")
        if duration is None or (isinstance(duration, str) and not duration.strip()):
            raise ValueError("itinerary has no duration")
        payload = dict(payload)
        # "duration" is a label ("3 days"); models sometimes send a bare number
        if not isinstance(duration, str):
            payload["duration"] = str(duration)
        return cls.from_dict(payload)


@dataclass_json
@dataclass(frozen=True)
class ResponseEnvelope:
    narrative: str = field(metadata=_wire("response"))
    reasoning_trace: List[str] = field(metadata=_wire("thinking"))
    itinerary: Itinerary
