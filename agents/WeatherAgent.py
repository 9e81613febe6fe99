"""
Open-Meteo daily forecast for a destination.

Returns an Outcome: ``Ok(list[WeatherDay])`` or ``Degraded([], reason)``.
Never raises; a missing forecast must not fail a planning request.
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Optional

import requests

import config
from schemas import Coordinates, WeatherDay

from . import GeoAgent
from .outcomes import PAYLOAD_ERRORS, Degraded, Ok

log = logging.getLogger(__name__)

_FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

FORECAST_DAYS = 7

# WMO weather interpretation codes
WEATHER_CODES = MappingProxyType({
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Foggy",
    51: "Light rain",
    53: "Moderate rain",
    55: "Heavy rain",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Rain showers",
    95: "Thunderstorm",
})


def describe_code(code: Optional[int]) -> str:
    return WEATHER_CODES.get(code, "Unknown")


def round_temp(value: Optional[float]) -> Optional[int]:
    """Round half-up to the nearest whole degree (2.5 -> 3, -2.5 -> -2).

    Open-Meteo sends null past the end of its horizon; that stays None.
    """
    if value is None:
        return None
    return int(math.floor(float(value) + 0.5))


def _parse_daily(payload: dict) -> list[WeatherDay]:
    daily = payload["daily"]
    dates = daily["time"][:FORECAST_DAYS]
    highs = daily["temperature_2m_max"]
    lows = daily["temperature_2m_min"]
    codes = daily["weathercode"]

    forecast = []
    for i, date in enumerate(dates):
        code = None if codes[i] is None else int(codes[i])
        forecast.append(WeatherDay(
            date=str(date),
            temp_max_c=round_temp(highs[i]),
            temp_min_c=round_temp(lows[i]),
            condition=describe_code(code),
            raw_code=code,
        ))
    return forecast


def fetch_forecast(destination: str, coords: Optional[Coordinates] = None):
    """Fetch the 7-day forecast for *destination*.

    *coords* skips geocoding when the caller has already resolved the place.
    """
    if coords is None:
        location = GeoAgent.locate(destination)
        if isinstance(location, Degraded):
            return Degraded([], location.reason)
        coords = location.value

    try:
        params = {
            "latitude": coords.latitude,
            "longitude": coords.longitude,
            "daily": "temperature_2m_max,temperature_2m_min,weathercode",
            "timezone": "auto",
            "forecast_days": FORECAST_DAYS,
        }
        resp = requests.get(_FORECAST_URL, params=params, timeout=config.http_timeout())
        resp.raise_for_status()
        forecast = _parse_daily(resp.json())
    except requests.RequestException as exc:
        log.warning("Weather lookup failed for %s: %s", destination, exc)
        return Degraded([], f"Weather API error: {exc}")
    except PAYLOAD_ERRORS as exc:
        log.warning("Malformed weather payload for %s: %s", destination, exc)
        return Degraded([], f"Malformed weather payload: {exc}")

    log.info("Weather forecast for %s: %d days", destination, len(forecast))
    return Ok(forecast)
