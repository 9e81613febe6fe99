"""
Trip planning pipeline (litellm + open data lookups)

One request runs four steps:

  1. Intent extraction      → 1 LLM call
  2. Weather + POI lookups  → Open-Meteo / Overpass, in parallel (no LLM)
  3. Itinerary synthesis    → 1 LLM call (receives intent + forecast + POIs)
  4. Response assembly      → narrative sentence + reasoning trace

Parsing of model output never fails a request: unparsable intent falls back
to a default intent, unparsable itineraries to a generic day-by-day plan.
Only a failed LLM call itself (UpstreamUnavailable) aborts the request.
Lookup failures degrade to empty results.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Generator, Sequence

import litellm

import config
from schemas import Activity, DayWeather, Itinerary, ItineraryDay, PointOfInterest, ResponseEnvelope, WeatherDay
from TravelIntent import TravelIntent

from . import GeoAgent, POIAgent, WeatherAgent
from .errors import PlanningError
from .outcomes import Degraded, Fatal, Ok, parse_or_default

logger = logging.getLogger(__name__)

# Silence litellm's own verbose logging
litellm.suppress_debug_info = True
# Drop params unsupported by the active model (e.g. temperature on gpt-5)
litellm.drop_params = True


# ---------------------------------------------------------------------------
# Core LLM call wrapper
# ---------------------------------------------------------------------------

def _llm_call(system_prompt: str, user_prompt: str, temperature: float = 0.7):
    """Make a single litellm.completion() call.

    Returns Ok(text) or Fatal(reason). Content is not inspected here; an
    empty completion comes back as Ok("").
    """
    try:
        response = litellm.completion(
            model=config.llm_name(),
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            timeout=config.llm_timeout(),
        )
    except Exception as exc:
        logger.error("LLM call failed: %s", exc)
        return Fatal(f"AI API error: {exc}")
    return Ok(response.choices[0].message.content or "")


# ---------------------------------------------------------------------------
# Step 1: Intent extraction (1 LLM call)
# ---------------------------------------------------------------------------

_INTENT_SYSTEM = """\
You are a travel intent analyzer. Extract destination, duration, interests, \
and budget from user requests. Return JSON only, no markdown fences, no \
extra text."""


def _intent_prompt(user_text: str) -> str:
    return (
        f'Extract travel details from: "{user_text}". '
        "Return a JSON object with: destination, duration (in days), "
        "interests (array), budget (optional), dates (optional)."
    )


def extract_intent(user_text: str) -> TravelIntent:
    """Turn a free-text request into a TravelIntent.

    Raises UpstreamUnavailable if the model call fails; unparsable output
    yields TravelIntent.default().
    """
    raw = _llm_call(_INTENT_SYSTEM, _intent_prompt(user_text), temperature=0.2).unwrap()
    outcome = parse_or_default(raw, TravelIntent.from_model_payload, TravelIntent.default)
    if isinstance(outcome, Degraded):
        logger.warning("Intent parse failed, using default intent: %s", outcome.reason)
    intent = outcome.value
    logger.info("Extracted intent: %s", intent)
    return intent


# ---------------------------------------------------------------------------
# Step 3: Itinerary synthesis (1 LLM call)
# ---------------------------------------------------------------------------

_ITINERARY_SYSTEM = """\
You are an expert travel planner. Create detailed, realistic itineraries that \
respect the weather forecast and use the points of interest you are given. \
Return only valid JSON."""

FALLBACK_RECOMMENDATIONS = ("Pack layers", "Book activities in advance")


def _synthesis_prompt(
    intent: TravelIntent,
    forecast: Sequence[WeatherDay],
    pois: Sequence[PointOfInterest],
) -> str:
    weather_json = json.dumps([w.to_dict() for w in forecast])
    poi_json = json.dumps([p.to_dict() for p in pois], default=str)
    interests = ", ".join(intent.interests) or "general sightseeing"
    extras = ""
    if intent.budget:
        extras += f"Budget: {intent.budget}\n"
    if intent.dates:
        extras += f"Travel dates: {intent.dates}\n"

    return f"""Create a detailed {intent.duration_days}-day travel itinerary for {intent.destination}.

User interests: {interests}
{extras}Weather forecast: {weather_json}
Available points of interest: {poi_json}

Create a JSON itinerary with this structure:
{{
  "destination": "{intent.destination}",
  "duration": "{intent.duration_days} days",
  "days": [
    {{
      "day": 1,
      "date": "Day 1 - [Date]",
      "weather": {{ "condition": "Sunny", "temp": 20, "description": "Perfect for outdoor activities" }},
      "activities": [
        {{ "time": "9:00 AM", "activity": "Activity name", "location": "Location", "details": "Details" }}
      ]
    }}
  ],
  "budget": "Estimated budget",
  "recommendations": ["Tip 1", "Tip 2"]
}}

Include exactly {intent.duration_days} days. Make it realistic, considering weather \
and available POIs. Be specific and actionable.

Return ONLY valid JSON."""


def _day_weather(day: WeatherDay) -> DayWeather:
    description = None
    if day.temp_max_c is not None and day.temp_min_c is not None:
        description = f"High {day.temp_max_c}°C / Low {day.temp_min_c}°C"
    return DayWeather(condition=day.condition, temp_c=day.temp_max_c, description=description)


def _build_fallback_itinerary(
    intent: TravelIntent, forecast: Sequence[WeatherDay] = (),
) -> Itinerary:
    """One generic day per trip day, numbered 1..duration_days."""
    days = []
    for i in range(intent.duration_days):
        day_number = i + 1
        days.append(ItineraryDay(
            day_number=day_number,
            label=f"Day {day_number}",
            weather=_day_weather(forecast[i]) if i < len(forecast) else None,
            activities=[Activity(
                time="9:00 AM",
                activity="Explore local attractions",
                location=intent.destination,
            )],
        ))
    return Itinerary(
        destination=intent.destination,
        duration_label=f"{intent.duration_days} days",
        days=days,
        recommendations=list(FALLBACK_RECOMMENDATIONS),
    )


def synthesize_itinerary(
    intent: TravelIntent,
    forecast: Sequence[WeatherDay],
    pois: Sequence[PointOfInterest],
) -> Itinerary:
    """Ask the model for a day-by-day plan.

    Raises UpstreamUnavailable if the model call fails; unparsable output
    yields the fallback itinerary.
    """
    prompt = _synthesis_prompt(intent, forecast, pois)
    raw = _llm_call(_ITINERARY_SYSTEM, prompt, temperature=0.7).unwrap()
    outcome = parse_or_default(
        raw,
        Itinerary.from_model_payload,
        lambda: _build_fallback_itinerary(intent, forecast),
    )
    if isinstance(outcome, Degraded):
        logger.warning("Failed to parse itinerary, using fallback: %s", outcome.reason)
    return outcome.value


# ---------------------------------------------------------------------------
# Step 2: Enrichment (parallel, NO LLM calls)
# ---------------------------------------------------------------------------

def _enrich(intent: TravelIntent) -> tuple[list[WeatherDay], list[PointOfInterest]]:
    """Geocode once, then run the weather and POI lookups side by side.

    Nothing here raises; a failed geocode leaves both lookups empty, and
    degraded outcomes are logged and their empty values used.
    """
    location = GeoAgent.locate(intent.destination)
    if isinstance(location, Degraded):
        logger.warning("Continuing without weather and poi data: %s", location.reason)
        return [], []
    coords = location.value

    with ThreadPoolExecutor(max_workers=2) as pool:
        weather_future = pool.submit(WeatherAgent.fetch_forecast, intent.destination, coords)
        poi_future = pool.submit(POIAgent.fetch_pois, intent.destination, intent.interests, coords)
        weather = weather_future.result()
        pois = poi_future.result()

    for name, outcome in (("weather", weather), ("poi", pois)):
        if isinstance(outcome, Degraded):
            logger.warning("Continuing without %s data: %s", name, outcome.reason)
    return weather.value, pois.value


def _poi_trace(intent: TravelIntent) -> str:
    groups = intent.matched_groups()
    if not groups:
        return "Searching for points of interest in the area"
    if len(groups) == 1:
        return f"Searching for {groups[0]} in the area"
    return f"Searching for {', '.join(groups[:-1])}, and {groups[-1]} in the area"


def _narrative(intent: TravelIntent) -> str:
    return (
        f"I've created a personalized {intent.duration_days}-day itinerary for "
        f"{intent.destination}! The plan includes real weather forecasts and carefully "
        "selected activities based on your interests. Check out the detailed "
        "day-by-day plan below."
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _pipeline(user_text: str) -> Generator[str, None, ResponseEnvelope]:
    """Run the planning steps, yielding each reasoning-trace entry as it is added.

    The generator's return value is the ResponseEnvelope.
    """
    thinking: list[str] = []

    def note(message: str) -> str:
        thinking.append(message)
        return message

    # --- Step 1: Extract ---
    yield note("Analyzing your travel request to understand destination, dates, budget, and preferences")
    intent = extract_intent(user_text)
    yield note(
        f"Identified destination: {intent.destination}, "
        f"Duration: {intent.duration_days} days, "
        f"Interests: {', '.join(intent.interests) or 'none given'}"
    )

    # --- Step 2: Enrich ---
    yield note("Fetching real-time weather forecast for your destination")
    yield note(_poi_trace(intent))
    forecast, pois = _enrich(intent)

    # --- Step 3: Synthesize ---
    yield note("Synthesizing all data into a personalized day-by-day itinerary")
    itinerary = synthesize_itinerary(intent, forecast[:intent.duration_days], pois)

    # --- Step 4: Assemble ---
    yield note("Successfully created your personalized travel plan!")
    return ResponseEnvelope(
        narrative=_narrative(intent),
        reasoning_trace=list(thinking),
        itinerary=itinerary,
    )


class TripPlanner:
    """High-level wrapper around the planning pipeline.

    Total external calls per plan_trip:
      1. Intent extraction   (1 LLM call)
      2. Weather forecast    (Open-Meteo, plus Nominatim on a table miss)
      3. POI search          (Overpass, plus Nominatim on a table miss)
      4. Itinerary synthesis (1 LLM call)
    """

    @staticmethod
    def plan_trip(user_text: str) -> ResponseEnvelope:
        """Run the full planning pipeline.

        Raises UpstreamUnavailable when either LLM call fails.
        """
        pipeline = _pipeline(user_text)
        while True:
            try:
                next(pipeline)
            except StopIteration as done:
                return done.value

    @staticmethod
    def plan_trip_stream(user_text: str) -> Generator[Dict[str, Any], None, None]:
        """Generator that yields SSE progress events while planning."""
        pipeline = _pipeline(user_text)
        try:
            while True:
                yield {"type": "thinking", "message": next(pipeline)}
        except StopIteration as done:
            envelope = done.value
        except PlanningError as exc:
            logger.error("Planning failed: %s", exc)
            yield {"type": "error", "message": str(exc)}
            return

        yield {"type": "complete", **envelope.to_dict()}


# Singleton consumed by main.py via `from agents.planning_agent import planning_agent`
planning_agent = TripPlanner()
