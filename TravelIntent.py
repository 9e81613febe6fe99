import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dataclasses_json import dataclass_json

# Groups of interest tags the POI lookup understands, with a human label
# used in the reasoning trace.
INTEREST_GROUPS = {
    "hiking trails": frozenset({"hiking", "nature"}),
    "restaurants": frozenset({"food", "dining"}),
    "attractions": frozenset({"sightseeing", "tourism"}),
}


@dataclass_json
@dataclass(frozen=True)
class TravelIntent:
    destination: str
    duration_days: int
    interests: Tuple[str, ...] = field(default_factory=tuple)
    budget: Optional[str] = None
    dates: Optional[str] = None

    @classmethod
    def default(cls) -> "TravelIntent":
        """Intent used when the model's answer cannot be parsed."""
        return cls(
            destination="Colorado",
            duration_days=3,
            interests=("hiking", "nature"),
            budget="moderate",
        )

    @classmethod
    def from_model_payload(cls, payload: dict) -> "TravelIntent":
        """Build an intent from the extractor's JSON object.

        Raises ValueError / KeyError / TypeError when the payload does not
        describe a usable intent.
        """
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object, got {type(payload).__name__}")

        destination = str(payload["destination"] or "").strip()
        if not destination:
            raise ValueError("intent has no destination")

        duration = _coerce_days(payload.get("duration"))

        raw_interests = payload.get("interests") or []
        if isinstance(raw_interests, str):
            raw_interests = [raw_interests]
        if not isinstance(raw_interests, list):
            raise TypeError("interests must be a list of strings")
        interests: list[str] = []
        for tag in raw_interests:
            tag = str(tag).strip()
            if tag and tag not in interests:
                interests.append(tag)

        return cls(
            destination=destination,
            duration_days=duration,
            interests=tuple(interests),
            budget=_optional_str(payload.get("budget")),
            dates=_optional_str(payload.get("dates")),
        )

    def interest_tags(self) -> frozenset:
        """Lower-cased interests, for matching against INTEREST_GROUPS."""
        return frozenset(tag.lower() for tag in self.interests)

    def matched_groups(self) -> list[str]:
        tags = self.interest_tags()
        return [label for label, group in INTEREST_GROUPS.items() if tags & group]


def _coerce_days(value) -> int:
    # Models sometimes answer "3 days" instead of 3
    if isinstance(value, bool):
        raise TypeError("duration must be a number of days")
    if isinstance(value, str):
        m = re.search(r"\d+", value)
        if not m:
            raise ValueError(f"no day count in duration {value!r}")
        value = m.group(0)
    days = int(value)
    if days < 1:
        raise ValueError(f"duration must be at least one day, got {days}")
    return days


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
