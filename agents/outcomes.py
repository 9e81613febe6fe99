"""
Tagged results for external calls.

Every lookup or parse in the pipeline ends in one of three states:

  Ok(value)               the call worked
  Degraded(value, reason) the call failed softly; ``value`` is the empty/default
                          stand-in and the pipeline carries on
  Fatal(reason)           the call failed hard; the request must abort

Callers branch on the variant with ``isinstance`` rather than catching
exceptions for soft failures.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .errors import UpstreamUnavailable

log = logging.getLogger(__name__)

T = TypeVar("T")

# Exceptions that mean "the payload was not what we expected".
PAYLOAD_ERRORS = (ValueError, KeyError, TypeError, IndexError, AttributeError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Fatal:
    reason: str

    def unwrap(self):
        raise UpstreamUnavailable(self.reason)


Outcome = Union[Ok[T], Degraded[T], Fatal]


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ``` or ``` ... ```)."""
    cleaned = text.strip()
    if "```json" in cleaned:
        cleaned = cleaned.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in cleaned:
        cleaned = cleaned.split("```", 1)[1].split("```", 1)[0]
    return cleaned.strip()


def safe_json_parse(text: str) -> Any:
    """Extract and parse JSON from an LLM response that may include markdown fences."""
    return json.loads(strip_code_fences(text or ""))


def parse_or_default(
    text: str,
    parser: Callable[[Any], T],
    default: Callable[[], T],
) -> Union[Ok[T], Degraded[T]]:
    """Parse model output as JSON and hand it to *parser*.

    Any JSON or shape error yields ``Degraded(default(), reason)``; nothing is
    raised for bad content.
    """
    try:
        return Ok(parser(safe_json_parse(text)))
    except PAYLOAD_ERRORS as exc:
        log.debug("Falling back to default after parse failure: %s", exc)
        return Degraded(default(), f"unparsable model output: {exc}")
