"""
Unit tests for agents/outcomes.py
"""
import json
import pytest

from agents.errors import UpstreamUnavailable
from agents.outcomes import Degraded, Fatal, Ok, parse_or_default, safe_json_parse, strip_code_fences


# ---------------------------------------------------------------------------
# safe_json_parse
# ---------------------------------------------------------------------------

class TestSafeJsonParse:
    def test_plain_json_object(self):
        assert safe_json_parse('{"key": "value"}') == {"key": "value"}

    def test_plain_json_array(self):
        assert safe_json_parse('["Paris", "Lyon"]') == ["Paris", "Lyon"]

    def test_strips_json_fence(self):
        text = '```json\n["Tokyo"]\n```'
        assert safe_json_parse(text) == ["Tokyo"]

    def test_strips_plain_fence(self):
        text = '```\n{"a": 1}\n```'
        assert safe_json_parse(text) == {"a": 1}

    def test_ignores_prose_around_fence(self):
        text = 'Here you go:\n```json\n{"a": 1}\n```\nEnjoy!'
        assert safe_json_parse(text) == {"a": 1}

    def test_raises_on_invalid_json(self):
        with pytest.raises(json.JSONDecodeError):
            safe_json_parse("not json at all")

    def test_none_is_invalid(self):
        with pytest.raises(json.JSONDecodeError):
            safe_json_parse(None)


def test_strip_code_fences_leaves_bare_text_alone():
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


# ---------------------------------------------------------------------------
# parse_or_default
# ---------------------------------------------------------------------------

class TestParseOrDefault:
    def test_ok_when_parser_accepts(self):
        outcome = parse_or_default('{"n": 2}', lambda d: d["n"] * 2, lambda: 0)
        assert outcome == Ok(4)

    def test_degraded_on_invalid_json(self):
        outcome = parse_or_default("nope", lambda d: d, lambda: "fallback")
        assert isinstance(outcome, Degraded)
        assert outcome.value == "fallback"
        assert "unparsable" in outcome.reason

    def test_degraded_when_parser_rejects_shape(self):
        outcome = parse_or_default('{"other": 1}', lambda d: d["n"], lambda: -1)
        assert isinstance(outcome, Degraded)
        assert outcome.value == -1

    def test_default_factory_not_called_on_success(self):
        def explode():
            raise AssertionError("default should not be built")
        assert parse_or_default("[1]", lambda d: d, explode) == Ok([1])


class TestUnwrap:
    def test_ok_and_degraded_return_value(self):
        assert Ok(3).unwrap() == 3
        assert Degraded([], "down").unwrap() == []

    def test_fatal_raises_upstream_unavailable(self):
        with pytest.raises(UpstreamUnavailable, match="AI API error: 500"):
            Fatal("AI API error: 500").unwrap()
