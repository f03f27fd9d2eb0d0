"""Tests for suggestion JSON recovery."""

import json

import pytest

from bouquetai.errors import FormatError, SuggestionParseError, SuggestionSchemaError
from bouquetai.recovery import parse_suggestions, strip_code_fences

VALID = {"suggestions": [["rose", "lily", "tulip"], ["peony", "iris", "daisy", "orchid"]]}


def test_plain_json_is_parsed():
    result = parse_suggestions(json.dumps(VALID))

    assert result.suggestions == (("rose", "lily", "tulip"), ("peony", "iris", "daisy", "orchid"))


@pytest.mark.parametrize(
    "wrapped",
    [
        "```json\n{payload}\n```",
        "```\n{payload}\n```",
        "```{payload}```",
        "Here you go:\n```json\n{payload}\n```\n",
    ],
)
def test_code_fences_are_stripped_losslessly(wrapped):
    payload = json.dumps(VALID, indent=2)

    fenced = parse_suggestions(wrapped.replace("{payload}", payload))

    assert fenced == parse_suggestions(payload)


def test_strip_is_idempotent():
    text = "```json\n" + json.dumps(VALID) + "\n```"

    once = strip_code_fences(text)

    assert strip_code_fences(once) == once


@pytest.mark.parametrize("size", [3, 4, 5])
def test_combination_sizes_within_bounds_are_valid(size):
    flowers = [f"flower{i}" for i in range(size)]

    result = parse_suggestions(json.dumps({"suggestions": [flowers, flowers]}))

    assert len(result.suggestions[0]) == size


@pytest.mark.parametrize("size", [2, 6])
def test_combination_sizes_outside_bounds_are_rejected(size):
    bad = [f"flower{i}" for i in range(size)]
    good = ["rose", "lily", "tulip"]

    with pytest.raises(SuggestionSchemaError, match="Invalid suggestion array format"):
        parse_suggestions(json.dumps({"suggestions": [good, bad]}))


def test_garbage_is_a_parse_error():
    with pytest.raises(SuggestionParseError, match="Failed to parse API response"):
        parse_suggestions("Sure! Roses and lilies would be lovely.")


def test_empty_text_is_a_parse_error():
    with pytest.raises(SuggestionParseError):
        parse_suggestions("")


@pytest.mark.parametrize(
    "payload, message",
    [
        ([["rose", "lily", "tulip"]], "not an object"),
        (None, "not an object"),
        ({"suggestions": "rose, lily"}, "suggestions is not an array"),
        ({"ideas": [["rose", "lily", "tulip"]]}, "suggestions is not an array"),
        ({"suggestions": [["rose", "lily", 3], ["a", "b", "c"]]}, "Invalid suggestion array format"),
        ({"suggestions": ["rose", "lily", "tulip"]}, "Invalid suggestion array format"),
        ({"suggestions": [["rose", "lily", "tulip"]]}, "Expected 2 suggestions"),
    ],
)
def test_wrong_shape_is_a_schema_error(payload, message):
    with pytest.raises(SuggestionSchemaError, match=message):
        parse_suggestions(json.dumps(payload))


def test_both_failures_are_format_errors():
    assert issubclass(SuggestionParseError, FormatError)
    assert issubclass(SuggestionSchemaError, FormatError)
    assert not issubclass(SuggestionSchemaError, SuggestionParseError)
