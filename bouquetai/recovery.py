"""Recovery of structured suggestion output from free-form model text.

Models frequently wrap the requested JSON in Markdown code fences. This module
strips the fences, parses the payload and enforces the suggestion schema:

    {"suggestions": [["rose", "lily", "tulip"], ...]}

Exactly two combinations are expected, each an array of 3-5 strings. Parse
failures raise `SuggestionParseError`; shape violations raise
`SuggestionSchemaError`, so callers can tell garbage apart from wrong shape.
"""

import json
import logging
import re

from bouquetai.errors import SuggestionParseError, SuggestionSchemaError
from bouquetai.types import SuggestionSet


logger = logging.getLogger(__name__)

MIN_FLOWERS = 3
MAX_FLOWERS = 5
SUGGESTION_COUNT = 2

_CODE_FENCE = re.compile(r"```(?:[\w+-]+)?[ \t]*\n?([\s\S]*?)\n?```")


def strip_code_fences(text: str) -> str:
    """Return the first fenced block's content, or the trimmed text if unfenced.

    Prose around the fence ("Here you go: ...") is dropped along with the
    fence markup and an optional language tag.
    """
    match = _CODE_FENCE.search(text)
    if match is None:
        return text.strip()
    return match.group(1).strip()


def _is_valid_combination(value) -> bool:
    return (
        isinstance(value, list)
        and MIN_FLOWERS <= len(value) <= MAX_FLOWERS
        and all(isinstance(item, str) for item in value)
    )


def parse_suggestions(raw_text: str) -> SuggestionSet:
    """Parse and validate model text into a `SuggestionSet`.

    Raises:
        SuggestionParseError: Text is empty or not valid JSON.
        SuggestionSchemaError: JSON is not an object, `suggestions` is not an
            array, or a combination is not an array of 3-5 strings.
    """
    clean_text = strip_code_fences(raw_text or "")
    logger.debug("Cleaned suggestion text: %r", clean_text)

    try:
        parsed = json.loads(clean_text)
    except ValueError as exc:
        raise SuggestionParseError(f"Failed to parse API response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise SuggestionSchemaError("Invalid JSON format: not an object")

    suggestions = parsed.get("suggestions")
    if not isinstance(suggestions, list):
        raise SuggestionSchemaError("Invalid JSON format: suggestions is not an array")

    if not all(_is_valid_combination(item) for item in suggestions):
        logger.debug("Invalid suggestion arrays: %r", suggestions)
        raise SuggestionSchemaError("Invalid suggestion array format")

    if len(suggestions) != SUGGESTION_COUNT:
        raise SuggestionSchemaError(
            f"Expected {SUGGESTION_COUNT} suggestions, got {len(suggestions)}"
        )

    return SuggestionSet(suggestions=tuple(tuple(item) for item in suggestions))
