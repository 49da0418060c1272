"""
Tolerant parser for the automation webhook's recipe reply.

The reply may be a JSON object, a JSON-encoded string, or plain text, and the
recipe itself may sit under an ``output`` field that is a JSON string of its
own. Keys come capitalized (``Title``) or lowercase (``title``).

``parse_webhook_response`` never raises: malformed input comes back as
``Unparsable`` so the caller can show a "check manually" notice instead.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union


class ResponseParseError(ValueError):
    """Raised internally when the payload cannot be decoded into a recipe object."""


@dataclass(frozen=True)
class ParsedRecipe:
    """Recipe fields found in a webhook reply. ``None`` means not provided."""
    title: Optional[str] = None
    category: Optional[str] = None
    country: Optional[str] = None
    ingredients: Optional[List[str]] = None
    steps: Optional[List[str]] = None


@dataclass(frozen=True)
class Unparsable:
    reason: str


ParseResult = Union[ParsedRecipe, Unparsable]


def _decode(value: str) -> Any:
    try:
        return json.loads(value)
    except (TypeError, ValueError) as e:
        raise ResponseParseError(f"Invalid JSON: {e}") from e


def extract_candidate(payload: Any) -> Any:
    """
    Locate the object that should hold the recipe fields.

    Raises:
        ResponseParseError: If a JSON string along the way does not decode
    """
    # Automation tools often answer with a one-item list
    if isinstance(payload, list) and len(payload) == 1:
        payload = payload[0]

    if isinstance(payload, dict) and 'output' in payload:
        output = payload['output']
        return _decode(output) if isinstance(output, str) else output

    if isinstance(payload, str):
        return _decode(payload)
    return payload


def _first(candidate: dict, *keys: str) -> Any:
    """
    Value of the first key holding something other than null or an empty string.

    An empty list still wins over later keys, so ``Ingredients: []`` hides a
    lowercase ``ingredients`` and is then rejected as absent by ``_lines``.
    """
    for key in keys:
        value = candidate.get(key)
        if value is not None and value != '':
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _lines(value: Any) -> Optional[List[str]]:
    """
    Accept only non-empty sequences; anything else is treated as absent.

    Numbers are kept as text. Nulls and nested objects are dropped.
    """
    if not isinstance(value, (list, tuple)):
        return None
    lines = [
        item if isinstance(item, str) else str(item)
        for item in value
        if isinstance(item, (str, int, float)) and not isinstance(item, bool)
    ]
    return lines or None


def parse_webhook_response(payload: Any) -> ParseResult:
    """
    Turn the envelope's ``response`` into recipe fields.

    Args:
        payload: The ``response`` field of the relay envelope

    Returns:
        ParsedRecipe when a title, ingredients or steps were found,
        Unparsable otherwise
    """
    try:
        candidate = extract_candidate(payload)
    except ResponseParseError as e:
        return Unparsable(reason=str(e))

    if not isinstance(candidate, dict):
        return Unparsable(reason=f"Expected an object, got {type(candidate).__name__}")

    parsed = ParsedRecipe(
        title=_text(_first(candidate, 'Title', 'title')),
        category=_text(candidate.get('category')),
        country=_text(candidate.get('country')),
        ingredients=_lines(_first(candidate, 'Ingredients', 'ingredients')),
        steps=_lines(_first(candidate, 'Steps', 'steps')),
    )

    if not (parsed.title or parsed.ingredients or parsed.steps):
        return Unparsable(reason="No title, ingredients or steps found")
    return parsed
