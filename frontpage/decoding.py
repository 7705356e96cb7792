"""Decoding and shape validation of raw model output.

Two explicit steps:

1. ``decode_json(text)`` strips Markdown code fences and parses JSON,
   returning ``ParsedOk(value)`` or ``ParseFailed(reason)``.
2. ``validate_shape(kind, decoded, schema)`` validates a ``ParsedOk`` value
   field-by-field against a pydantic schema.  Anything else raises
   ``ModelResponseShapeError``; a partially-filled result is never returned.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Union

from pydantic import TypeAdapter, ValidationError

from frontpage.errors import ModelResponseShapeError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedOk:
    value: Any


@dataclass(frozen=True)
class ParseFailed:
    reason: str


DecodeResult = Union[ParsedOk, ParseFailed]


def strip_code_fences(text: str) -> str:
    """Remove every ```` ``` ```` / ```` ```json ```` marker and surrounding whitespace."""
    return _FENCE_RE.sub("", text).strip()


def decode_json(text: str) -> DecodeResult:
    """Parse model text as strict JSON after removing code-fence wrapping.

    Args:
        text: Raw text returned by the model.

    Returns:
        ``ParsedOk`` carrying the decoded value, or ``ParseFailed`` with the
        decoder's explanation.
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        return ParseFailed("empty response")
    try:
        return ParsedOk(json.loads(cleaned))
    except json.JSONDecodeError as exc:
        return ParseFailed(f"invalid JSON: {exc}")


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def validate_shape(kind: str, decoded: DecodeResult, schema: Any) -> Any:
    """Validate a decoded value against *schema* or raise.

    Args:
        kind: Analysis kind, used in the error message.
        decoded: Result of ``decode_json``.
        schema: A pydantic model class or any type ``TypeAdapter`` accepts
            (e.g. ``list[SentimentEntry]``).

    Returns:
        The validated value.

    Raises:
        ModelResponseShapeError: On a parse failure or any schema violation.
    """
    if isinstance(decoded, ParseFailed):
        raise ModelResponseShapeError(kind, decoded.reason)

    try:
        return TypeAdapter(schema).validate_python(decoded.value)
    except ValidationError as exc:
        raise ModelResponseShapeError(kind, _describe(exc)) from exc


def parse_response(kind: str, text: str, schema: Any) -> Any:
    """Decode *text* and validate it against *schema* in one call."""
    decoded = decode_json(text)
    if isinstance(decoded, ParseFailed):
        logger.error("Unparseable %s response from model: %r", kind, text[:500])
    return validate_shape(kind, decoded, schema)
