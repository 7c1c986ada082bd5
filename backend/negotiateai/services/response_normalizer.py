"""
NegotiateAI Backend - Response Normalizer
==========================================

What:  Turns free-form model output into validated structured data.
How:   Two-step JSON extraction, then Pydantic validation, then a
       caller-supplied fallback. The public entry point never raises.
Who:   AnalysisPipeline (JSON object) and SuggestionPipeline (JSON array).

Extraction strategy:
    1. Parse the whole trimmed text. Accepted only if the top-level value
       is the expected container (dict for OBJECT, list for ARRAY).
    2. Otherwise scan for the first balanced {...} / [...] substring.
       Brackets inside JSON string literals (and escaped quotes) do not
       affect the balance.
    3. Validate the candidate with the caller's validator.

    Any failure along the way is a ParseError; normalize() turns it into
    the fallback value with is_fallback=True.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from negotiateai.exceptions import ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonShape(str, Enum):
    OBJECT = "object"
    ARRAY = "array"


_DELIMITERS = {
    JsonShape.OBJECT: ("{", "}"),
    JsonShape.ARRAY: ("[", "]"),
}

_CONTAINER_TYPES = {
    JsonShape.OBJECT: dict,
    JsonShape.ARRAY: list,
}


@dataclass(frozen=True)
class Normalized(Generic[T]):
    value: T
    is_fallback: bool


def find_balanced(text: str, open_char: str, close_char: str) -> Optional[str]:
    """
    Return the first balanced open_char...close_char substring, or None.

    Only the requested bracket pair is counted. Characters inside double
    quoted strings are skipped, honouring backslash escapes.
    """
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[start:index + 1]
    return None


def extract_json(raw: Optional[str], shape: JsonShape) -> Any:
    """
    Extract a JSON container of the requested shape from raw model text.

    Raises:
        ParseError: Text is empty, or neither strategy yields the container.
    """
    if raw is None or not raw.strip():
        raise ParseError(message="Model response was empty", context={"shape": shape.value})

    stripped = raw.strip()
    expected_type = _CONTAINER_TYPES[shape]

    # ── Strategy 1: whole text ──
    try:
        value = json.loads(stripped)
    except json.JSONDecodeError:
        pass
    else:
        if isinstance(value, expected_type):
            logger.debug("Parsed model response as a whole %s", shape.value)
            return value

    # ── Strategy 2: first balanced substring ──
    open_char, close_char = _DELIMITERS[shape]
    candidate = find_balanced(stripped, open_char, close_char)
    if candidate is None:
        raise ParseError(
            message=f"No JSON {shape.value} found in model response",
            context={"shape": shape.value, "length": len(stripped)},
        )

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(
            message=f"Embedded JSON {shape.value} is malformed",
            context={"shape": shape.value, "error": str(e)},
        )

    logger.debug("Extracted embedded JSON %s from model response", shape.value)
    return value


def parse_structured(raw: Optional[str], shape: JsonShape, validator: Callable[[Any], T]) -> T:
    """
    Extract then validate.

    Raises:
        ParseError: Extraction failed or the value does not fit the schema.
    """
    value = extract_json(raw, shape)
    try:
        return validator(value)
    except PydanticValidationError as e:
        raise ParseError(
            message=f"Model response does not match the expected {shape.value} schema",
            context={"errors": e.error_count()},
        )


def normalize(
    raw: Optional[str],
    shape: JsonShape,
    validator: Callable[[Any], T],
    fallback: Callable[[], T],
    request_id: str = "",
) -> Normalized[T]:
    """
    Never raises: a ParseError yields fallback() flagged as a fallback.

    Args:
        raw:        Model output text.
        shape:      Expected top-level container.
        validator:  Converts the parsed value, raising pydantic's
                    ValidationError on mismatch.
        fallback:   Produces the call-site default value.
        request_id: Prefix for log lines.
    """
    try:
        value = parse_structured(raw, shape, validator)
    except ParseError as e:
        logger.warning("[%s] Using fallback %s: %s %s", request_id, shape.value, e.message, e.context)
        return Normalized(value=fallback(), is_fallback=True)
    return Normalized(value=value, is_fallback=False)
