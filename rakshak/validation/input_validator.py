"""
Input Validator

Normalizes and type-checks a raw sensor payload before it reaches the
DecisionEngine. NaN compares false against every threshold, so a NaN impact
would silently fall through the rule table; such payloads are rejected here.

Pure functions, no side effects.
"""

import logging
import math
import re
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from rakshak.errors import ValidationError
from rakshak.models.reading import Reading

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_MAX_LENGTH = 100

NUMERIC_FIELDS = ("impact", "speed", "tilt")

# Control characters (newline and carriage return included) plus markup/quote
# characters that could break out of a prompt or an SMS body.
_UNSAFE_LOCATION_CHARS = re.compile(r"[\x00-\x1f\x7f<>`\"']")

_RANGES = {
    "impact": (0.0, None),
    "speed": (0.0, None),
    "tilt": (0.0, 180.0),
}


def sanitize_location(text: str, max_length: int = DEFAULT_LOCATION_MAX_LENGTH) -> str:
    """
    Strip unsafe characters, trim, and truncate to max_length.

    Idempotent: sanitize_location(sanitize_location(x)) == sanitize_location(x).
    """
    cleaned = _UNSAFE_LOCATION_CHARS.sub("", text).strip()
    return cleaned[:max_length].rstrip()


def _parse_number(name: str, value: Any) -> float:
    if value is None:
        raise ValidationError(f"Missing sensor value: {name}", field=name)
    # bool is an int subclass; True is not a sensor value
    if isinstance(value, bool):
        raise ValidationError(f"Sensor value {name} must be a number", field=name)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # JSON integers are unbounded
            raise ValidationError(f"Sensor value {name} must be finite", field=name)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(f"Sensor value {name} must be a number", field=name)
    else:
        raise ValidationError(f"Sensor value {name} must be a number", field=name)

    if not math.isfinite(number):
        raise ValidationError(f"Sensor value {name} must be finite", field=name)

    low, high = _RANGES[name]
    if low is not None and number < low:
        raise ValidationError(f"Sensor value {name} must be >= {low:g}", field=name)
    if high is not None and number > high:
        raise ValidationError(f"Sensor value {name} must be <= {high:g}", field=name)
    return number


def validate_reading(
    payload: Any,
    max_location_length: int = DEFAULT_LOCATION_MAX_LENGTH,
) -> Reading:
    """
    Build a Reading from an untyped payload.

    Args:
        payload: Decoded request body.
        max_location_length: Truncation length for the location text.

    Returns:
        Immutable Reading.

    Raises:
        ValidationError: On any missing, non-numeric, non-finite or
            out-of-range field, or an empty location.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Sensor payload must be a JSON object")

    values = {name: _parse_number(name, payload.get(name)) for name in NUMERIC_FIELDS}

    location = payload.get("location")
    if not isinstance(location, str):
        raise ValidationError("Invalid or missing location", field="location")
    safe_location = sanitize_location(location, max_location_length)
    if not safe_location:
        raise ValidationError("Location must not be empty", field="location")

    try:
        return Reading(location=safe_location, **values)
    except PydanticValidationError as e:
        # Reading schema and the checks above must agree
        logger.warning(f"[InputValidator] Reading rejected by schema: {e}")
        raise ValidationError("Invalid sensor data") from e
