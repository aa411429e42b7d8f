"""
Input Validation for the Graph API
==================================

Provides validation helpers for API parameters with clear error messages.

Usage
-----
    from crmgraph.analytics.validation import (
        ValidationError, validate_limit, validate_person_id
    )

    try:
        limit = validate_limit(limit_param)
        person_id = validate_person_id(body.get("from_person_id"), "from_person_id")
    except ValidationError as e:
        return e.to_response()

Error Response Format
--------------------
Validation errors use the same format as errors.py:

    {
        "success": False,
        "error": {
            "code": "INVALID_PARAMETER",
            "message": "...",
            "httpStatus": 400,
            "details": { "parameter": "...", "value": "..." }
        }
    }
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .config import Config
from .errors import ErrorCode, api_error
from .utils import is_uuid, normalize_person_id


@dataclass
class ValidationError(Exception):
    """Validation error with details for API response."""

    parameter: str
    message: str
    value: Any = None

    http_status = ErrorCode.INVALID_PARAMETER.http_status

    def to_response(self) -> Dict[str, Any]:
        """Convert to API error response dict."""
        return api_error(
            ErrorCode.INVALID_PARAMETER,
            str(self),
            details={
                "parameter": self.parameter,
                "value": str(self.value) if self.value is not None else None,
            }
        )

    def __str__(self) -> str:
        return f"Invalid '{self.parameter}': {self.message}"


def validate_int(
    value: Any,
    name: str,
    default: Optional[int] = None,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    """
    Validate and convert a value to a bounded integer.

    Args:
        value: Input value (may be string from query param)
        name: Parameter name for error messages
        default: Default value if None or empty
        min_value: Minimum allowed value (optional)
        max_value: Maximum allowed value (optional)

    Raises:
        ValidationError: If value is missing without default, not an
            integer, or out of bounds
    """
    if value is None or value == "":
        if default is not None:
            return default
        raise ValidationError(name, "is required", value)

    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValidationError(name, f"must be an integer, got '{value}'", value)

    try:
        int_val = int(value)
    except (ValueError, TypeError):
        raise ValidationError(name, f"must be an integer, got '{value}'", value)

    if isinstance(value, float) and value != int_val:
        raise ValidationError(name, f"must be an integer, got '{value}'", value)

    if min_value is not None and int_val < min_value:
        raise ValidationError(name, f"must be at least {min_value}, got {int_val}", value)

    if max_value is not None and int_val > max_value:
        raise ValidationError(name, f"must be at most {max_value}, got {int_val}", value)

    return int_val


def validate_limit(value: Any) -> int:
    """Validate the central-nodes ``limit`` parameter."""
    return validate_int(
        value,
        "limit",
        default=Config.API.DEFAULT_CENTRAL_LIMIT,
        min_value=1,
        max_value=Config.API.MAX_CENTRAL_LIMIT,
    )


def validate_max_connections(value: Any) -> int:
    """Validate the isolation threshold ``max_connections``."""
    return validate_int(
        value,
        "max_connections",
        default=Config.API.DEFAULT_MAX_CONNECTIONS,
        min_value=0,
        max_value=Config.API.MAX_MAX_CONNECTIONS,
    )


def validate_min_strength(value: Any) -> Optional[int]:
    """Validate the optional ``min_strength`` graph filter (1-5)."""
    if value is None or value == "":
        return None
    return validate_int(value, "min_strength", min_value=1, max_value=5)


def validate_max_degrees(value: Any, name: str = "max_degrees") -> int:
    """Validate a pathfinder hop bound."""
    return validate_int(
        value,
        name,
        default=Config.PATH.DEFAULT_MAX_DEGREES,
        min_value=1,
        max_value=Config.PATH.MAX_ALLOWED_DEGREES,
    )


def validate_focus_degrees(value: Any) -> Union[int, str]:
    """
    Validate focused-view depth: 1-6 or the literal "all".

    Returns:
        The integer depth, or "all" for an unbounded walk
    """
    if isinstance(value, str) and value.strip().lower() == "all":
        return "all"
    return validate_int(
        value,
        "degrees",
        default=Config.FOCUS.DEFAULT_DEGREES,
        min_value=1,
        max_value=Config.FOCUS.MAX_CUMULATIVE_DEGREE,
    )


def validate_person_id(value: Any, name: str, required: bool = True) -> Optional[str]:
    """
    Validate and normalize a person id parameter.

    Person ids at the HTTP boundary are UUIDs.

    Raises:
        ValidationError: If missing (when required) or not a UUID
    """
    if value is None or value == "":
        if required:
            raise ValidationError(name, "is required", value)
        return None

    if not isinstance(value, str) or not is_uuid(value):
        raise ValidationError(name, f"must be a valid UUID, got '{value}'", value)

    return normalize_person_id(value)


def validate_relationship_type(value: Any) -> Optional[str]:
    """Validate the optional ``type`` graph filter (an open label)."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError("type", f"must be a string, got '{value}'", value)

    label = value.strip()
    if not label or len(label) > 64:
        raise ValidationError("type", "must be 1-64 characters", value)
    return label
