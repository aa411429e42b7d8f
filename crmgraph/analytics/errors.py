"""
Error Handling for the Graph Engine
===================================

Standardized error codes, typed exceptions and response formatting.

Error Codes
-----------
    INVALID_PARAMETER (400): Bad input parameter
    MISSING_PARAMETER (400): Required parameter missing
    UNAUTHORIZED (401): Missing or invalid credentials
    NOT_FOUND (404): No path within bound, unknown person, or a person
                     owned by another account (deliberately indistinguishable)
    INTERNAL_ERROR (500): Unexpected internal error
    DATABASE_ERROR (500): Storage operation failed

Usage
-----
    from crmgraph.analytics.errors import NotFound, api_error_from_exception

    raise NotFound("No connection found within 3 degrees")

    except Exception as e:
        return api_error_from_exception(e)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .db import GraphDBError


class ErrorCode(Enum):
    """Standard error codes for API responses."""

    # Client errors (4xx)
    INVALID_PARAMETER = ("INVALID_PARAMETER", 400, "Invalid or malformed parameter")
    MISSING_PARAMETER = ("MISSING_PARAMETER", 400, "Required parameter missing")
    UNAUTHORIZED = ("UNAUTHORIZED", 401, "Authentication required")
    NOT_FOUND = ("NOT_FOUND", 404, "Requested resource not found")

    # Server errors (5xx)
    INTERNAL_ERROR = ("INTERNAL_ERROR", 500, "An internal error occurred")
    DATABASE_ERROR = ("DATABASE_ERROR", 500, "Database operation failed")

    def __init__(self, code: str, http_status: int, default_message: str):
        self.code = code
        self.http_status = http_status
        self.default_message = default_message


# Shared by NotFound and AuthorizationError so responses cannot be told apart
PERSON_NOT_FOUND_MESSAGE = "Person not found"


@dataclass
class GraphError(Exception):
    """Exception with error code for API responses."""

    error_code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"[{self.error_code.code}] {self.message}"

    @property
    def http_status(self) -> int:
        return self.error_code.http_status

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return api_error(self.error_code, self.message, self.details)


class NotFound(GraphError):
    """No path within the bound, or an endpoint id that does not exist."""

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            ErrorCode.NOT_FOUND,
            message or ErrorCode.NOT_FOUND.default_message,
            details,
        )


class AuthorizationError(GraphError):
    """
    An endpoint id belongs to another owner.

    Carries the owner-neutral 404 payload; ``person_id`` is kept for
    server-side logging only and never serialized.
    """

    def __init__(self, person_id: str):
        super().__init__(ErrorCode.NOT_FOUND, PERSON_NOT_FOUND_MESSAGE, None)
        self.person_id = person_id


class AuthenticationError(GraphError):
    """Missing, malformed or expired credentials."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            ErrorCode.UNAUTHORIZED,
            message or ErrorCode.UNAUTHORIZED.default_message,
            None,
        )


def api_error(
    error_code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build an error API response.

    Example:
        >>> api_error(ErrorCode.INVALID_PARAMETER, "limit must be positive")
        {
            "success": False,
            "error": {
                "code": "INVALID_PARAMETER",
                "message": "limit must be positive",
                "httpStatus": 400
            }
        }
    """
    result = {
        "success": False,
        "error": {
            "code": error_code.code,
            "message": message or error_code.default_message,
            "httpStatus": error_code.http_status,
        }
    }

    if details:
        result["error"]["details"] = details

    return result


def error_code_for(exc: Exception) -> ErrorCode:
    """Map any exception to the ErrorCode its response should carry."""
    if isinstance(exc, GraphError):
        return exc.error_code
    if isinstance(exc, GraphDBError):
        return ErrorCode.DATABASE_ERROR
    return ErrorCode.INTERNAL_ERROR


def api_error_from_exception(exc: Exception) -> Dict[str, Any]:
    """
    Build error response from an exception.

    GraphErrors keep their own code and message. Storage and unexpected
    errors only expose the generic default message.
    """
    if isinstance(exc, GraphError):
        return exc.to_dict()

    return api_error(error_code_for(exc))
