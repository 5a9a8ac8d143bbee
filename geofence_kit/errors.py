"""
Exceptions and error dicts for geofence-kit.

Operations that talk to the outside world (routing) or take free-form user
input (polyline text) report failures as values shaped like
``{"error": "...", "code": "..."}``. The exceptions below carry an
ErrorCode so they can be turned into that shape by handle_api_error.

Usage:
    from geofence_kit.errors import ValidationError, handle_api_error

    try:
        if not is_routing_url(url):
            raise ValidationError("Invalid OSRM API URL", field="url")
        data = await fetch_with_retry(url)
    except Exception as e:
        return {"success": False, **handle_api_error(e)}
"""

from enum import Enum
from typing import Any

import httpx


class ErrorCode(str, Enum):
    """Machine-readable codes used in error dicts."""

    # Caller input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"

    # Upstream data
    INVALID_RESPONSE = "INVALID_RESPONSE"

    # Transport
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class GeofenceKitError(Exception):
    """Base exception for geofence-kit.

    Attributes:
        message: Text shown to the user
        code: ErrorCode of the failure
        details: Extra context, omitted from to_dict() when empty
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        response: dict[str, Any] = {"error": self.message, "code": self.code.value}
        if self.details:
            response["details"] = self.details
        return response


class ValidationError(GeofenceKitError):
    """Caller input that cannot be processed, such as a non-routing URL or an empty path."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)
        self.field = field


class InvalidResponseError(GeofenceKitError):
    """Upstream response that parsed but lacks required data."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.INVALID_RESPONSE, details)


def create_error_response(
    message: str,
    code: ErrorCode | str = ErrorCode.UNKNOWN_ERROR,
    **kwargs: Any,
) -> dict[str, Any]:
    """Build an error dict: ``{"error": message, "code": code, **kwargs}``.

    Example:
        create_error_response(
            "Please enter an encoded polyline string.",
            ErrorCode.VALIDATION_ERROR,
            success=False,
        )
    """
    response: dict[str, Any] = {
        "error": message,
        "code": code.value if isinstance(code, ErrorCode) else code,
    }
    response.update(kwargs)
    return response


def _http_error_response(e: httpx.HTTPError) -> dict[str, Any]:
    if isinstance(e, httpx.HTTPStatusError):
        status = e.response.status_code
        return create_error_response(
            f"API request failed with status: {status}",
            ErrorCode.HTTP_ERROR,
            status_code=status,
        )
    if isinstance(e, httpx.TimeoutException):
        return create_error_response("Request timed out", ErrorCode.TIMEOUT)
    if isinstance(e, (httpx.NetworkError, httpx.ConnectError)):
        return create_error_response(f"Network error: {e}", ErrorCode.NETWORK_ERROR)
    return create_error_response(f"HTTP error: {e}", ErrorCode.HTTP_ERROR)


def handle_api_error(
    e: Exception,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Turn any exception into an error dict.

    geofence-kit errors keep their own code, httpx errors are mapped to
    HTTP_ERROR, TIMEOUT or NETWORK_ERROR, anything else is UNKNOWN_ERROR
    with the exception type attached.

    Args:
        e: The exception to convert
        context: Extra keys merged into the response (e.g. {"url": url})
    """
    if isinstance(e, GeofenceKitError):
        response = e.to_dict()
    elif isinstance(e, httpx.HTTPError):
        response = _http_error_response(e)
    else:
        response = create_error_response(
            str(e) or type(e).__name__,
            ErrorCode.UNKNOWN_ERROR,
            exception_type=type(e).__name__,
        )

    response.update(context or {})
    return response
