"""Translate adapter and validation failures into ``UseCaseError`` values.

Server-side and transport failures keep the caller's fixed message so outages
never leak internals to the page. Rejected requests (4xx) append the reason
the service sent back, e.g. ``"Calculation failed: Income must be positive"``.
"""

from __future__ import annotations

from typing import Optional

from taxcalc.adapters.api_errors import (
    ApiClientError,
    ApiDecodeError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    error_reason,
)
from taxcalc.domain.errors import ValidationError
from taxcalc.domain.ports import UseCaseError

AUTH_FAILED_MESSAGE = "Auth failed / API key invalid."

_CLIENT_STATUS_CODES = {
    400: "INVALID_INPUT",
    401: "AUTH_FAILED",
    403: "AUTH_FAILED",
    404: "NOT_FOUND",
    422: "INVALID_INPUT",
}


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map ``exc`` to a stable error code and user-facing message.

    Args:
        exc: Exception raised by an adapter or by validation.
        default_code: Code for exceptions outside the API hierarchy.
        default_message: Fixed text for the failing operation.
    """
    base = default_message or "Request failed."
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ValidationError):
        return UseCaseError("INVALID_INPUT", exc.message)
    if isinstance(exc, ApiClientError):
        return _map_client_error(exc, base)
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", base)
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", base)
    if isinstance(exc, ApiDecodeError):
        return UseCaseError("INVALID_RESPONSE", base)
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", base)
    return UseCaseError(default_code, base)


def _map_client_error(exc: ApiClientError, base: str) -> UseCaseError:
    code = _CLIENT_STATUS_CODES.get(exc.status or 0, "REQUEST_FAILED")
    if code == "AUTH_FAILED":
        return UseCaseError(code, AUTH_FAILED_MESSAGE)
    reason = (exc.hint or error_reason(exc.payload) or "").strip()
    if not reason:
        return UseCaseError(code, base)
    return UseCaseError(code, f"{base.rstrip('.')}: {reason}")


__all__ = ["AUTH_FAILED_MESSAGE", "map_api_error"]
