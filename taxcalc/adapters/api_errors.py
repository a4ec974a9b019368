"""Typed failures raised by the tax service adapter.

The service reports errors with a plain-text body (``"Income must be
positive"``); JSON bodies with an ``error``/``message``/``detail`` field are
accepted too so a proxy in front of the service does not hide the reason.
"""

from __future__ import annotations

from typing import Any, Optional

_REASON_KEYS = ("error", "message", "detail")
_BODY_SNIPPET = 400


class ApiError(RuntimeError):
    """Base class for tax service adapter failures.

    Attributes:
        status: HTTP status when a response was received.
        hint: Short reason sent by the service, shown to users for 4xx.
        payload: Decoded error body (JSON value or text snippet).
        context: Operation label such as ``"calculate"`` or ``"GET <url>"``.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx: the request was rejected."""


class ApiServerError(ApiError):
    """HTTP 5xx: the service failed while handling the request."""


class ApiTimeoutError(ApiError):
    """No response: timeout, refused connection, or DNS failure."""


class ApiDecodeError(ApiError):
    """2xx response whose body is not the JSON shape the caller expects."""


def read_error_body(resp: Any) -> Any:
    """Return the decoded JSON error body, else a text snippet, else ``None``."""
    try:
        return resp.json()
    except ValueError:
        text = (getattr(resp, "text", "") or "").strip()
        return text[:_BODY_SNIPPET] or None


def error_reason(payload: Any) -> Optional[str]:
    """Pick the human-readable reason out of an error body."""
    if isinstance(payload, str):
        return payload.strip() or None
    if isinstance(payload, dict):
        for key in _REASON_KEYS:
            reason = error_reason(payload.get(key))
            if reason:
                return reason
    if isinstance(payload, list):
        for item in payload:
            reason = error_reason(item)
            if reason:
                return reason
    return None


def describe_failure(ctx: str, status: int, reason: Optional[str]) -> str:
    """Log-friendly summary, e.g. ``"calculate: Income must be positive (HTTP 400)"``."""
    if reason:
        return f"{ctx}: {reason} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


__all__ = [
    "ApiClientError",
    "ApiDecodeError",
    "ApiError",
    "ApiServerError",
    "ApiTimeoutError",
    "describe_failure",
    "error_reason",
    "read_error_body",
]
