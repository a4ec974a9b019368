"""REST adapter for the tax calculation service.

Endpoints (relative to ``base_url``):
    GET  /health                       aggregate + per-subsystem health
    GET  {prefix}/history              newest-first list, JSON ``null`` when empty
    POST {prefix}/calculate            one calculation, never retried
    GET  {prefix}/history/{id}         one stored calculation with full encrypted id
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar
from urllib.parse import quote

import requests

from taxcalc.domain.models import (
    CalculationRequest,
    CalculationResult,
    HealthStatus,
    HistoryEntry,
)
from taxcalc.domain.ports import TaxServicePort

from .api_errors import (
    ApiClientError,
    ApiDecodeError,
    ApiError,
    ApiServerError,
    describe_failure,
    error_reason,
    read_error_body,
)
from .http_client import HttpConfig, RetryingSession

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class TaxRestAdapter(TaxServicePort):
    """``TaxServicePort`` over HTTP/JSON using a shared ``RetryingSession``."""

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = "/api",
        api_key: Optional[str] = None,
        request_timeout_s: float = 10,
        retries: int = 0,
    ) -> None:
        if not base_url or not str(base_url).strip():
            raise ValueError("TaxRestAdapter requires a base URL")
        self.base_url = str(base_url).strip().rstrip("/")
        self.api_prefix = self._normalize_prefix(api_prefix)
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(api_key or None, self.cfg)

    def health(self) -> HealthStatus:
        data = self._get_json("/health", "health")
        return self._decode(HealthStatus.from_payload, data, "health")

    def list_history(self) -> List[HistoryEntry]:
        data = self._get_json(f"{self.api_prefix}/history", "history")
        if data is None:
            # Empty result sets arrive as JSON null.
            return []
        if not isinstance(data, list):
            raise ApiDecodeError("history: expected list response", payload=data, context="history")
        entries: List[HistoryEntry] = []
        for position, raw in enumerate(data):
            try:
                entries.append(HistoryEntry.from_payload(raw))
            except ValueError as exc:
                LOGGER.warning("Skipping history row %d: %s", position, exc)
        return entries

    def calculate(self, request: CalculationRequest) -> CalculationResult:
        resp = self.session.post(self._url(f"{self.api_prefix}/calculate"), json_body=request.to_payload())
        data = self._checked_json(resp, "calculate")
        return self._decode(CalculationResult.from_payload, data, "calculate")

    def get_calculation(self, calculation_id: str) -> CalculationResult:
        cleaned = str(calculation_id or "").strip()
        if not cleaned:
            raise ValueError("Calculation id must be a non-empty string.")
        ctx = f"calculation[{cleaned}]"
        data = self._get_json(f"{self.api_prefix}/history/{quote(cleaned, safe='')}", ctx)
        return self._decode(CalculationResult.from_payload, data, ctx)

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get_json(self, path: str, ctx: str) -> Any:
        return self._checked_json(self.session.get(self._url(path)), ctx)

    @staticmethod
    def _normalize_prefix(prefix: Optional[str]) -> str:
        cleaned = str(prefix or "").strip().strip("/")
        return f"/{cleaned}" if cleaned else ""

    @classmethod
    def _checked_json(cls, resp: requests.Response, ctx: str) -> Any:
        cls._raise_for_status(resp, ctx)
        try:
            return resp.json()
        except ValueError as exc:
            snippet = (getattr(resp, "text", "") or "")[:200]
            raise ApiDecodeError(
                f"{ctx}: invalid JSON response: {snippet}",
                status=resp.status_code,
                context=ctx,
            ) from exc

    @staticmethod
    def _raise_for_status(resp: requests.Response, ctx: str) -> None:
        status = resp.status_code
        if 200 <= status < 300:
            return
        body = read_error_body(resp)
        reason = error_reason(body)
        message = describe_failure(ctx, status, reason)
        if 400 <= status < 500:
            error_cls = ApiClientError
        elif 500 <= status < 600:
            error_cls = ApiServerError
        else:
            error_cls = ApiError
        raise error_cls(message, status=status, hint=reason, payload=body, context=ctx)

    @staticmethod
    def _decode(factory: Callable[[Any], T], data: Any, ctx: str) -> T:
        try:
            return factory(data)
        except ValueError as exc:
            raise ApiDecodeError(f"{ctx}: {exc}", payload=data, context=ctx) from exc


__all__ = ["TaxRestAdapter"]
