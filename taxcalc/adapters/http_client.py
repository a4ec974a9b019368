"""HTTP transport shared by the tax service adapter.

``RetryingSession`` owns one ``requests.Session`` per adapter. Reads may be
retried on connectivity failures (``HttpConfig.retries``); writes go out
exactly once so a calculation is never stored twice by the client.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from taxcalc.adapters.api_errors import ApiError, ApiTimeoutError

_UNREACHABLE = (req_exc.Timeout, req_exc.ConnectionError)


@dataclass
class HttpConfig:
    """Per-adapter transport settings.

    Attributes:
        request_timeout_s: Timeout applied to every call unless overridden.
        retries: Extra GET attempts after a timeout or connection error.
    """

    request_timeout_s: float = 10
    retries: int = 0


class RetryingSession:
    """``requests.Session`` wrapper adding headers, timeouts, and GET retries."""

    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def _headers(self, *, send_json: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if send_json:
            headers["Content-Type"] = "application/json"
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    def _timeout(self, override: Optional[float]) -> float:
        return override or self.cfg.request_timeout_s

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """GET ``url``, retrying up to ``cfg.retries`` times when the server is unreachable.

        Raises:
            ApiTimeoutError: Every attempt timed out or failed to connect.
            ApiError: Any other transport failure (not retried).
        """
        attempts = 1 + max(0, int(self.cfg.retries))
        for attempt in range(1, attempts + 1):
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=self._timeout(timeout),
                )
            except _UNREACHABLE as exc:
                if attempt == attempts:
                    raise ApiTimeoutError(
                        f"No response from {url} after {attempts} attempt(s)",
                        context=f"GET {url}",
                    ) from exc
            except req_exc.RequestException as exc:
                raise ApiError(str(exc), context=f"GET {url}") from exc
        raise AssertionError("unreachable")

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """POST ``json_body`` once.

        Raises:
            ApiTimeoutError: Timeout or connection failure.
            ApiError: Any other transport failure.
        """
        body = None if json_body is None else json.dumps(json_body)
        try:
            return self.session.post(
                url,
                data=body,
                headers=self._headers(send_json=body is not None),
                timeout=self._timeout(timeout),
            )
        except _UNREACHABLE as exc:
            raise ApiTimeoutError(f"No response from {url}", context=f"POST {url}") from exc
        except req_exc.RequestException as exc:
            raise ApiError(str(exc), context=f"POST {url}") from exc

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpConfig", "RetryingSession"]
