"""Client settings: defaults, validation, env overrides, and the persisted shape.

Precedence when the web runtime starts: built-in defaults, then
``settings.json`` (via ``StorageLocal``), then ``TAXCALC_*`` environment
variables, then CLI flags.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional

from taxcalc.domain.models import DEFAULT_TAX_YEAR
from taxcalc.usecases.sync_history import HISTORY_LIMIT
from ..utils.logging import env_requests_debug

DEFAULT_BASE_URL = "http://localhost:8080"

ENV_OVERRIDES = {
    "TAXCALC_API_BASE_URL": "api_base_url",
    "TAXCALC_API_PREFIX": "api_prefix",
    "TAXCALC_API_KEY": "api_key",
    "TAXCALC_REQUEST_TIMEOUT_S": "request_timeout_s",
}


@dataclass
class SettingsConfig:
    api_base_url: str = DEFAULT_BASE_URL
    api_prefix: str = "/api"
    api_key: str = ""
    request_timeout_s: float = 10.0
    retries: int = 0
    history_limit: int = HISTORY_LIMIT
    tax_year: str = DEFAULT_TAX_YEAR


def _base_url(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string.")
    url = value.strip().rstrip("/")
    if not url:
        raise ValueError(f"{name} must not be empty.")
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"{name} must start with http:// or https://.")
    return url


def _text(name: str, value: Any) -> str:
    return "" if value is None else str(value).strip()


def _positive_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number.")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number.") from exc
    if not number > 0:
        raise ValueError(f"{name} must be positive.")
    return number


def _count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{name} must be an integer.")
    try:
        number = int(value.strip()) if isinstance(value, str) else int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc
    if number < 0:
        raise ValueError(f"{name} must be non-negative.")
    return number


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


_COERCERS: Dict[str, Callable[[str, Any], Any]] = {
    "api_base_url": _base_url,
    "api_prefix": _text,
    "api_key": _text,
    "request_timeout_s": _positive_float,
    "retries": _count,
    "history_limit": _count,
    "tax_year": _text,
}


class SettingsVM:
    """Holds and validates ``SettingsConfig`` plus the debug-logging flag; no I/O."""

    def __init__(self, *, config: Optional[SettingsConfig] = None) -> None:
        self.config = config or SettingsConfig()
        self.debug_logging: bool = env_requests_debug()

    @property
    def api_base_url(self) -> str:
        return self.config.api_base_url

    def is_valid(self) -> bool:
        cfg = self.config
        return (
            cfg.api_base_url.startswith(("http://", "https://"))
            and cfg.request_timeout_s > 0
            and cfg.retries >= 0
            and cfg.history_limit >= 0
            and bool(cfg.tax_year.strip())
        )

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Merge flat settings keys into the current config.

        Raises:
            ValueError: Unknown keys or an invalid value; nothing is applied then.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")
        unknown = sorted(str(key) for key in payload if key not in _COERCERS and key != "debug_logging")
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(unknown)}")

        updates = {
            key: _COERCERS[key](key, value)
            for key, value in payload.items()
            if key in _COERCERS
        }
        self.config = replace(self.config, **updates)
        if "debug_logging" in payload:
            self.debug_logging = _flag(payload["debug_logging"])

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Apply non-empty ``TAXCALC_*`` variables on top of the current values."""
        env = os.environ if environ is None else environ
        self.apply_dict(
            {key: env[var] for var, key in ENV_OVERRIDES.items() if env.get(var, "").strip()}
        )

    def to_dict(self) -> dict:
        payload = asdict(self.config)
        payload["debug_logging"] = bool(self.debug_logging)
        return payload

    def persisted_dict(self) -> dict:
        """Payload written to ``settings.json``; the API key is never written to disk."""
        payload = self.to_dict()
        payload.pop("api_key", None)
        return payload


__all__ = ["DEFAULT_BASE_URL", "ENV_OVERRIDES", "SettingsConfig", "SettingsVM"]
