"""Domain DTOs for tax calculation requests, results, history, and health."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

DEFAULT_TAX_YEAR = "2024/2025"


def as_decimal(value: Any, name: str) -> Decimal:
    """Convert a JSON number (or numeric string) into a finite ``Decimal``."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Missing or invalid numeric field '{name}'.")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Field '{name}' is not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Field '{name}' must be finite.")
    return number


def _optional_decimal(value: Any, name: str) -> Optional[Decimal]:
    if value is None:
        return None
    return as_decimal(value, name)


def _as_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _require_id(payload: Mapping[str, Any], ctx: str) -> str:
    record_id = _as_text(payload.get("id"))
    if not record_id:
        raise ValueError(f"Missing id in {ctx}.")
    return record_id


@dataclass(frozen=True)
class CalculationRequest:
    """Outgoing calculation payload built fresh for each submission."""

    income: Decimal
    national_insurance: str = field(repr=False)
    tax_year: str = DEFAULT_TAX_YEAR

    @property
    def masked_ni(self) -> str:
        ni = self.national_insurance
        if len(ni) < 3:
            return "*" * len(ni)
        return f"{ni[:2]}{'*' * (len(ni) - 3)}{ni[-1]}"

    def to_payload(self) -> Dict[str, Any]:
        """Serialize using the service's JSON field names."""
        return {
            "income": float(self.income),
            "national_insurance": self.national_insurance,
            "tax_year": self.tax_year,
        }


@dataclass(frozen=True)
class CalculationResult:
    """Tax breakdown returned by ``POST /calculate`` or ``GET /history/{id}``."""

    id: str
    income: Decimal
    income_tax: Decimal
    national_insurance_contribution: Decimal
    take_home: Decimal
    effective_rate: Decimal
    encrypted_ni: str = ""
    timestamp: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CalculationResult":
        """Build a typed result from adapter payload."""
        if not isinstance(payload, Mapping):
            raise ValueError("Calculation result must be an object.")
        return cls(
            id=_require_id(payload, "calculation result"),
            income=as_decimal(payload.get("income"), "income"),
            income_tax=as_decimal(payload.get("income_tax"), "income_tax"),
            national_insurance_contribution=as_decimal(
                payload.get("national_insurance_contribution"),
                "national_insurance_contribution",
            ),
            take_home=as_decimal(payload.get("take_home"), "take_home"),
            effective_rate=as_decimal(payload.get("effective_rate"), "effective_rate"),
            encrypted_ni=str(payload.get("encrypted_ni") or ""),
            timestamp=_as_text(payload.get("timestamp")),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """One row of ``GET /history``; the encrypted id is already shortened by the server."""

    id: str
    timestamp: Optional[str]
    income: Decimal
    income_tax: Decimal
    national_insurance_contribution: Decimal
    take_home: Decimal
    encrypted_ni: str = ""
    effective_rate: Optional[Decimal] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HistoryEntry":
        if not isinstance(payload, Mapping):
            raise ValueError("History entry must be an object.")
        return cls(
            id=_require_id(payload, "history entry"),
            timestamp=_as_text(payload.get("timestamp")),
            income=as_decimal(payload.get("income"), "income"),
            income_tax=as_decimal(payload.get("income_tax"), "income_tax"),
            national_insurance_contribution=as_decimal(
                payload.get("national_insurance_contribution"),
                "national_insurance_contribution",
            ),
            take_home=as_decimal(payload.get("take_home"), "take_home"),
            encrypted_ni=str(payload.get("encrypted_ni") or ""),
            effective_rate=_optional_decimal(payload.get("effective_rate"), "effective_rate"),
        )


@dataclass(frozen=True)
class HealthStatus:
    """Aggregate backend health; subsystem summaries look like ``"unhealthy: dial tcp ..."``."""

    status: str
    vault: str
    database: str
    checked_at: Optional[str] = None

    @property
    def is_healthy(self) -> bool:
        return self.status.strip().lower() == "healthy"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HealthStatus":
        if not isinstance(payload, Mapping):
            raise ValueError("Health response must be an object.")
        status = _as_text(payload.get("status"))
        if not status:
            raise ValueError("Missing status in health response.")
        return cls(
            status=status,
            vault=str(payload.get("vault") or ""),
            database=str(payload.get("database") or ""),
            checked_at=_as_text(payload.get("timestamp")),
        )


__all__ = [
    "CalculationRequest",
    "CalculationResult",
    "DEFAULT_TAX_YEAR",
    "HealthStatus",
    "HistoryEntry",
    "as_decimal",
]
