from __future__ import annotations

from decimal import Decimal

import pytest

from taxcalc.domain.models import CalculationResult, HealthStatus, HistoryEntry


def test_result_from_payload_parses_numbers_as_decimal() -> None:
    result = CalculationResult.from_payload(
        {
            "id": "abc123",
            "income": 50000,
            "income_tax": 7486.0,
            "national_insurance_contribution": 4523.99,
            "take_home": 37990.01,
            "effective_rate": 24.02,
            "encrypted_ni": "vault:v1:abc",
        }
    )

    assert result.national_insurance_contribution == Decimal("4523.99")
    assert result.effective_rate == Decimal("24.02")
    assert result.timestamp is None


def test_result_without_encrypted_field_defaults_to_empty() -> None:
    result = CalculationResult.from_payload(
        {
            "id": "x",
            "income": 1,
            "income_tax": 0,
            "national_insurance_contribution": 0,
            "take_home": 1,
            "effective_rate": 0,
        }
    )

    assert result.encrypted_ni == ""


@pytest.mark.parametrize(
    "payload",
    [
        {"income": 1},
        {"id": "x", "income": "lots", "income_tax": 0, "national_insurance_contribution": 0, "take_home": 1, "effective_rate": 0},
        {"id": "x", "income": True, "income_tax": 0, "national_insurance_contribution": 0, "take_home": 1, "effective_rate": 0},
    ],
)
def test_result_rejects_malformed_payloads(payload) -> None:
    with pytest.raises(ValueError):
        CalculationResult.from_payload(payload)


def test_history_entry_tolerates_missing_effective_rate() -> None:
    entry = HistoryEntry.from_payload(
        {
            "id": "h1",
            "timestamp": "2024-05-01T10:15:00Z",
            "income": 20000,
            "income_tax": 1486,
            "national_insurance_contribution": 891.6,
            "take_home": 17622.4,
            "encrypted_ni": "vault:v1:abcdefghijk...",
        }
    )

    assert entry.effective_rate is None
    assert entry.timestamp == "2024-05-01T10:15:00Z"


def test_health_status_requires_status_and_reports_health() -> None:
    health = HealthStatus.from_payload(
        {"status": "healthy", "vault": "healthy", "database": "unhealthy: timeout", "timestamp": "t"}
    )

    assert health.is_healthy
    assert health.checked_at == "t"
    assert not HealthStatus.from_payload({"status": "degraded"}).is_healthy

    with pytest.raises(ValueError):
        HealthStatus.from_payload({"vault": "healthy"})
    with pytest.raises(ValueError):
        HealthStatus.from_payload(["healthy"])  # type: ignore[arg-type]
