from __future__ import annotations

from decimal import Decimal

from taxcalc.domain.app_state import AppState
from taxcalc.domain.models import CalculationResult, HealthStatus, HistoryEntry
from taxcalc.viewmodels.calculator_vm import CalculatorVM

ENCRYPTED = "vault:v1:" + "q" * 60


def _result() -> CalculationResult:
    return CalculationResult(
        id="abc123",
        income=Decimal("50000"),
        income_tax=Decimal("7500"),
        national_insurance_contribution=Decimal("4500"),
        take_home=Decimal("38000"),
        effective_rate=Decimal("24.0"),
        encrypted_ni=ENCRYPTED,
    )


def _entry(entry_id: str, timestamp: str = "2024-05-01T10:15:00Z") -> HistoryEntry:
    return HistoryEntry(
        id=entry_id,
        timestamp=timestamp,
        income=Decimal("20000"),
        income_tax=Decimal("1486"),
        national_insurance_contribution=Decimal("891.6"),
        take_home=Decimal("17622.4"),
        encrypted_ni="vault:v1:abcdefghijk...",
    )


def test_submit_label_and_enablement_follow_loading() -> None:
    vm = CalculatorVM()
    assert vm.can_submit
    assert vm.submit_label == "Calculate Tax"

    vm.update(AppState(loading=True, generation=1))
    assert not vm.can_submit
    assert vm.submit_label == "Calculating..."


def test_error_text_is_prefixed() -> None:
    assert CalculatorVM().error_text is None
    assert CalculatorVM(AppState(error="Calculation failed.")).error_text == "Error: Calculation failed."


def test_result_card_formats_breakdown() -> None:
    card = CalculatorVM(AppState(result=_result())).result_card()

    assert card is not None
    assert card.gross_income == "£50,000.00"
    assert card.income_tax == "-£7,500.00"
    assert card.national_insurance == "-£4,500.00"
    assert card.take_home == "£38,000.00"
    assert card.effective_rate == "24.00%"
    assert card.encrypted_ni == ENCRYPTED[:40] + "..."


def test_detail_card_shows_full_encrypted_value() -> None:
    vm = CalculatorVM(AppState(detail=_result()))

    card = vm.detail_card()

    assert card is not None
    assert card.encrypted_ni == ENCRYPTED
    assert vm.result_card() is None


def test_history_rows_keep_service_order_and_limit() -> None:
    state = AppState(history=(_entry("b"), _entry("a", "not-a-date"), _entry("c")))
    vm = CalculatorVM(state, history_limit=2)

    rows = vm.history_rows()

    assert [row.calculation_id for row in rows] == ["b", "a"]
    assert rows[0].date == "01/05/2024, 10:15:00"
    assert rows[1].date == "Invalid Date"
    assert rows[0].take_home == "£17,622.40"
    assert rows[0].encrypted_ni == "vault:v1:abcdefghijk..."
    assert not vm.history_empty


def test_history_empty_state() -> None:
    vm = CalculatorVM()

    assert vm.history_empty
    assert vm.history_rows() == []


def test_health_badge_reduces_subsystem_summaries() -> None:
    vm = CalculatorVM()
    assert vm.health_badge() is None

    vm.update(
        AppState(
            health=HealthStatus(
                status="degraded",
                vault="healthy",
                database="unhealthy: connection refused",
            )
        )
    )
    badge = vm.health_badge()

    assert badge is not None
    assert badge.healthy is False
    assert badge.vault == "healthy"
    assert badge.database == "unhealthy"


def test_ni_hint_only_for_malformed_non_empty_input() -> None:
    assert CalculatorVM(AppState(ni_input="")).ni_hint() is None
    assert CalculatorVM(AppState(ni_input="AB123456C")).ni_hint() is None
    assert CalculatorVM(AppState(ni_input="AB12")).ni_hint() == (
        "Format: 2 letters, 6 numbers, 1 letter (A-D)"
    )


def test_ni_hint_checks_the_value_passed_by_the_input_field() -> None:
    vm = CalculatorVM(AppState(ni_input="AB123456C"))

    assert vm.ni_hint("ab123456c") == "Format: 2 letters, 6 numbers, 1 letter (A-D)"
    assert vm.ni_hint("AB123456C") is None
    assert vm.ni_hint("") is None
