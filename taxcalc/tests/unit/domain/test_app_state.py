from __future__ import annotations

from decimal import Decimal

import pytest

from taxcalc.domain.app_state import (
    AppState,
    DetailLoaded,
    HealthLoaded,
    HistoryLoaded,
    InputChanged,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    is_stale,
    reduce,
)
from taxcalc.domain.models import CalculationResult, HealthStatus, HistoryEntry


def _result(result_id: str = "abc123") -> CalculationResult:
    return CalculationResult(
        id=result_id,
        income=Decimal("50000"),
        income_tax=Decimal("7500"),
        national_insurance_contribution=Decimal("4500"),
        take_home=Decimal("38000"),
        effective_rate=Decimal("24.0"),
        encrypted_ni="vault:v1:xyz",
    )


def _entry(entry_id: str) -> HistoryEntry:
    return HistoryEntry(
        id=entry_id,
        timestamp="2024-05-01T10:15:00Z",
        income=Decimal("1"),
        income_tax=Decimal("0"),
        national_insurance_contribution=Decimal("0"),
        take_home=Decimal("1"),
    )


def test_input_changes_update_only_their_field() -> None:
    state = reduce(AppState(), InputChanged("income", "50000"))
    state = reduce(state, InputChanged("national_insurance", "AB123456C"))

    assert state.income_input == "50000"
    assert state.ni_input == "AB123456C"
    assert not state.loading


def test_submit_started_clears_error_and_result() -> None:
    state = AppState(result=_result(), error="Calculation failed.", generation=1)

    started = reduce(state, SubmitStarted(2))

    assert started.loading is True
    assert started.error is None
    assert started.result is None
    assert started.generation == 2
    assert not started.can_submit


def test_success_sets_result_and_clears_loading_together() -> None:
    state = reduce(AppState(), SubmitStarted(1))

    done = reduce(state, SubmitSucceeded(1, _result()))

    assert done.loading is False
    assert done.error is None
    assert done.result == _result()


def test_failure_sets_error_and_leaves_result_unset() -> None:
    state = reduce(AppState(), SubmitStarted(1))

    failed = reduce(state, SubmitFailed(1, "Calculation failed."))

    assert failed.loading is False
    assert failed.error == "Calculation failed."
    assert failed.result is None


def test_stale_completion_is_ignored() -> None:
    state = reduce(reduce(AppState(), SubmitStarted(1)), SubmitStarted(2))

    stale = SubmitSucceeded(1, _result("old"))
    assert is_stale(state, stale)
    assert reduce(state, stale) is state

    fresh = reduce(state, SubmitSucceeded(2, _result("new")))
    assert fresh.result is not None and fresh.result.id == "new"
    assert reduce(fresh, SubmitFailed(1, "late failure")) is fresh


def test_history_is_replaced_wholesale_in_given_order() -> None:
    state = reduce(AppState(), HistoryLoaded((_entry("a"), _entry("b"))))
    state = reduce(state, HistoryLoaded((_entry("c"),)))

    assert [entry.id for entry in state.history] == ["c"]


def test_health_and_detail_events() -> None:
    health = HealthStatus(status="healthy", vault="healthy", database="healthy")

    state = reduce(AppState(), HealthLoaded(health))
    state = reduce(state, DetailLoaded(_result()))
    assert state.health is health
    assert state.detail == _result()

    assert reduce(state, DetailLoaded(None)).detail is None


def test_unknown_event_raises() -> None:
    with pytest.raises(TypeError):
        reduce(AppState(), object())  # type: ignore[arg-type]
