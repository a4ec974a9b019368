"""Calculator page projection from ``AppState`` for the web view.

Call context:
    ``WebRuntime`` feeds every new ``AppState`` produced by the
    ``SessionCoordinator`` into ``CalculatorVM.update``; the NiceGUI page then
    renders the DTOs returned here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import List, Optional

from taxcalc.domain.app_state import AppState
from taxcalc.domain.models import CalculationResult, HistoryEntry
from taxcalc.domain.validation import NI_FORMAT_HINT, is_valid_ni
from taxcalc.usecases.sync_history import HISTORY_LIMIT
from .formatting import (
    format_currency,
    format_rate,
    format_timestamp,
    mask_preview,
    subsystem_label,
)


@dataclass(frozen=True)
class ResultCard:
    """Display model for the current calculation result."""
    calculation_id: str
    gross_income: str
    income_tax: str
    national_insurance: str
    take_home: str
    effective_rate: str
    encrypted_ni: str


@dataclass(frozen=True)
class HistoryRow:
    """Display row for one history entry."""
    calculation_id: str
    income: str
    date: str
    income_tax: str
    national_insurance: str
    take_home: str
    encrypted_ni: str


@dataclass(frozen=True)
class HealthBadge:
    healthy: bool
    vault: str
    database: str


class CalculatorVM:
    """
    Read-only view-model for the calculator page.

    Holds the latest session state and exposes display-ready values; commands
    go through the coordinator, not through this class.
    """

    SUBMIT_LABEL = "Calculate Tax"
    SUBMIT_BUSY_LABEL = "Calculating..."

    def __init__(
        self,
        state: Optional[AppState] = None,
        *,
        history_limit: int = HISTORY_LIMIT,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.state = state or AppState()
        self.history_limit = history_limit
        self.tz = tz

    def update(self, state: AppState) -> None:
        self.state = state

    @property
    def can_submit(self) -> bool:
        return self.state.can_submit

    @property
    def submit_label(self) -> str:
        return self.SUBMIT_BUSY_LABEL if self.state.loading else self.SUBMIT_LABEL

    @property
    def error_text(self) -> Optional[str]:
        if not self.state.error:
            return None
        return f"Error: {self.state.error}"

    def ni_hint(self, value: Optional[str] = None) -> Optional[str]:
        """Inline hint for the identifier field; ``None`` while empty or valid.

        Used as the NiceGUI ``validation`` callable, which passes the field value;
        without an argument the last value in the session state is checked.
        """
        raw = self.state.ni_input if value is None else value
        if not raw or is_valid_ni(raw):
            return None
        return NI_FORMAT_HINT

    def result_card(self) -> Optional[ResultCard]:
        result = self.state.result
        return self._to_card(result) if result is not None else None

    def detail_card(self) -> Optional[ResultCard]:
        detail = self.state.detail
        return self._to_card(detail, preview=False) if detail is not None else None

    def history_rows(self) -> List[HistoryRow]:
        """Rows in the exact order the service returned them."""
        entries = list(self.state.history)[: max(0, self.history_limit)]
        return [self._to_row(entry) for entry in entries]

    @property
    def history_empty(self) -> bool:
        return not self.state.history

    def health_badge(self) -> Optional[HealthBadge]:
        health = self.state.health
        if health is None:
            return None
        return HealthBadge(
            healthy=health.is_healthy,
            vault=subsystem_label(health.vault),
            database=subsystem_label(health.database),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _to_card(result: CalculationResult, *, preview: bool = True) -> ResultCard:
        encrypted = mask_preview(result.encrypted_ni) if preview else result.encrypted_ni
        return ResultCard(
            calculation_id=result.id,
            gross_income=format_currency(result.income),
            income_tax=f"-{format_currency(result.income_tax)}",
            national_insurance=f"-{format_currency(result.national_insurance_contribution)}",
            take_home=format_currency(result.take_home),
            effective_rate=format_rate(result.effective_rate),
            encrypted_ni=encrypted,
        )

    def _to_row(self, entry: HistoryEntry) -> HistoryRow:
        return HistoryRow(
            calculation_id=entry.id,
            income=format_currency(entry.income),
            date=format_timestamp(entry.timestamp, tz=self.tz),
            income_tax=format_currency(entry.income_tax),
            national_insurance=format_currency(entry.national_insurance_contribution),
            take_home=format_currency(entry.take_home),
            encrypted_ni=entry.encrypted_ni,
        )


__all__ = ["CalculatorVM", "HealthBadge", "HistoryRow", "ResultCard"]
