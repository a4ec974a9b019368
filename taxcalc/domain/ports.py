from __future__ import annotations

from typing import Dict, List, Protocol

from taxcalc.domain.models import (
    CalculationRequest,
    CalculationResult,
    HealthStatus,
    HistoryEntry,
)


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class TaxServicePort(Protocol):
    """Health, history, and calculation operations against the tax REST API."""

    def health(self) -> HealthStatus: ...
    def list_history(self) -> List[HistoryEntry]: ...  # newest first, may be empty
    def calculate(self, request: CalculationRequest) -> CalculationResult: ...
    def get_calculation(self, calculation_id: str) -> CalculationResult: ...


class SettingsStoragePort(Protocol):
    """Persistence for client settings."""

    def save_settings(self, payload: Dict) -> None: ...
    def load_settings(self) -> Dict: ...
