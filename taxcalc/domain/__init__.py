"""Domain package exports for value objects, validation, and client state."""

from .app_state import AppState, reduce
from .errors import ValidationError
from .models import (
    CalculationRequest,
    CalculationResult,
    DEFAULT_TAX_YEAR,
    HealthStatus,
    HistoryEntry,
)
from .validation import build_calculation_request, is_valid_ni

__all__ = [
    "AppState",
    "CalculationRequest",
    "CalculationResult",
    "DEFAULT_TAX_YEAR",
    "HealthStatus",
    "HistoryEntry",
    "ValidationError",
    "build_calculation_request",
    "is_valid_ni",
    "reduce",
]
