from __future__ import annotations

from dataclasses import dataclass

from taxcalc.domain.models import CalculationResult
from taxcalc.domain.ports import TaxServicePort, UseCaseError
from taxcalc.usecases.error_mapping import map_api_error


@dataclass
class FetchCalculation:
    """Load one stored calculation, including its full encrypted identifier."""

    tax_port: TaxServicePort

    def __call__(self, calculation_id: str) -> CalculationResult:
        cleaned = str(calculation_id or "").strip()
        if not cleaned:
            raise UseCaseError("INVALID_INPUT", "Calculation id is required.")
        try:
            return self.tax_port.get_calculation(cleaned)
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="DETAIL_FETCH_FAILED",
                default_message="Failed to load calculation.",
            ) from exc


__all__ = ["FetchCalculation"]
