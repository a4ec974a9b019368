"""Use case for validating form input and submitting one tax calculation.

Call context:
    ``SessionCoordinator.submit`` calls ``prepare`` on the event loop and then
    runs the use case itself through ``run_io`` so the blocking HTTP call does
    not stall the UI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from taxcalc.domain.errors import ValidationError
from taxcalc.domain.models import DEFAULT_TAX_YEAR, CalculationRequest, CalculationResult
from taxcalc.domain.ports import TaxServicePort
from taxcalc.domain.validation import build_calculation_request
from taxcalc.usecases.error_mapping import map_api_error

LOGGER = logging.getLogger(__name__)

CALCULATION_FAILED_MESSAGE = "Calculation failed."


@dataclass
class SubmitCalculation:
    """Validate raw form fields and post a calculation to the tax service.

    Attributes:
        tax_port: Adapter implementing the tax service operations.
        tax_year: Literal tax-year label sent with every request.
    """

    tax_port: TaxServicePort
    tax_year: str = DEFAULT_TAX_YEAR

    def prepare(self, income_raw: str, ni_raw: str) -> CalculationRequest:
        """Build the outgoing request from raw form values.

        Raises:
            UseCaseError: ``INVALID_INPUT`` with the validation message.
        """
        try:
            return build_calculation_request(income_raw, ni_raw, tax_year=self.tax_year)
        except ValidationError as exc:
            raise map_api_error(exc, default_code="INVALID_INPUT") from exc

    def __call__(self, request: CalculationRequest) -> CalculationResult:
        """Send ``request`` once; no retry.

        Raises:
            UseCaseError: Mapped adapter failure; 5xx and transport errors carry
                the fixed ``CALCULATION_FAILED_MESSAGE``.
        """
        LOGGER.info(
            "Submitting calculation for %s (tax year %s)",
            request.masked_ni,
            request.tax_year,
        )
        try:
            result = self.tax_port.calculate(request)
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="CALCULATION_FAILED",
                default_message=CALCULATION_FAILED_MESSAGE,
            ) from exc
        LOGGER.info("Calculation %s stored", result.id)
        return result


__all__ = ["CALCULATION_FAILED_MESSAGE", "SubmitCalculation"]
