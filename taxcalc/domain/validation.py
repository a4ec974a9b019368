"""Form input validation for calculation submissions.

The web form advertises the same constraints (``min=0``, ``step=0.01`` and the
identifier pattern); this module enforces them before anything reaches the
network so a non-numeric income is never forwarded.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from taxcalc.domain.errors import ValidationError
from taxcalc.domain.models import DEFAULT_TAX_YEAR, CalculationRequest

NI_PATTERN = re.compile(r"[A-Z]{2}[0-9]{6}[A-D]")
NI_FORMAT_HINT = "Format: 2 letters, 6 numbers, 1 letter (A-D)"

_PENNY = Decimal("0.01")


def parse_income(raw: str) -> Decimal:
    text = (raw or "").strip().replace(",", "")
    if not text:
        raise ValidationError("income", "Annual income is required.")
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise ValidationError("income", "Annual income must be a number.") from exc
    if not value.is_finite():
        raise ValidationError("income", "Annual income must be a number.")
    if value < 0:
        raise ValidationError("income", "Annual income cannot be negative.")
    try:
        pennies = value.quantize(_PENNY)
    except InvalidOperation as exc:
        raise ValidationError("income", "Annual income is too large.") from exc
    if value != pennies:
        raise ValidationError("income", "Annual income allows at most two decimal places.")
    return value


def is_valid_ni(raw: str) -> bool:
    """Return whether ``raw`` matches the identifier pattern exactly (case-sensitive)."""
    return NI_PATTERN.fullmatch((raw or "").strip()) is not None


def parse_ni(raw: str) -> str:
    text = (raw or "").strip()
    if not text:
        raise ValidationError("national_insurance", "National Insurance number is required.")
    if not NI_PATTERN.fullmatch(text):
        raise ValidationError("national_insurance", NI_FORMAT_HINT)
    return text


def build_calculation_request(
    income_raw: str,
    ni_raw: str,
    *,
    tax_year: str = DEFAULT_TAX_YEAR,
) -> CalculationRequest:
    """Validate raw form fields and build the outgoing request.

    Raises:
        ValidationError: With ``field`` set to the first invalid input.
    """
    income = parse_income(income_raw)
    ni = parse_ni(ni_raw)
    return CalculationRequest(income=income, national_insurance=ni, tax_year=tax_year or DEFAULT_TAX_YEAR)


__all__ = [
    "NI_FORMAT_HINT",
    "NI_PATTERN",
    "build_calculation_request",
    "is_valid_ni",
    "parse_income",
    "parse_ni",
]
