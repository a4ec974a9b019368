"""Display formatting helpers for view models.

Call context:
    ``CalculatorVM`` calls these helpers to turn domain values into the
    strings shown on the result card, history list, and health badges. All
    functions are pure; unparseable input yields a fallback string rather
    than an exception.
"""

from __future__ import annotations

import re
from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CURRENCY_SYMBOL = "£"
ENCRYPTED_PREVIEW_CHARS = 40
INVALID_DATE = "Invalid Date"

_PENNY = Decimal("0.01")
_FRACTION = re.compile(r"\.(\d+)")


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    return number if number.is_finite() else None


def format_currency(amount: Any) -> str:
    """Format ``amount`` as pounds sterling, e.g. ``1234.5`` -> ``£1,234.50``."""
    number = _to_decimal(amount)
    if number is None:
        return f"{CURRENCY_SYMBOL}NaN"
    rounded = number.quantize(_PENNY, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(rounded):,.2f}"


def format_rate(value: Any) -> str:
    """Format a percentage with two decimals, e.g. ``24`` -> ``24.00%``."""
    number = _to_decimal(value)
    if number is None:
        return "NaN%"
    return f"{number.quantize(_PENNY, rounding=ROUND_HALF_UP)}%"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse RFC 3339 timestamps as emitted by the service (nanosecond fractions included)."""
    if isinstance(value, datetime):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    normalized = text.replace(" ", "T", 1)
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    # fromisoformat accepts at most microseconds.
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def format_timestamp(value: Any, *, tz: Optional[tzinfo] = None) -> str:
    """Render a timestamp in the en-GB long form ``dd/mm/yyyy, HH:MM:SS``.

    The timestamp keeps its own UTC offset unless ``tz`` is given.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return INVALID_DATE
    if tz is not None and parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.strftime("%d/%m/%Y, %H:%M:%S")


def mask_preview(text: Optional[str], limit: int = ENCRYPTED_PREVIEW_CHARS) -> str:
    """Show the leading ``limit`` characters of an encrypted value followed by ``...``."""
    return f"{(text or '')[:max(0, limit)]}..."


def subsystem_label(summary: Optional[str]) -> str:
    """Return the status word of a summary such as ``"unhealthy: timeout"``."""
    return (summary or "").split(":", 1)[0].strip()


__all__ = [
    "CURRENCY_SYMBOL",
    "ENCRYPTED_PREVIEW_CHARS",
    "INVALID_DATE",
    "format_currency",
    "format_rate",
    "format_timestamp",
    "mask_preview",
    "parse_timestamp",
    "subsystem_label",
]
