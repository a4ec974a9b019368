"""Use case for fetching the most recent calculation records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from taxcalc.domain.models import HistoryEntry
from taxcalc.domain.ports import TaxServicePort
from taxcalc.usecases.error_mapping import map_api_error

HISTORY_LIMIT = 50


@dataclass
class SyncHistory:
    """Use-case callable returning history in server order, capped at ``limit``.

    The client neither reorders nor deduplicates; the service already returns
    newest-first.
    """

    tax_port: TaxServicePort
    limit: int = HISTORY_LIMIT

    def __call__(self) -> Tuple[HistoryEntry, ...]:
        try:
            entries = self.tax_port.list_history()
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="HISTORY_FETCH_FAILED",
                default_message="Failed to fetch history.",
            ) from exc
        limit = max(0, int(self.limit))
        return tuple(list(entries or [])[:limit])


__all__ = ["HISTORY_LIMIT", "SyncHistory"]
