from __future__ import annotations

from dataclasses import dataclass

from taxcalc.domain.models import HealthStatus
from taxcalc.domain.ports import TaxServicePort
from taxcalc.usecases.error_mapping import map_api_error


@dataclass
class CheckHealth:
    """Read the service's aggregate health; no retries, safe to call repeatedly."""

    tax_port: TaxServicePort

    def __call__(self) -> HealthStatus:
        try:
            return self.tax_port.health()
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="HEALTH_CHECK_FAILED",
                default_message="Health check failed.",
            ) from exc


__all__ = ["CheckHealth"]
