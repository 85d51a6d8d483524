"""
Health report for the PRID service.

  OUT_OF_SERVICE  no policy installed — every PRID request fails
  WARNING         countries in metadata lack a policy entry, or the latest
                  policy load reported errors
  UP              otherwise
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from eidas_bridge.domain.ports import CountryMetadataProvider
from eidas_bridge.prid.service import PridService

log = structlog.get_logger()


class HealthStatus(str, Enum):
    UP = "UP"
    WARNING = "WARNING"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


@dataclass(frozen=True, slots=True)
class HealthReport:
    status: HealthStatus
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "details": self.details}


class PridHealth:
    """Builds a HealthReport from the installed policy and the known countries."""

    def __init__(self, service: PridService, metadata_provider: CountryMetadataProvider | None = None) -> None:
        self._service = service
        self._metadata_provider = metadata_provider

    def report(self) -> HealthReport:
        policy = self._service.get_policy()
        validation = self._service.latest_validation

        if policy.is_empty():
            log.warning("health.no_policy")
            return HealthReport(
                HealthStatus.OUT_OF_SERVICE,
                {"reason": "No PRID policy installed", "errors": list(validation.errors)},
            )

        details: dict[str, Any] = {"policy": policy.to_dict()}
        status = HealthStatus.UP

        if self._metadata_provider is not None:
            missing = [
                metadata.country_code
                for metadata in self._metadata_provider.get_all_countries()
                if policy.get(metadata.country_code) is None
            ]
            if missing:
                details["missingCountries"] = missing
                status = HealthStatus.WARNING

        if validation.has_errors():
            details["errors"] = list(validation.errors)
            status = HealthStatus.WARNING

        return HealthReport(status, details)
