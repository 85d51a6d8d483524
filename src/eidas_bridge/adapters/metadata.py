"""
Country metadata adapter — declared assurance levels from configuration.

Implements the CountryMetadataProvider port from the `metadata.countries`
setting. Deployments that aggregate the eIDAS metadata service list plug in
their own provider behind the same port.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from eidas_bridge.domain.models import CountryMetadata

log = structlog.get_logger()


class StaticCountryMetadataProvider:
    """Fixed table of country code → declared eIDAS LoA URIs."""

    def __init__(self, countries: Mapping[str, Sequence[str]]) -> None:
        self._countries = {
            code.upper(): CountryMetadata(code.upper(), tuple(levels)) for code, levels in countries.items()
        }
        log.debug("metadata.loaded", countries=sorted(self._countries))

    def get_country(self, country_code: str) -> CountryMetadata | None:
        return self._countries.get(country_code.upper())

    def get_all_countries(self) -> list[CountryMetadata]:
        return [self._countries[code] for code in sorted(self._countries)]
