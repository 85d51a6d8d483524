"""
Ports — Protocol-based interfaces for the collaborators of the PRID and LoA subsystems.

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters satisfy the contract
simply by implementing the methods — no inheritance.

  PolicyReader            → the single I/O point: read the PRID policy resource
  PridGenerator           → one named normalization algorithm
  CountryMetadataProvider → declared eIDAS assurance levels per country
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from railway.result import Result

from eidas_bridge.domain.models import CountryMetadata, PolicyEntry


@runtime_checkable
class PolicyReader(Protocol):
    """
    Port: read and parse the PRID policy resource.

    Returns the raw country entries keyed by country code exactly as written
    in the document (validation normalizes them). A document without any
    policy section yields an empty mapping. Unreadable or malformed documents
    yield Result.failure(POLICY_LOAD_ERROR, ...).
    """

    @property
    def location(self) -> str: ...

    def read(self) -> Result[Mapping[str, PolicyEntry]]: ...


@runtime_checkable
class PridGenerator(Protocol):
    """
    Port: calculate the PRID value for an eIDAS person identifier.

    `generate` returns the complete "<COUNTRY>:<component>" value; the
    persistence class is policy data and is attached by the PRID service.
    """

    @property
    def algorithm_name(self) -> str: ...

    def generate(self, person_identifier: str | None, country_code: str | None) -> Result[str]: ...


@runtime_checkable
class CountryMetadataProvider(Protocol):
    """Port: declared eIDAS assurance levels of the known foreign proxy services."""

    def get_country(self, country_code: str) -> CountryMetadata | None: ...

    def get_all_countries(self) -> list[CountryMetadata]: ...
