"""
Domain models — immutable value objects for PRID policies and LoA negotiation.

These are pure value objects with no behavior beyond simple lookups.
All models are frozen dataclasses: a PridPolicy snapshot is built once by the
loader, installed by a single reference swap and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class PersistenceClass(str, Enum):
    """How durable a country's underlying identifier scheme is expected to be."""

    A = "A"
    B = "B"
    C = "C"


class Comparison(str, Enum):
    """Comparison mode of a RequestedAuthnContext."""

    EXACT = "exact"
    MINIMUM = "minimum"


@dataclass(frozen=True, slots=True)
class PridResult:
    """
    A generated PRID and the persistence class of the policy that produced it.

    `value` is always "<COUNTRY>:<normalized component>".
    """

    value: str
    persistence_class: PersistenceClass


@dataclass(frozen=True, slots=True)
class PolicyEntry:
    """
    One raw, unvalidated country entry as read from the policy resource.

    Either field may be missing from the document; validation decides.
    """

    algorithm: str | None = None
    persistence_class: str | None = None


@dataclass(frozen=True, slots=True)
class CountryPolicy:
    """A validated policy entry: which algorithm to run and its persistence class."""

    algorithm: str
    persistence_class: PersistenceClass

    def to_dict(self) -> dict[str, str]:
        return {"algorithm": self.algorithm, "persistenceClass": self.persistence_class.value}


@dataclass(frozen=True, slots=True)
class PridPolicy:
    """
    Immutable snapshot mapping upper-case country code → CountryPolicy.

    A snapshot with zero entries is legal but reported as degraded.
    """

    entries: Mapping[str, CountryPolicy] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def get(self, country_code: str | None) -> CountryPolicy | None:
        """Policy for the country (case-insensitive), or None if not configured."""
        if not country_code:
            return None
        return self.entries.get(country_code.upper())

    def is_empty(self) -> bool:
        return not self.entries

    @property
    def countries(self) -> list[str]:
        return sorted(self.entries)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {country: self.entries[country].to_dict() for country in self.countries}


@dataclass(frozen=True, slots=True)
class PridPolicyValidation:
    """
    Outcome of one policy load attempt.

    Errors are ordered as they were found. A new instance is produced for
    every load attempt.
    """

    errors: tuple[str, ...] = ()

    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass(frozen=True, slots=True)
class ValidatedPolicy:
    """A candidate snapshot together with the validation that produced it."""

    policy: PridPolicy
    validation: PridPolicyValidation


@dataclass(frozen=True, slots=True)
class RequestedAuthnContext:
    """
    Outgoing assurance request to a foreign eIDAS proxy service.

    Produced fresh for every negotiation; never cached.
    """

    comparison: Comparison
    uris: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CountryMetadata:
    """What the metadata of a foreign proxy service tells us about its assurance levels."""

    country_code: str
    assurance_levels: tuple[str, ...] = ()
