"""
Assurance level catalog — the static tables behind LoA negotiation.

Two vocabularies, three tiers each:

  eIDAS     notified      http://eidas.europa.eu/LoA/{low,substantial,high}
            non-notified  http://eidas.europa.eu/NotNotified/LoA/{tier}
                          (alias http://eidas.europa.eu/LoA/NotNotified/{tier})
  national  notified only http://id.elegnamnden.se/loa/1.0/eidas-nf-{low,sub,high}
            either        http://id.elegnamnden.se/loa/1.0/eidas-{low,sub,high}

Tiers are cumulative: an eIDAS level authorizes the national URIs of its own
tier and of every tier below it. A non-notified eIDAS level only authorizes
the national URIs that accept non-notified evidence.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum

EIDAS_TEST_URI = "http://eidas.europa.eu/LoA/test"

EIDAS_LOA_LOW = "http://eidas.europa.eu/LoA/low"
EIDAS_LOA_SUBSTANTIAL = "http://eidas.europa.eu/LoA/substantial"
EIDAS_LOA_HIGH = "http://eidas.europa.eu/LoA/high"
EIDAS_LOA_LOW_NON_NOTIFIED = "http://eidas.europa.eu/NotNotified/LoA/low"
EIDAS_LOA_SUBSTANTIAL_NON_NOTIFIED = "http://eidas.europa.eu/NotNotified/LoA/substantial"
EIDAS_LOA_HIGH_NON_NOTIFIED = "http://eidas.europa.eu/NotNotified/LoA/high"
EIDAS_LOA_LOW_NON_NOTIFIED2 = "http://eidas.europa.eu/LoA/NotNotified/low"
EIDAS_LOA_SUBSTANTIAL_NON_NOTIFIED2 = "http://eidas.europa.eu/LoA/NotNotified/substantial"
EIDAS_LOA_HIGH_NON_NOTIFIED2 = "http://eidas.europa.eu/LoA/NotNotified/high"

LOA_EIDAS_LOW = "http://id.elegnamnden.se/loa/1.0/eidas-low"
LOA_EIDAS_SUBSTANTIAL = "http://id.elegnamnden.se/loa/1.0/eidas-sub"
LOA_EIDAS_HIGH = "http://id.elegnamnden.se/loa/1.0/eidas-high"
LOA_EIDAS_NF_LOW = "http://id.elegnamnden.se/loa/1.0/eidas-nf-low"
LOA_EIDAS_NF_SUBSTANTIAL = "http://id.elegnamnden.se/loa/1.0/eidas-nf-sub"
LOA_EIDAS_NF_HIGH = "http://id.elegnamnden.se/loa/1.0/eidas-nf-high"


class AssuranceTier(IntEnum):
    """
    eIDAS assurance tiers.

    IntEnum allows comparison: AssuranceTier.HIGH > AssuranceTier.LOW is True.
    """

    LOW = 1
    SUBSTANTIAL = 2
    HIGH = 3

    def and_below(self) -> list[AssuranceTier]:
        """This tier and every lower tier, highest first."""
        return [tier for tier in reversed(AssuranceTier) if tier <= self]


@dataclass(frozen=True, slots=True)
class EidasLevel:
    """An eIDAS assurance level: a tier, notified or non-notified."""

    tier: AssuranceTier
    notified: bool

    @property
    def uri(self) -> str:
        return _EIDAS_URIS[self]

    def authorizes(self, national: NationalLevel) -> bool:
        return self.tier >= national.tier and (self.notified or national.accepts_non_notified)


@dataclass(frozen=True, slots=True)
class NationalLevel:
    """A national LoA: a tier floor, either accepting non-notified evidence or not."""

    tier: AssuranceTier
    accepts_non_notified: bool

    @property
    def uri(self) -> str:
        return _NATIONAL_URIS[self]


_EIDAS_URIS: dict[EidasLevel, str] = {
    EidasLevel(AssuranceTier.HIGH, True): EIDAS_LOA_HIGH,
    EidasLevel(AssuranceTier.SUBSTANTIAL, True): EIDAS_LOA_SUBSTANTIAL,
    EidasLevel(AssuranceTier.LOW, True): EIDAS_LOA_LOW,
    EidasLevel(AssuranceTier.HIGH, False): EIDAS_LOA_HIGH_NON_NOTIFIED,
    EidasLevel(AssuranceTier.SUBSTANTIAL, False): EIDAS_LOA_SUBSTANTIAL_NON_NOTIFIED,
    EidasLevel(AssuranceTier.LOW, False): EIDAS_LOA_LOW_NON_NOTIFIED,
}

_EIDAS_ALIASES: dict[str, EidasLevel] = {
    EIDAS_LOA_HIGH_NON_NOTIFIED2: EidasLevel(AssuranceTier.HIGH, False),
    EIDAS_LOA_SUBSTANTIAL_NON_NOTIFIED2: EidasLevel(AssuranceTier.SUBSTANTIAL, False),
    EIDAS_LOA_LOW_NON_NOTIFIED2: EidasLevel(AssuranceTier.LOW, False),
}

_EIDAS_LEVELS: dict[str, EidasLevel] = {uri: level for level, uri in _EIDAS_URIS.items()} | _EIDAS_ALIASES

_NATIONAL_URIS: dict[NationalLevel, str] = {
    NationalLevel(AssuranceTier.HIGH, False): LOA_EIDAS_NF_HIGH,
    NationalLevel(AssuranceTier.HIGH, True): LOA_EIDAS_HIGH,
    NationalLevel(AssuranceTier.SUBSTANTIAL, False): LOA_EIDAS_NF_SUBSTANTIAL,
    NationalLevel(AssuranceTier.SUBSTANTIAL, True): LOA_EIDAS_SUBSTANTIAL,
    NationalLevel(AssuranceTier.LOW, False): LOA_EIDAS_NF_LOW,
    NationalLevel(AssuranceTier.LOW, True): LOA_EIDAS_LOW,
}

_NATIONAL_LEVELS: dict[str, NationalLevel] = {uri: level for level, uri in _NATIONAL_URIS.items()}

ALL_EIDAS_LEVELS: tuple[EidasLevel, ...] = tuple(_EIDAS_URIS)
ALL_NATIONAL_LEVELS: tuple[NationalLevel, ...] = tuple(_NATIONAL_URIS)
ALL_NATIONAL_URIS: tuple[str, ...] = tuple(_NATIONAL_URIS.values())

# Assumed capability of a country whose metadata declares no assurance levels.
FAIL_OPEN_LEVEL = EidasLevel(AssuranceTier.HIGH, True)


def eidas_level(uri: str | None) -> EidasLevel | None:
    """Parse an eIDAS LoA URI (either non-notified spelling), None if unknown."""
    return _EIDAS_LEVELS.get(uri) if uri else None


def national_level(uri: str | None) -> NationalLevel | None:
    """Parse a national LoA URI, None if unknown."""
    return _NATIONAL_LEVELS.get(uri) if uri else None


def eidas_uri_variants(uri: str) -> set[str]:
    """The URI together with its alternative non-notified spelling, if any."""
    level = eidas_level(uri)
    if level is None:
        return {uri}
    return {uri, level.uri} | {alias for alias, lvl in _EIDAS_ALIASES.items() if lvl == level}


def resolve_tier(national_uri: str) -> AssuranceTier | None:
    """Minimal eIDAS tier that can satisfy a national URI."""
    level = national_level(national_uri)
    return level.tier if level else None


def authorized_national_uris(level: EidasLevel) -> list[str]:
    """National URIs an eIDAS level authorizes, highest tier first."""
    return [national.uri for national in ALL_NATIONAL_LEVELS if level.authorizes(national)]


def declared_levels(declared_uris: Iterable[str]) -> list[EidasLevel]:
    """
    Recognized eIDAS levels among a country's declared URIs, deduplicated.

    A country declaring nothing recognizable is assumed to be capable of the
    highest tier.
    """
    levels: list[EidasLevel] = []
    for uri in declared_uris:
        level = eidas_level(uri)
        if level is not None and level not in levels:
            levels.append(level)
    return levels or [FAIL_OPEN_LEVEL]


def supported_national_uris(declared_uris: Iterable[str]) -> list[str]:
    """Union of the national URIs authorized by each declared level."""
    supported: list[str] = []
    for level in declared_levels(declared_uris):
        for uri in authorized_national_uris(level):
            if uri not in supported:
                supported.append(uri)
    return supported
