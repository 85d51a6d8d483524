"""
PRID generators — the strategy family wrapping each normalizer behind the
PridGenerator port.

A generator checks the structural preconditions of the eIDAS person
identifier ("CC/DEST/rest"), strips the 6-character prefix and all
whitespace, runs its normalizer and prepends "<COUNTRY>:".

    generator = create_generator(DEFAULT_ALGORITHM)
    generator.generate("NO/SE/05068907693", "NO")  # → Success("NO:05068907693")

Selection by name is a plain dict lookup; there is no dynamic loading.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import structlog
from railway import ErrorCode, Failures
from railway.result import Result

from eidas_bridge.prid.normalizer import (
    Normalizer,
    normalize_colresist,
    normalize_default,
    normalize_special_characters,
    normalize_test,
)

log = structlog.get_logger()

DEFAULT_ALGORITHM = "default-eIDAS"
COLRESIST_ALGORITHM = "colresist-eIDAS"
SPECIAL_CHARACTERS_ALGORITHM = "special-characters-eIDAS"
TEST_ALGORITHM = "test-eIDAS"

DEFAULT_DESTINATION_COUNTRY = "SE"
PREFIX_LENGTH = 6

# Java's \s: ASCII whitespace only.
_WHITESPACE = re.compile(r"[ \t\n\x0b\f\r]+")

_NORMALIZERS: dict[str, Normalizer] = {
    DEFAULT_ALGORITHM: normalize_default,
    COLRESIST_ALGORITHM: normalize_colresist,
    SPECIAL_CHARACTERS_ALGORITHM: normalize_special_characters,
    TEST_ALGORITHM: normalize_test,
}

ALGORITHMS: tuple[str, ...] = tuple(_NORMALIZERS)


class NormalizingPridGenerator:
    """
    PRID generator delegating the component calculation to a normalizer.

    Implements the PridGenerator port. Stateless after construction and safe
    to share between threads.
    """

    def __init__(
        self,
        algorithm_name: str,
        normalizer: Normalizer,
        destination_country: str = DEFAULT_DESTINATION_COUNTRY,
    ) -> None:
        if not re.fullmatch(r"[A-Za-z]{2}", destination_country or ""):
            raise ValueError(f"Destination country must be 2 letters, got {destination_country!r}")
        self._algorithm_name = algorithm_name
        self._normalizer = normalizer
        self._destination_country = destination_country.upper()
        self._prefix = re.compile(
            rf"[A-Za-z]{{2}}/(?:{self._destination_country}|{self._destination_country.lower()})/"
        )

    @property
    def algorithm_name(self) -> str:
        return self._algorithm_name

    @property
    def destination_country(self) -> str:
        return self._destination_country

    def generate(self, person_identifier: str | None, country_code: str | None) -> Result[str]:
        """
        Calculate the PRID for an eIDAS person identifier issued by `country_code`.

        Failures:
          INVALID_INPUT    — missing identifier, bad country code, bad prefix,
                             no identifier material after the prefix
          COUNTRY_MISMATCH — identifier issued by another country
          TOO_SHORT        — rejected by the normalizer
        """
        log.debug(
            "prid.generate_started",
            algorithm=self._algorithm_name,
            person_identifier=person_identifier,
        )
        return (
            self._check_input(person_identifier, country_code)
            .map(lambda pid: _WHITESPACE.sub("", pid[PREFIX_LENGTH:]))
            .ensure(
                bool,
                ErrorCode.INVALID_INPUT,
                f"Identifier '{person_identifier}' holds no identifier material",
            )
            .flat_map(self._normalizer)
            .map(lambda component: f"{country_code.upper()}:{component}")  # type: ignore[union-attr]
            .peek(
                lambda prid: log.debug(
                    "prid.generate_completed",
                    algorithm=self._algorithm_name,
                    person_identifier=person_identifier,
                    prid=prid,
                )
            )
            .peek_failure(
                lambda err: log.error(
                    "prid.generate_failed",
                    algorithm=self._algorithm_name,
                    code=err.code.value,
                    reason=err.message,
                )
            )
        )

    def _check_input(self, person_identifier: str | None, country_code: str | None) -> Result[str]:
        if not person_identifier:
            return Failures.invalid_input("Supplied personIdentifier must not be empty")
        if country_code is None or len(country_code) != 2:
            return Failures.invalid_input("Supplied country code must be 2 characters")
        if len(person_identifier) < PREFIX_LENGTH or not self._prefix.fullmatch(
            person_identifier[:PREFIX_LENGTH]
        ):
            return Failures.invalid_input(f"Illegal input - identifier '{person_identifier}' is not valid")
        if person_identifier[:2].upper() != country_code.upper():
            return Failures.country_mismatch(
                f"Mismatching country - expected '{country_code}', "
                f"but this is not present in '{person_identifier}'"
            )
        return Result.success(person_identifier)

    def __repr__(self) -> str:
        return f"NormalizingPridGenerator({self._algorithm_name!r}, destination={self._destination_country!r})"


def create_generator(
    algorithm: str,
    destination_country: str = DEFAULT_DESTINATION_COUNTRY,
) -> NormalizingPridGenerator:
    """
    Build the generator for a known algorithm name (case-insensitive).

    Raises ValueError for unknown names; this is a wiring-time error.
    """
    for name, normalizer in _NORMALIZERS.items():
        if name.lower() == algorithm.lower():
            return NormalizingPridGenerator(name, normalizer, destination_country)
    raise ValueError(f"Unknown PRID algorithm {algorithm!r}, expected one of {list(ALGORITHMS)}")


def create_generators(
    algorithms: Iterable[str] = ALGORITHMS,
    destination_country: str = DEFAULT_DESTINATION_COUNTRY,
) -> list[NormalizingPridGenerator]:
    return [create_generator(name, destination_country) for name in algorithms]
