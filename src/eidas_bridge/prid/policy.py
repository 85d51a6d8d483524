"""
PRID policy loader — reads the policy resource through the PolicyReader port
and validates it against the registered generators.

Validation is per entry: an entry with a bad country code, an unknown or
missing algorithm, or a missing or bad persistence class is dropped from the
candidate snapshot and reported; the remaining entries survive. Only an
unreadable or malformed resource fails the whole load.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

import structlog
from railway.result import Result

from eidas_bridge.domain.models import (
    CountryPolicy,
    PersistenceClass,
    PolicyEntry,
    PridPolicy,
    PridPolicyValidation,
    ValidatedPolicy,
)
from eidas_bridge.domain.ports import PolicyReader

log = structlog.get_logger()

EMPTY_POLICY_ERROR = "Empty PRID policy"

_COUNTRY_CODE = re.compile(r"[A-Za-z]{2}")


def validate_policy(
    entries: Mapping[str, PolicyEntry],
    algorithms: Iterable[str],
) -> ValidatedPolicy:
    """
    Validate raw policy entries, keeping only the correct ones.

    Country codes are upper-cased in the resulting snapshot and persistence
    classes are upper-cased before they are checked.
    """
    known_algorithms = {name.lower() for name in algorithms}
    errors: list[str] = []

    if not entries:
        errors.append(EMPTY_POLICY_ERROR)
        log.warning("prid_policy.empty")
        return ValidatedPolicy(PridPolicy(), PridPolicyValidation(tuple(errors)))

    valid: dict[str, CountryPolicy] = {}
    for country, entry in entries.items():
        entry_errors = _validate_entry(country, entry, known_algorithms)
        if not entry_errors and country.upper() in valid:
            entry_errors.append(f"Duplicate entry for country {country}")
        if entry_errors:
            log.warning("prid_policy.entry_rejected", country=country, errors=entry_errors)
            errors.extend(entry_errors)
            continue
        valid[country.upper()] = CountryPolicy(
            algorithm=entry.algorithm,  # type: ignore[arg-type]
            persistence_class=PersistenceClass(entry.persistence_class.upper()),  # type: ignore[union-attr]
        )

    if errors:
        log.warning("prid_policy.validation_errors", errors=errors)
    else:
        log.debug("prid_policy.validation_ok", countries=sorted(valid))
    return ValidatedPolicy(PridPolicy(valid), PridPolicyValidation(tuple(errors)))


def _validate_entry(country: str, entry: PolicyEntry, known_algorithms: set[str]) -> list[str]:
    errors: list[str] = []
    if not _COUNTRY_CODE.fullmatch(country):
        errors.append(f"Invalid country code: {country}")

    if entry.algorithm is None:
        errors.append(f"Invalid entry - Missing 'algorithm' for country {country}")
    elif entry.algorithm.lower() not in known_algorithms:
        errors.append(f"Invalid algorithm ({entry.algorithm}) for country {country}")

    if entry.persistence_class is None:
        errors.append(f"Invalid entry - Missing 'persistenceClass' for country {country}")
    elif entry.persistence_class.upper() not in PersistenceClass.__members__:
        errors.append(
            f"Invalid entry - Bad value for 'persistenceClass' for country {country} "
            f"({entry.persistence_class}) - A, B or C is required"
        )
    return errors


class PridPolicyLoader:
    """
    Produces validated policy candidates from a PolicyReader.

    Stateless apart from its collaborators; every call to load() performs a
    fresh read and returns a fresh validation.
    """

    def __init__(self, reader: PolicyReader, algorithms: Iterable[str]) -> None:
        self._reader = reader
        self._algorithms = tuple(algorithms)

    @property
    def location(self) -> str:
        return self._reader.location

    def load(self) -> Result[ValidatedPolicy]:
        """
        Read and validate the policy resource.

        Returns Result.failure(POLICY_LOAD_ERROR, ...) if the resource could
        not be read or parsed; per-entry problems are reported in the
        ValidatedPolicy's validation instead.
        """
        log.debug("prid_policy.loading", location=self._reader.location)
        return (
            self._reader.read()
            .map(lambda entries: validate_policy(entries, self._algorithms))
            .peek(
                lambda loaded: log.debug(
                    "prid_policy.loaded",
                    location=self._reader.location,
                    countries=loaded.policy.countries,
                )
            )
        )
