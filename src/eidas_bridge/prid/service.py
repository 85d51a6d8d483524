"""
PRID service — resolves (person identifier, country) to a PRID under the
installed policy snapshot, and owns the policy lifecycle.

Lifecycle:
  - The constructor performs the initial load and raises PolicyStartupError
    if the resource cannot be read or validates with any error.
  - update_policy() reloads on demand (scheduler or admin endpoint). A failed
    read keeps the installed snapshot; a readable document installs its
    valid entries, unless none survived validation.

Concurrency: the installed PridPolicy is immutable and replaced by a single
reference assignment, so generate_prid() reads it without locking. Reloads
are serialized by a lock; a concurrent reload waits for the running one.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

import structlog
from railway import ErrorCode, Failures
from railway.result import Result

from eidas_bridge.domain.models import (
    CountryPolicy,
    PridPolicy,
    PridPolicyValidation,
    PridResult,
)
from eidas_bridge.domain.ports import PolicyReader, PridGenerator
from eidas_bridge.prid.policy import PridPolicyLoader

log = structlog.get_logger()


class PolicyStartupError(Exception):
    """The initial PRID policy could not be loaded or did not validate."""

    def __init__(self, message: str, validation: PridPolicyValidation) -> None:
        super().__init__(message)
        self.validation = validation


class PridService:
    """
    Generates PRIDs according to the per-country policy.

        service = PridService(FilePolicyReader(Path("policy.yml")), create_generators())
        service.generate_prid("NO/SE/05068907693", "NO")
        # → Success(PridResult("NO:05068907693", PersistenceClass.A))
    """

    def __init__(self, reader: PolicyReader, generators: Sequence[PridGenerator]) -> None:
        self._generators: dict[str, PridGenerator] = {}
        for generator in generators:
            self._generators.setdefault(generator.algorithm_name.lower(), generator)

        self._loader = PridPolicyLoader(reader, [g.algorithm_name for g in generators])
        self._reload_lock = threading.Lock()
        self._policy = PridPolicy()
        self._latest_validation = PridPolicyValidation()

        self._initial_load()

    def _initial_load(self) -> None:
        result = self._loader.load()
        if result.is_failure():
            failure = result.error()
            validation = PridPolicyValidation((failure.message,))
            self._latest_validation = validation
            log.error("prid_service.startup_failed", location=self._loader.location, error=failure.message)
            raise PolicyStartupError(f"PRID policy error - {failure.message}", validation)

        loaded = result.value()
        self._policy = loaded.policy
        self._latest_validation = loaded.validation
        if loaded.validation.has_errors():
            log.error("prid_service.startup_invalid_policy", errors=list(loaded.validation.errors))
            raise PolicyStartupError(
                f"PRID policy error - {list(loaded.validation.errors)}", loaded.validation
            )
        log.info("prid_service.started", location=self._loader.location, countries=self._policy.countries)

    # ──────────────────────── Generation ────────────────────────

    def generate_prid(self, person_identifier: str | None, country_code: str | None) -> Result[PridResult]:
        """
        Generate the PRID for an eIDAS person identifier issued by `country_code`.

        Failures:
          COUNTRY_NOT_SUPPORTED — no policy entry for the country
          ALGORITHM_NOT_FOUND   — the policy names an unregistered algorithm
          plus whatever the selected generator reports.
        """
        policy = self._policy
        country_policy = policy.get(country_code)
        if country_policy is None:
            log.info("prid_service.country_not_supported", country=country_code)
            return Failures.country_not_supported(str(country_code))

        generator = self._generators.get(country_policy.algorithm.lower())
        if generator is None:
            log.error("prid_service.algorithm_not_found", algorithm=country_policy.algorithm)
            return Failures.algorithm_not_found(country_policy.algorithm)

        return generator.generate(person_identifier, country_code).map(
            lambda value: PridResult(value=value, persistence_class=country_policy.persistence_class)
        )

    # ──────────────────────── Policy access ────────────────────────

    def get_policy(self) -> PridPolicy:
        """The installed policy snapshot."""
        return self._policy

    def get_country_policy(self, country_code: str | None) -> CountryPolicy | None:
        return self._policy.get(country_code)

    @property
    def latest_validation(self) -> PridPolicyValidation:
        return self._latest_validation

    # ──────────────────────── Reload ────────────────────────

    def update_policy(self) -> PridPolicyValidation:
        """
        Reload the policy resource and install the result.

        Never raises for load problems: they are logged and returned in the
        validation, and the previously installed snapshot stays in place.
        """
        with self._reload_lock:
            log.debug("prid_service.reloading", location=self._loader.location)
            result = self._loader.load()

            if result.is_failure():
                failure = result.error()
                log.error("prid_service.reload_failed", location=self._loader.location, error=failure.message)
                validation = PridPolicyValidation((failure.message,))
                self._latest_validation = validation
                return validation

            loaded = result.value()
            if loaded.policy.is_empty() and not self._policy.is_empty():
                log.error(
                    "prid_service.reload_rejected",
                    reason="no valid entries",
                    errors=list(loaded.validation.errors),
                )
            else:
                self._policy = loaded.policy
                log.info("prid_service.reloaded", countries=loaded.policy.countries)

            self._latest_validation = loaded.validation
            return loaded.validation

    def reload(self) -> Result[PridPolicy]:
        """
        update_policy() on the railway: Success with the installed snapshot,
        or POLICY_LOAD_ERROR carrying the validation errors. Valid entries of a
        partially invalid document are still installed in the failure case.
        """
        validation = self.update_policy()
        if validation.has_errors():
            return Result.failure(ErrorCode.POLICY_LOAD_ERROR, "; ".join(validation.errors))
        return Result.success(self._policy)
