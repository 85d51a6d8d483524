"""
Unit tests for PRID policy validation and the policy loader.
"""

from __future__ import annotations

from railway import ErrorCode, ResultAssertions

from eidas_bridge.domain.models import PersistenceClass
from eidas_bridge.prid.generators import ALGORITHMS
from eidas_bridge.prid.policy import EMPTY_POLICY_ERROR, PridPolicyLoader, validate_policy
from tests.conftest import InMemoryPolicyReader, entry


class TestValidatePolicy:
    """Per-entry validation rules."""

    def test_valid_entries_survive(self) -> None:
        """
        GIVEN two correct entries
        WHEN validate_policy is called
        THEN both are in the policy and there are no errors.
        """
        validated = validate_policy({"NO": entry(), "DE": entry("colresist-eIDAS", "B")}, ALGORITHMS)

        assert not validated.validation.has_errors()
        assert validated.policy.countries == ["DE", "NO"]
        assert validated.policy.get("DE").persistence_class is PersistenceClass.B

    def test_empty_document(self) -> None:
        """
        GIVEN no entries at all
        WHEN validate_policy is called
        THEN the single error is "Empty PRID policy".
        """
        validated = validate_policy({}, ALGORITHMS)

        assert validated.validation.errors == (EMPTY_POLICY_ERROR,)
        assert validated.policy.is_empty()

    def test_invalid_country_code(self) -> None:
        """
        GIVEN an entry keyed by a 3-letter code
        WHEN validate_policy is called
        THEN it is dropped with an "Invalid country code" error.
        """
        validated = validate_policy({"NO": entry(), "SWE": entry()}, ALGORITHMS)

        assert validated.validation.errors == ("Invalid country code: SWE",)
        assert validated.policy.countries == ["NO"]

    def test_missing_algorithm(self) -> None:
        validated = validate_policy({"NO": entry(algorithm=None)}, ALGORITHMS)

        assert validated.validation.errors == ("Invalid entry - Missing 'algorithm' for country NO",)
        assert validated.policy.is_empty()

    def test_empty_algorithm(self) -> None:
        validated = validate_policy({"NO": entry(algorithm="")}, ALGORITHMS)

        assert validated.validation.errors == ("Invalid algorithm () for country NO",)
        assert validated.policy.is_empty()

    def test_unknown_algorithm(self) -> None:
        validated = validate_policy({"NO": entry(algorithm="md5-eIDAS")}, ALGORITHMS)

        assert validated.validation.errors == ("Invalid algorithm (md5-eIDAS) for country NO",)

    def test_algorithm_matched_case_insensitively(self) -> None:
        """
        GIVEN an algorithm name in upper case
        WHEN validate_policy is called
        THEN the entry is accepted with the name as written.
        """
        validated = validate_policy({"NO": entry(algorithm="DEFAULT-EIDAS")}, ALGORITHMS)

        assert not validated.validation.has_errors()
        assert validated.policy.get("NO").algorithm == "DEFAULT-EIDAS"

    def test_missing_persistence_class(self) -> None:
        validated = validate_policy({"NO": entry(persistence_class=None)}, ALGORITHMS)

        assert validated.validation.errors == ("Invalid entry - Missing 'persistenceClass' for country NO",)

    def test_bad_persistence_class(self) -> None:
        validated = validate_policy({"NO": entry(persistence_class="D")}, ALGORITHMS)

        assert validated.validation.errors == (
            "Invalid entry - Bad value for 'persistenceClass' for country NO (D) - A, B or C is required",
        )

    def test_persistence_class_upper_cased(self) -> None:
        validated = validate_policy({"NO": entry(persistence_class="c")}, ALGORITHMS)

        assert validated.policy.get("NO").persistence_class is PersistenceClass.C

    def test_all_errors_of_an_entry_reported(self) -> None:
        """
        GIVEN an entry with a bad country, no algorithm and no persistence class
        WHEN validate_policy is called
        THEN three errors are reported for it.
        """
        validated = validate_policy({"N0": entry(None, None)}, ALGORITHMS)

        assert len(validated.validation.errors) == 3

    def test_country_codes_upper_cased(self) -> None:
        validated = validate_policy({"no": entry()}, ALGORITHMS)

        assert validated.policy.countries == ["NO"]

    def test_duplicate_after_upper_casing(self) -> None:
        """
        GIVEN entries "NO" and "no"
        WHEN validate_policy is called
        THEN the first one wins and the second is reported as duplicate.
        """
        validated = validate_policy(
            {"NO": entry(), "no": entry("colresist-eIDAS", "B")},
            ALGORITHMS,
        )

        assert validated.validation.errors == ("Duplicate entry for country no",)
        assert validated.policy.get("NO").algorithm == "default-eIDAS"

    def test_only_registered_algorithms_accepted(self) -> None:
        """
        GIVEN a registry with only the default algorithm
        WHEN an entry names colresist
        THEN it is rejected.
        """
        validated = validate_policy({"DE": entry("colresist-eIDAS")}, ["default-eIDAS"])

        assert validated.validation.has_errors()


class TestPridPolicyLoader:
    def test_load_success(self) -> None:
        reader = InMemoryPolicyReader({"NO": entry()})
        loader = PridPolicyLoader(reader, ALGORITHMS)

        loaded = ResultAssertions.assert_success(loader.load())

        assert loaded.policy.countries == ["NO"]
        assert loader.location == "memory:policy"

    def test_read_failure_propagates(self) -> None:
        """
        GIVEN a reader that cannot read its resource
        WHEN load is called
        THEN POLICY_LOAD_ERROR is returned.
        """
        reader = InMemoryPolicyReader()
        reader.fail()

        ResultAssertions.assert_failure(PridPolicyLoader(reader, ALGORITHMS).load(), ErrorCode.POLICY_LOAD_ERROR)

    def test_every_load_reads_again(self) -> None:
        reader = InMemoryPolicyReader({"NO": entry()})
        loader = PridPolicyLoader(reader, ALGORITHMS)

        loader.load()
        loader.load()

        assert reader.reads == 2
