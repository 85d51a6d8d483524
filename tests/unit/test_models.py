"""
Unit tests for the domain models.
"""

from __future__ import annotations

import dataclasses

import pytest

from eidas_bridge.domain.models import (
    CountryPolicy,
    PersistenceClass,
    PridPolicy,
    PridPolicyValidation,
)


class TestPridPolicy:
    def test_lookup_is_case_insensitive(self) -> None:
        policy = PridPolicy({"NO": CountryPolicy("default-eIDAS", PersistenceClass.A)})

        assert policy.get("no") == policy.get("NO")
        assert policy.get(None) is None
        assert policy.get("") is None

    def test_snapshot_is_immutable(self) -> None:
        """
        GIVEN a policy built from a dict
        WHEN the source dict or the entries are modified
        THEN the snapshot is unaffected or refuses the change.
        """
        source = {"NO": CountryPolicy("default-eIDAS", PersistenceClass.A)}
        policy = PridPolicy(source)
        source["DK"] = CountryPolicy("default-eIDAS", PersistenceClass.A)

        assert policy.countries == ["NO"]
        with pytest.raises(TypeError):
            policy.entries["DK"] = source["DK"]  # type: ignore[index]
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.entries = {}  # type: ignore[misc]

    def test_to_dict(self) -> None:
        policy = PridPolicy(
            {
                "SK": CountryPolicy("special-characters-eIDAS", PersistenceClass.C),
                "DE": CountryPolicy("colresist-eIDAS", PersistenceClass.B),
            }
        )

        assert policy.to_dict() == {
            "DE": {"algorithm": "colresist-eIDAS", "persistenceClass": "B"},
            "SK": {"algorithm": "special-characters-eIDAS", "persistenceClass": "C"},
        }

    def test_empty(self) -> None:
        assert PridPolicy().is_empty()


class TestPridPolicyValidation:
    def test_has_errors(self) -> None:
        assert not PridPolicyValidation().has_errors()
        assert PridPolicyValidation(("Empty PRID policy",)).has_errors()
