"""
Shared test fixtures and helpers for the eidas-bridge test suite.

Provides path resolution for the policy documents under tests/fixtures and
an in-memory PolicyReader whose content can be swapped between reloads.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import pytest
from railway import ErrorCode
from railway.result import Result

from eidas_bridge.domain.models import PolicyEntry

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def fixtures_dir() -> Path:
    """Return the absolute path to the test fixtures directory."""
    return FIXTURES_DIR


def fixture_path(filename: str) -> Path:
    """
    Resolve the absolute path to a test fixture file.

    Raises FileNotFoundError if the fixture does not exist.
    """
    path = FIXTURES_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Test fixture not found: {path}")
    return path


class InMemoryPolicyReader:
    """PolicyReader serving whatever entries (or failure) the test last set."""

    def __init__(self, entries: Mapping[str, PolicyEntry] | None = None) -> None:
        self.entries: Mapping[str, PolicyEntry] | None = entries or {}
        self.reads = 0

    @property
    def location(self) -> str:
        return "memory:policy"

    def fail(self) -> None:
        self.entries = None

    def read(self) -> Result[Mapping[str, PolicyEntry]]:
        self.reads += 1
        if self.entries is None:
            return Result.failure(ErrorCode.POLICY_LOAD_ERROR, "Failed to read PRID policy - simulated")
        return Result.success(dict(self.entries))


def entry(algorithm: str | None = "default-eIDAS", persistence_class: str | None = "A") -> PolicyEntry:
    return PolicyEntry(algorithm=algorithm, persistence_class=persistence_class)
