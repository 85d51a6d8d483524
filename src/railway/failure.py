"""
Failure description — structured error information for the failure track.

ErrorCode is the complete error taxonomy of the bridge. Codes are grouped by
who is expected to act on them:

  - Caller errors: the identifier or request was structurally unacceptable.
  - Configuration state: the installed policy cannot serve the request.
  - Negotiation outcomes: assurance levels could not be matched.
  - Infrastructure: reading or parsing the policy resource failed.

None of them is retried automatically; retries are the caller's decision.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """Structured error codes for the failure track."""

    # --- Caller errors ---
    INVALID_INPUT = "INVALID_INPUT"
    """Null/blank identifier, malformed prefix or bad country code."""

    COUNTRY_MISMATCH = "COUNTRY_MISMATCH"
    """Issuing country embedded in the identifier differs from the supplied one."""

    TOO_SHORT = "TOO_SHORT"
    """Identifier material too short for the selected algorithm."""

    # --- Configuration state ---
    COUNTRY_NOT_SUPPORTED = "COUNTRY_NOT_SUPPORTED"
    """No policy entry for the country in the installed snapshot."""

    ALGORITHM_NOT_FOUND = "ALGORITHM_NOT_FOUND"
    """Policy names an algorithm with no registered generator."""

    # --- Negotiation outcomes ---
    REQUEST_UNSUPPORTED = "REQUEST_UNSUPPORTED"
    """Requested assurance levels cannot be served by the foreign peer."""

    NO_MAPPING = "NO_MAPPING"
    """Returned eIDAS level authorizes none of the originally requested URIs."""

    ASSURANCE_INSUFFICIENT = "ASSURANCE_INSUFFICIENT"
    """Returned eIDAS level does not satisfy the request that was sent."""

    # --- Infrastructure ---
    POLICY_LOAD_ERROR = "POLICY_LOAD_ERROR"
    """Policy resource unreadable or malformed."""

    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """Unexpected exception escaping a wrapped computation."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.TOO_SHORT, "Identifier too short")
    >>> desc.code
    <ErrorCode.TOO_SHORT: 'TOO_SHORT'>
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(
                type(self.exception), self.exception, self.exception.__traceback__
            )
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
