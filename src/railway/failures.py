"""
Factory methods for the failures raised by the PRID and LoA subsystems.

    # Instead of:
    Result.failure(ErrorCode.COUNTRY_MISMATCH, "Mismatching country ...")

    # Write:
    Failures.country_mismatch("Mismatching country ...")
"""

from __future__ import annotations

from railway.failure import ErrorCode
from railway.result import Result


class Failures:
    """One factory per domain error code."""

    @staticmethod
    def invalid_input(message: str) -> Result:
        """Caller error — malformed identifier, bad country code."""
        return Result.failure(ErrorCode.INVALID_INPUT, message)

    @staticmethod
    def country_mismatch(message: str) -> Result:
        return Result.failure(ErrorCode.COUNTRY_MISMATCH, message)

    @staticmethod
    def too_short(message: str) -> Result:
        return Result.failure(ErrorCode.TOO_SHORT, message)

    @staticmethod
    def country_not_supported(country: str) -> Result:
        return Result.failure(
            ErrorCode.COUNTRY_NOT_SUPPORTED,
            f"Country '{country}' is not supported by the PRID service",
        )

    @staticmethod
    def algorithm_not_found(algorithm: str) -> Result:
        return Result.failure(
            ErrorCode.ALGORITHM_NOT_FOUND,
            f"No matching PRID generator for algorithm '{algorithm}'",
        )

    @staticmethod
    def request_unsupported(message: str) -> Result:
        return Result.failure(ErrorCode.REQUEST_UNSUPPORTED, message)

    @staticmethod
    def no_mapping(message: str) -> Result:
        return Result.failure(ErrorCode.NO_MAPPING, message)

    @staticmethod
    def assurance_insufficient(message: str) -> Result:
        return Result.failure(ErrorCode.ASSURANCE_INSUFFICIENT, message)

    @staticmethod
    def policy_load_error(message: str, exception: BaseException | None = None) -> Result:
        """I/O or parse failure while reading the policy resource."""
        return Result.failure(ErrorCode.POLICY_LOAD_ERROR, message, exception)
