"""
Railway-Oriented Programming primitives used across eidas-bridge.

Every fallible operation in the PRID and LoA subsystems returns a Result:

    from railway import Result, ErrorCode

    def require_two_letters(code: str) -> Result[str]:
        if len(code) != 2:
            return Result.failure(ErrorCode.INVALID_INPUT, "Country code must be 2 characters")
        return Result.success(code.upper())

    prid = (
        require_two_letters(country)
        .flat_map(lambda cc: generator.generate(identifier, cc))
        .map(lambda result: result.value)
    )
"""

from railway.assertions import ResultAssertions
from railway.execution import ExecutionContext, LoggingExecutionContext, NoOpExecutionContext
from railway.failure import ErrorCode, FailureDescription
from railway.failures import Failures
from railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "Failures",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]
