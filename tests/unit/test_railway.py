"""
Tests for the Result monad and its helpers.

Tests cover:
  - Success/Failure creation and introspection
  - map, flat_map, ensure transformations
  - Side effects (peek, peek_failure)
  - Static factories (from_computation, from_optional, all_of)
  - Execution contexts
  - Pattern matching and equality
"""

from __future__ import annotations

import pytest

from railway import (
    ErrorCode,
    Failure,
    FailureDescription,
    Failures,
    LoggingExecutionContext,
    NoOpExecutionContext,
    Result,
    ResultAssertions,
    Success,
)

# ═══════════════════════════════════════════════════════════════
# 1. Creation & Introspection
# ═══════════════════════════════════════════════════════════════


class TestCreation:
    def test_success_wraps_value(self):
        result = Result.success("NO:05068907693")
        assert result.is_success()
        assert not result.is_failure()
        assert result.value() == "NO:05068907693"

    def test_success_rejects_none(self):
        with pytest.raises(TypeError, match="must not be None"):
            Success(None)

    def test_failure_with_code_and_message(self):
        result = Result.failure(ErrorCode.TOO_SHORT, "too short")
        assert result.is_failure()
        assert result.error().code == ErrorCode.TOO_SHORT
        assert result.error().message == "too short"

    def test_failure_is_falsy(self):
        assert not Result.failure(ErrorCode.INVALID_INPUT, "x")

    def test_value_on_failure_raises(self):
        with pytest.raises(ValueError, match="Cannot get value"):
            Result.failure(ErrorCode.INVALID_INPUT, "bad").value()

    def test_error_on_success_raises(self):
        with pytest.raises(ValueError, match="Cannot get error"):
            Result.success(1).error()

    def test_failure_description_str(self):
        assert str(FailureDescription(ErrorCode.NO_MAPPING, "none")) == "NO_MAPPING: none"


# ═══════════════════════════════════════════════════════════════
# 2. Transformations
# ═══════════════════════════════════════════════════════════════


class TestTransformations:
    def test_map_transforms_success(self):
        assert Result.success("no").map(str.upper) == Result.success("NO")

    def test_map_short_circuits_failure(self):
        failure = Result.failure(ErrorCode.INVALID_INPUT, "bad")
        assert failure.map(str.upper) == failure

    def test_flat_map_chains(self):
        result = Result.success(3).flat_map(lambda v: Result.success(v * 2))
        assert result.value() == 6

    def test_flat_map_propagates_inner_failure(self):
        result = Result.success(3).flat_map(lambda _: Failures.too_short("short"))
        ResultAssertions.assert_failure(result, ErrorCode.TOO_SHORT)

    def test_ensure_passes(self):
        assert Result.success("abc").ensure(bool, ErrorCode.INVALID_INPUT, "empty").value() == "abc"

    def test_ensure_fails_with_callable_message(self):
        result = Result.success("ab").ensure(
            lambda s: len(s) > 5, ErrorCode.TOO_SHORT, lambda s: f"'{s}' too short"
        )
        ResultAssertions.assert_failure(result, ErrorCode.TOO_SHORT)
        assert result.error().message == "'ab' too short"

    def test_either(self):
        assert Result.success(2).either(lambda v: v + 1, lambda e: -1) == 3
        assert Result.failure(ErrorCode.NO_MAPPING, "x").either(lambda v: v, lambda e: e.code) == ErrorCode.NO_MAPPING

    def test_get_or_else(self):
        assert Result.failure(ErrorCode.INVALID_INPUT, "x").get_or_else("fallback") == "fallback"
        assert Result.success("value").get_or_else("fallback") == "value"


class TestSideEffects:
    def test_peek_runs_on_success_only(self):
        seen: list[int] = []
        Result.success(1).peek(seen.append)
        Result.failure(ErrorCode.INVALID_INPUT, "x").peek(seen.append)
        assert seen == [1]

    def test_peek_failure_runs_on_failure_only(self):
        seen: list[ErrorCode] = []
        Result.success(1).peek_failure(lambda e: seen.append(e.code))
        Result.failure(ErrorCode.NO_MAPPING, "x").peek_failure(lambda e: seen.append(e.code))
        assert seen == [ErrorCode.NO_MAPPING]


# ═══════════════════════════════════════════════════════════════
# 3. Static factories
# ═══════════════════════════════════════════════════════════════


class TestFactories:
    def test_from_computation_success(self):
        assert Result.from_computation(lambda: 42, ErrorCode.POLICY_LOAD_ERROR, "boom").value() == 42

    def test_from_computation_captures_exception(self):
        def explode() -> int:
            raise OSError("disk gone")

        result = Result.from_computation(explode, ErrorCode.POLICY_LOAD_ERROR, "Failed to read")
        error = ResultAssertions.assert_failure(result, ErrorCode.POLICY_LOAD_ERROR)
        assert error.message == "Failed to read - disk gone"
        assert isinstance(error.exception, OSError)
        assert "OSError" in error.full_stack_trace()

    def test_from_optional(self):
        assert Result.from_optional("x", "missing").value() == "x"
        ResultAssertions.assert_failure(Result.from_optional(None, "missing"), ErrorCode.INVALID_INPUT)

    def test_all_of_collects_values(self):
        assert Result.all_of([Result.success(1), Result.success(2)]).value() == [1, 2]

    def test_all_of_first_failure_wins(self):
        result = Result.all_of(
            [Result.success(1), Failures.no_mapping("first"), Failures.too_short("second")]
        )
        assert result.error().message == "first"

    def test_country_not_supported_message(self):
        result = Failures.country_not_supported("FI")
        ResultAssertions.assert_failure_message_contains(result, "Country 'FI' is not supported")


# ═══════════════════════════════════════════════════════════════
# 4. Execution contexts
# ═══════════════════════════════════════════════════════════════


class TestExecutionContexts:
    def test_noop_context_passes_result_through(self):
        assert NoOpExecutionContext().execute(lambda: Result.success(5)).value() == 5

    def test_logging_context_returns_result(self):
        ctx = LoggingExecutionContext(operation="test")
        assert ctx.execute(lambda: Result.success("ok")).value() == "ok"

    def test_logging_context_converts_exception(self):
        def explode() -> Result[str]:
            raise RuntimeError("unexpected")

        result = LoggingExecutionContext(operation="test").execute(explode)
        ResultAssertions.assert_failure(result, ErrorCode.TECHNICAL_ERROR)

    def test_within(self):
        assert Result.success(1).within(NoOpExecutionContext()).value() == 1


# ═══════════════════════════════════════════════════════════════
# 5. Pattern matching & equality
# ═══════════════════════════════════════════════════════════════


class TestPatternMatching:
    def test_match_success(self):
        match Result.success("NO:05068907693"):
            case Success(value):
                assert value == "NO:05068907693"
            case Failure(_):
                pytest.fail("expected success")

    def test_match_failure(self):
        match Failures.country_mismatch("mismatch"):
            case Failure(error):
                assert error.code == ErrorCode.COUNTRY_MISMATCH
            case Success(_):
                pytest.fail("expected failure")

    def test_failures_equal_by_code_and_message(self):
        assert Failures.too_short("x") == Failures.too_short("x")
        assert Failures.too_short("x") != Failures.invalid_input("x")
        assert Result.success(1) != Failures.too_short("x")
