"""
Tests for MockContext
=====================

Lifecycle state machine, interception (record, verify, respond), the
test-facing API, and isolation between consecutive test cases.

Test Categories
---------------
1. Lifecycle: legal and illegal transitions
2. Interception: counting, verification, injected responses
3. Failures: fail-fast abort, swallowed failures, teardown checks
4. Isolation: state leaks and test-to-test independence
"""

import logging

import pytest

from busmock.config import MockConfig
from busmock.context import LifecycleState, MockContext
from busmock.exceptions import (
    CallCountError,
    ExpectationMismatchError,
    LifecycleError,
    StateLeakError,
    UnconsumedExpectationError,
    UnexpectedCallError,
    VerificationError,
)
from busmock.matchers import ANY
from busmock.primitives import PrimitiveId

WRITE = PrimitiveId.I2C_WRITE
READ = PrimitiveId.I2C_READ


def write(ctx, handle=1, command=0x01, data=b"\x00\x00\x00\x00", data_length=4):
    return ctx.intercept(
        WRITE,
        {"handle": handle, "command": command, "data": data, "data_length": data_length},
    )


def read(ctx, buf, handle=1, command=0x02, rx_length=None):
    rx_length = len(buf) if rx_length is None else rx_length
    return ctx.intercept(
        READ, {"handle": handle, "command": command, "rx_length": rx_length}, buf, rx_length
    )


# =============================================================================
# Lifecycle Tests
# =============================================================================

class TestLifecycle:
    """Tests for the UNINITIALIZED -> READY -> ARMED -> CONSUMED cycle."""

    def test_initial_state(self):
        ctx = MockContext(MockConfig())
        assert ctx.state is LifecycleState.UNINITIALIZED

    def test_full_cycle(self):
        ctx = MockContext(MockConfig())
        ctx.init()
        assert ctx.state is LifecycleState.READY

        ctx.arm_for_test("test_one")
        assert ctx.state is LifecycleState.ARMED
        assert ctx.test_name == "test_one"

        write(ctx)
        assert ctx.state is LifecycleState.CONSUMED

        ctx.teardown_test()
        assert ctx.state is LifecycleState.READY

        ctx.shutdown()
        assert ctx.state is LifecycleState.UNINITIALIZED

    def test_teardown_without_calls(self, ctx):
        """ARMED -> READY is legal: a test may make no calls at all."""
        ctx.arm_for_test()
        ctx.teardown_test()
        assert ctx.state is LifecycleState.READY

    def test_double_init(self, ctx):
        with pytest.raises(LifecycleError, match="init\\(\\) not allowed in state ready"):
            ctx.init()

    def test_arm_before_init(self):
        with pytest.raises(LifecycleError):
            MockContext(MockConfig()).arm_for_test()

    def test_intercept_outside_test_case(self, ctx):
        with pytest.raises(LifecycleError) as exc_info:
            write(ctx)
        assert exc_info.value.operation == "intercept"
        assert exc_info.value.state is LifecycleState.READY

    def test_teardown_when_ready(self, ctx):
        with pytest.raises(LifecycleError):
            ctx.teardown_test()

    def test_shutdown_while_armed(self, ctx):
        ctx.arm_for_test()
        with pytest.raises(LifecycleError):
            ctx.shutdown()

    def test_queue_calls_require_test_case(self, ctx):
        with pytest.raises(LifecycleError):
            ctx.expect(WRITE, command=1)
        with pytest.raises(LifecycleError):
            ctx.will_return(WRITE, 0)

    def test_call_count_before_init(self):
        with pytest.raises(LifecycleError):
            MockContext(MockConfig()).call_count(WRITE)

    def test_reinit_after_shutdown(self, ctx):
        ctx.shutdown()
        ctx.init()
        assert ctx.state is LifecycleState.READY

    def test_test_case_context_manager(self, ctx):
        with ctx.test_case("scoped") as armed:
            assert armed is ctx
            assert ctx.state is LifecycleState.ARMED
        assert ctx.state is LifecycleState.READY

    def test_test_case_tears_down_on_error(self, ctx):
        with pytest.raises(RuntimeError):
            with ctx.test_case("boom"):
                ctx.expect(WRITE, command=1)
                raise RuntimeError("driver crashed")
        # No UnconsumedExpectationError on top of the original failure
        assert ctx.state is LifecycleState.READY

    def test_lifecycle_logging(self, ctx, caplog):
        with caplog.at_level(logging.INFO, logger="busmock.context"):
            ctx.arm_for_test("logged")
            ctx.teardown_test()
        assert "Armed for test 'logged'" in caplog.text
        assert "Tore down test 'logged'" in caplog.text


# =============================================================================
# Interception Tests
# =============================================================================

class TestInterception:
    """Record, verify, respond."""

    def test_scenario_write_matches_expectation(self, ctx):
        """Expected write with matching command and length passes and counts once."""
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01, data_length=4)
        ctx.will_return(WRITE, 0)

        assert write(ctx, command=0x01, data_length=4) == 0
        assert ctx.call_count(WRITE) == 1
        ctx.teardown_test()

    def test_scenario_read_without_response(self, ctx):
        """Read with nothing queued returns the default status, buffer untouched."""
        ctx.arm_for_test()
        buf = bytearray(b"\xee\xee")
        assert read(ctx, buf, command=0x02) == -1
        assert buf == bytearray(b"\xee\xee")
        assert ctx.exhausted_count(READ) == 1
        ctx.teardown_test()

    def test_n_expectations_n_calls(self, ctx):
        ctx.arm_for_test()
        for command in range(5):
            ctx.expect(WRITE, command=command)
        for command in range(5):
            write(ctx, command=command)
        assert ctx.call_count(WRITE) == 5
        assert ctx.was_called(WRITE, 5)
        assert ctx.pending_expectations() == []
        ctx.teardown_test()

    def test_read_fills_buffer(self, ctx):
        ctx.arm_for_test()
        ctx.will_return_buffer(READ, b"\x12\x34", status=0)
        buf = bytearray(2)
        assert read(ctx, buf) == 0
        assert buf == bytearray(b"\x12\x34")
        ctx.teardown_test()

    def test_open_returns_handle(self, ctx):
        ctx.arm_for_test()
        ctx.will_return(PrimitiveId.I2C_OPEN, 3)
        assert ctx.intercept(PrimitiveId.I2C_OPEN, {"bus": "/dev/i2c-1", "address": 0x1E}) == 3
        ctx.teardown_test()

    def test_will_return_times(self, ctx):
        ctx.arm_for_test()
        ctx.will_return(WRITE, 0, times=3)
        assert [write(ctx) for _ in range(4)] == [0, 0, 0, -1]
        ctx.teardown_test()

    def test_will_return_times_validated(self, ctx):
        ctx.arm_for_test()
        with pytest.raises(ValueError):
            ctx.will_return(WRITE, 0, times=0)

    def test_default_status_from_config(self):
        ctx = MockContext(MockConfig(default_status=-42)).init()
        ctx.arm_for_test()
        assert write(ctx) == -42

    def test_call_log(self, ctx):
        ctx.arm_for_test()
        write(ctx, command=0x10)
        read(ctx, bytearray(1))
        write(ctx, command=0x11)

        assert [c.primitive for c in ctx.calls] == [WRITE, READ, WRITE]
        assert [c.params["command"] for c in ctx.calls_for(WRITE)] == [0x10, 0x11]
        assert ctx.counts == {WRITE: 2, READ: 1}

    def test_expect_with_matchers(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, handle=ANY, data=b"\x01\x02", data_length=2)
        write(ctx, handle=9, data=bytearray(b"\x01\x02"), data_length=2)
        ctx.teardown_test()

    def test_expect_without_params_only_checks_the_call_happens(self, strict_ctx):
        strict_ctx.arm_for_test()
        strict_ctx.expect(WRITE)
        write(strict_ctx, command=0x77)
        strict_ctx.teardown_test()

    def test_expect_unknown_param(self, ctx):
        ctx.arm_for_test()
        with pytest.raises(ValueError, match="i2c_write has no parameter"):
            ctx.expect(WRITE, length=4)

    def test_expect_param_grouping(self, ctx):
        ctx.arm_for_test()
        ctx.expect_param(WRITE, "command", 0x01).expect_param(WRITE, "data_length", 4)
        ctx.expect_param(WRITE, "command", 0x02)
        assert len(ctx.pending_expectations()) == 2

        write(ctx, command=0x01, data_length=4)
        write(ctx, command=0x02)
        ctx.teardown_test()


# =============================================================================
# Failure Tests
# =============================================================================

class TestFailures:
    """Verification failures and how they end a test case."""

    def test_scenario_mismatch_aborts(self, ctx):
        """Mismatch reports expected and actual; the driver cannot continue."""
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)

        with pytest.raises(ExpectationMismatchError) as exc_info:
            write(ctx, command=0x02)

        error = exc_info.value
        assert error.param_name == "command"
        assert error.expected == "0x01"
        assert error.actual == 0x02
        assert error.ordinal == 1
        assert "expected 0x01, actual 0x02" in str(error)
        assert ctx.outcome == "failed"

        # Any further driver call re-raises and is not recorded
        with pytest.raises(ExpectationMismatchError):
            write(ctx, command=0x01)
        assert ctx.call_count(WRITE) == 1

    def test_mismatch_is_assertion_error(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        with pytest.raises(AssertionError):
            write(ctx, command=0x02)

    def test_strict_unexpected_call(self, strict_ctx):
        strict_ctx.arm_for_test()
        with pytest.raises(UnexpectedCallError) as exc_info:
            write(strict_ctx, command=0x05)
        assert exc_info.value.primitive is WRITE
        assert exc_info.value.actual_params["command"] == 0x05
        assert "unexpected call" in str(exc_info.value)

    def test_lenient_unexpected_call_passes(self, ctx):
        ctx.arm_for_test()
        write(ctx)
        assert ctx.outcome == "passed"
        ctx.teardown_test()

    def test_strict_override_per_test(self, ctx):
        ctx.arm_for_test(strict=True)
        assert ctx.strict
        with pytest.raises(UnexpectedCallError):
            write(ctx)
        ctx.teardown_test(test_passed=False)

        ctx.arm_for_test()
        assert not ctx.strict

    def test_swallowed_failure_raised_at_teardown(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        try:
            write(ctx, command=0x02)
        except VerificationError:
            pass  # A careless driver eats the error
        with pytest.raises(ExpectationMismatchError):
            ctx.teardown_test()
        assert ctx.state is LifecycleState.READY

    def test_failed_test_skips_late_checks(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        ctx.teardown_test(test_passed=False)
        assert ctx.state is LifecycleState.READY

    def test_unconsumed_expectations(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        ctx.expect(WRITE, command=0x02)
        ctx.expect(READ, command=0x03)
        write(ctx, command=0x01)

        with pytest.raises(UnconsumedExpectationError) as exc_info:
            ctx.teardown_test()
        assert exc_info.value.pending == {WRITE: 1, READ: 1}
        assert "2 expected call(s) never happened" in str(exc_info.value)

    def test_unconsumed_check_disabled(self):
        ctx = MockContext(MockConfig(verify_on_teardown=False)).init()
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        ctx.teardown_test()

    def test_assert_called(self, ctx):
        ctx.arm_for_test()
        write(ctx)
        ctx.assert_called(WRITE, 1).assert_not_called(READ)
        with pytest.raises(CallCountError) as exc_info:
            ctx.assert_called(WRITE, 2)
        assert (exc_info.value.expected, exc_info.value.actual) == (2, 1)


# =============================================================================
# Isolation Tests
# =============================================================================

class TestIsolation:
    """State never carries from one test case into the next."""

    def test_scenario_sequential_tests(self, ctx):
        """Second test starts at zero and ignores the first's leftovers."""
        ctx.arm_for_test("first")
        ctx.expect(WRITE, command=0x01)
        ctx.expect(WRITE, command=0x99)  # never consumed
        ctx.will_return(WRITE, 5, times=2)
        write(ctx, command=0x01)
        ctx.teardown_test(test_passed=False)

        ctx.arm_for_test("second")
        assert ctx.call_count(WRITE) == 0
        ctx.expect(WRITE, command=0x01)
        assert write(ctx, command=0x01) == -1
        assert ctx.call_count(WRITE) == 1
        ctx.teardown_test()

    def test_failure_does_not_leak(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        with pytest.raises(ExpectationMismatchError):
            write(ctx, command=0x02)
        ctx.teardown_test(test_passed=False)

        ctx.arm_for_test()
        assert ctx.outcome == "passed"
        assert write(ctx) == -1

    def test_state_leak_detected(self, ctx):
        ctx.arm_for_test("leaky")
        ctx.expect(WRITE, command=0x01)
        write(ctx, command=0x01)
        write(ctx, command=0x01)

        with pytest.raises(StateLeakError) as exc_info:
            ctx.arm_for_test("next")
        assert exc_info.value.previous_state is LifecycleState.CONSUMED
        assert exc_info.value.leaked_calls == 2

        # The context recovered to READY and can be armed again
        assert ctx.state is LifecycleState.READY
        ctx.arm_for_test("next")
        assert ctx.call_count(WRITE) == 0

    def test_state_leak_from_armed(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        with pytest.raises(StateLeakError) as exc_info:
            ctx.arm_for_test()
        assert exc_info.value.previous_state is LifecycleState.ARMED
        assert exc_info.value.leaked_expectations == 1

    def test_reset_clears_counts_and_queues(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        ctx.will_return(WRITE, 0)
        ctx.reset()
        assert ctx.call_count(WRITE) == 0
        assert ctx.pending_expectations() == []
        assert write(ctx, command=0x02) == -1

    def test_reset_mid_test_warns(self, ctx, caplog):
        ctx.arm_for_test("mid")
        write(ctx)
        with caplog.at_level(logging.WARNING, logger="busmock.context"):
            ctx.reset()
        assert "reset() called mid-test" in caplog.text
        assert ctx.call_count(WRITE) == 0

    def test_repr(self, ctx):
        ctx.arm_for_test("shown")
        assert "state=armed" in repr(ctx)
        assert "'shown'" in repr(ctx)

    def test_acknowledge_failure(self, ctx):
        ctx.arm_for_test()
        ctx.expect(WRITE, command=0x01)
        with pytest.raises(ExpectationMismatchError):
            write(ctx, command=0x02)

        failure = ctx.acknowledge_failure()
        assert isinstance(failure, ExpectationMismatchError)
        assert ctx.outcome == "passed"
        assert ctx.acknowledge_failure() is None
        assert write(ctx) == -1
        ctx.teardown_test()
