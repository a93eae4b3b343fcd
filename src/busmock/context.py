"""
busmock - Mock Context
======================

MockContext is the central class of the harness. It owns the call
ledger, the expectation queue and the response injector for one test
process, and provides:

- The lifecycle state machine (init, arm, teardown, shutdown)
- The interception path every mocked primitive goes through
- The test-facing API: expectations, canned responses, call counts

Lifecycle:
    UNINITIALIZED --init()--> READY --arm_for_test()--> ARMED
    ARMED --first mocked call--> CONSUMED
    ARMED/CONSUMED --teardown_test()--> READY
    READY --shutdown()--> UNINITIALIZED

Interception (one mocked call):
    1. ledger.record()                 - count and log the call
    2. expectations.consume_and_verify() - check parameters, fail fast
    3. injector.respond()              - fill the buffer, return the status

Usage:
    ctx = MockContext(MockConfig(strict=True))
    ctx.init()

    ctx.arm_for_test("test_reset")
    ctx.expect(PrimitiveId.I2C_WRITE, command=0x01, data_length=4)
    ctx.will_return(PrimitiveId.I2C_WRITE, 0)
    driver = SensorDriver(MockI2CBus(ctx))
    driver.reset()
    ctx.assert_called(PrimitiveId.I2C_WRITE, 1)
    ctx.teardown_test()

    ctx.shutdown()

Copyright (c) 2026 busmock Contributors
"""

from __future__ import annotations
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional
import logging

from .config import MockConfig, get_default_config
from .expectations import ExpectationQueue, ExpectedCall, VerifyResult
from .exceptions import (
    CallCountError,
    ExpectationMismatchError,
    LifecycleError,
    StateLeakError,
    UnconsumedExpectationError,
    UnexpectedCallError,
    VerificationError,
)
from .injector import ResponseInjector
from .ledger import CallLedger, MockCall
from .matchers import as_matcher, format_value
from .primitives import PrimitiveId

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    """States of the mock lifecycle."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    ARMED = "armed"
    CONSUMED = "consumed"


_IN_TEST = (LifecycleState.ARMED, LifecycleState.CONSUMED)


class MockContext:
    """
    Explicit owner of all mock state for a test process.

    Exactly one test case owns the context at a time. Ownership starts at
    arm_for_test() and ends at teardown_test(); the protocol, not locking,
    keeps test cases apart.

    Attributes:
        config: Engine configuration
        state: Current LifecycleState
        test_name: Name of the test case that currently owns the context
    """

    def __init__(self, config: Optional[MockConfig] = None):
        self.config = config or get_default_config()
        self.state = LifecycleState.UNINITIALIZED
        self.test_name: Optional[str] = None
        self._ledger: Optional[CallLedger] = None
        self._expectations: Optional[ExpectationQueue] = None
        self._injector: Optional[ResponseInjector] = None
        self._failure: Optional[VerificationError] = None

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════════

    def init(self) -> "MockContext":
        """Allocate ledger, expectation queue and injector (UNINITIALIZED -> READY)."""
        self._require_state("init", LifecycleState.UNINITIALIZED)
        self._ledger = CallLedger()
        self._expectations = ExpectationQueue(strict=self.config.strict)
        self._injector = ResponseInjector(default_status=self.config.default_status)
        self.state = LifecycleState.READY
        logger.info("Mock context initialized")
        return self

    def arm_for_test(
        self,
        test_name: Optional[str] = None,
        *,
        strict: Optional[bool] = None,
    ) -> "MockContext":
        """
        Clear all state for a new test case (READY -> ARMED).

        Args:
            test_name: Name used in diagnostics
            strict: Per-test override of config.strict

        Raises:
            StateLeakError: If the previous test case was never torn down.
                State is cleared and the context returns to READY first,
                so the next test case can still arm.
            LifecycleError: If the context is not initialized.
        """
        if self.state in _IN_TEST:
            leaked_calls = self._ledger.total
            leaked_expectations = self._expectations.pending()
            previous = self.state
            previous_test = self.test_name
            self._clear()
            self.state = LifecycleState.READY
            logger.warning(
                f"State leak: test {previous_test!r} was never torn down "
                f"({leaked_calls} calls, {leaked_expectations} pending expectations)"
            )
            raise StateLeakError(
                f"arm_for_test() called while test {previous_test!r} still owns the "
                f"mock state ({previous.value}); a teardown_test() is missing",
                previous_state=previous,
                leaked_calls=leaked_calls,
                leaked_expectations=leaked_expectations,
            )
        self._require_state("arm_for_test", LifecycleState.READY)

        self._clear()
        self._expectations.strict = self.config.strict if strict is None else strict
        self._injector.default_status = self.config.default_status
        self.test_name = test_name
        self.state = LifecycleState.ARMED
        logger.info(f"Armed for test {test_name!r} (strict={self._expectations.strict})")
        return self

    def teardown_test(self, *, test_passed: bool = True) -> "MockContext":
        """
        End the current test case (ARMED/CONSUMED -> READY).

        Queues are not cleared here; arm_for_test() clears them. When the
        test body itself passed, two late checks run:
        - a verification failure the driver swallowed is re-raised
        - unconsumed expectations fail the test (if verify_on_teardown)

        Args:
            test_passed: False when the test body already failed, which
                         skips the late checks to avoid duplicate reports.

        Raises:
            VerificationError: From the late checks above.
        """
        self._require_state("teardown_test", *_IN_TEST)
        failure = self._failure
        pending = self._expectations.pending_calls()
        self.state = LifecycleState.READY
        logger.info(f"Tore down test {self.test_name!r} (outcome={self.outcome})")

        if not test_passed:
            return self
        if failure is not None:
            raise failure
        if pending and self.config.verify_on_teardown:
            counts: Dict[PrimitiveId, int] = {}
            for expected in pending:
                counts[expected.primitive] = counts.get(expected.primitive, 0) + 1
            listing = "; ".join(expected.describe() for expected in pending)
            raise UnconsumedExpectationError(
                f"{len(pending)} expected call(s) never happened: {listing}",
                pending=counts,
            )
        return self

    def shutdown(self) -> None:
        """Release all state (READY -> UNINITIALIZED)."""
        self._require_state("shutdown", LifecycleState.READY)
        self._ledger = None
        self._expectations = None
        self._injector = None
        self._failure = None
        self.test_name = None
        self.state = LifecycleState.UNINITIALIZED
        logger.info("Mock context shut down")

    @contextmanager
    def test_case(self, test_name: Optional[str] = None, **arm_options) -> Iterator["MockContext"]:
        """
        Arm for the duration of a with-block, then tear down.

        Example:
            with ctx.test_case("test_read_status"):
                ctx.will_return(PrimitiveId.I2C_READ, 0)
                driver.read_status()
        """
        self.arm_for_test(test_name, **arm_options)
        try:
            yield self
        except BaseException:
            self.teardown_test(test_passed=False)
            raise
        self.teardown_test()

    def _require_state(self, operation: str, *allowed: LifecycleState) -> None:
        if self.state not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise LifecycleError(
                f"{operation}() not allowed in state {self.state.value} (requires {names})",
                state=self.state,
                operation=operation,
                allowed=list(allowed),
            )

    def _clear(self) -> None:
        self._ledger.reset()
        self._expectations.clear()
        self._injector.clear()
        self._failure = None

    # ═══════════════════════════════════════════════════════════════════════════
    # INTERCEPTION
    # ═══════════════════════════════════════════════════════════════════════════

    def intercept(
        self,
        primitive: PrimitiveId,
        params: Mapping[str, Any],
        buffer: Optional[bytearray] = None,
        requested_len: Optional[int] = None,
    ) -> int:
        """
        Handle one call to a mocked primitive: record, verify, respond.

        Args:
            primitive: The called primitive
            params: Checked parameters as passed by the driver
            buffer: Receive buffer to fill (reads and transfers)
            requested_len: Bytes requested by the driver

        Returns:
            The injected status (or handle, for open primitives)

        Raises:
            UnexpectedCallError: Strict mode and nothing queued
            ExpectationMismatchError: A parameter did not match
            LifecycleError: Called outside a test case
        """
        self._require_state("intercept", *_IN_TEST)
        if self._failure is not None:
            # The test case is already aborted; nothing more runs.
            raise self._failure

        self.state = LifecycleState.CONSUMED
        call = self._ledger.record(primitive, params)
        result = self._expectations.consume_and_verify(primitive, call.params)
        if not result.passed:
            self._failure = self._make_failure(result, call)
            logger.debug(f"Verification failed: {self._failure}")
            raise self._failure

        status = self._injector.respond(primitive, buffer, requested_len)
        logger.debug(f"{primitive} call #{call.ordinal} -> {status}")
        return status

    @staticmethod
    def _make_failure(result: VerifyResult, call: MockCall) -> VerificationError:
        if result.unexpected:
            args = ", ".join(f"{k}={format_value(v)}" for k, v in call.params.items())
            return UnexpectedCallError(
                f"{result.describe(call.ordinal)}: {call.primitive}({args})",
                primitive=call.primitive,
                ordinal=call.ordinal,
                actual_params=dict(call.params),
            )
        return ExpectationMismatchError(
            result.describe(call.ordinal),
            primitive=call.primitive,
            ordinal=call.ordinal,
            param_name=result.param_name,
            expected=result.expected,
            actual=result.actual,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # EXPECTATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    def expect(self, primitive: PrimitiveId, **matchers: Any) -> "MockContext":
        """
        Expect one call to primitive with the given parameters.

        Values may be Matcher instances or plain values: bytes-like values
        compare byte-wise, anything else by equality. With no keyword
        arguments the call is expected but its parameters are not checked.

        Example:
            ctx.expect(PrimitiveId.I2C_WRITE, command=0x01, data_length=4)
            ctx.expect(PrimitiveId.SPI_TRANSFER, tx_data=b"\\x9f", length=ANY)

        Returns:
            self (for chaining)
        """
        self._require_state("expect", *_IN_TEST)
        unknown = [name for name in matchers if name not in primitive.params]
        if unknown:
            raise ValueError(
                f"{primitive} has no parameter(s) {', '.join(unknown)} "
                f"(parameters: {', '.join(primitive.params)})"
            )
        self._expectations.begin_call(primitive)
        for name, value in matchers.items():
            self._expectations.enqueue_expectation(primitive, name, as_matcher(value))
        return self

    def expect_param(self, primitive: PrimitiveId, param_name: str, matcher: Any) -> "MockContext":
        """
        Queue a single parameter expectation.

        Consecutive calls for different parameters of the same primitive
        describe the same call; repeating a parameter starts the next call.

        Returns:
            self (for chaining)
        """
        self._require_state("expect_param", *_IN_TEST)
        self._expectations.enqueue_expectation(primitive, param_name, as_matcher(matcher))
        return self

    def pending_expectations(self) -> List[ExpectedCall]:
        """Expected calls that have not happened yet."""
        if self._expectations is None:
            return []
        return self._expectations.pending_calls()

    # ═══════════════════════════════════════════════════════════════════════════
    # CANNED RESPONSES
    # ═══════════════════════════════════════════════════════════════════════════

    def will_return(self, primitive: PrimitiveId, status: int, times: int = 1) -> "MockContext":
        """
        Queue the status returned by the next call(s) to primitive.

        For open primitives the status is the handle handed to the driver.

        Returns:
            self (for chaining)
        """
        self._require_state("will_return", *_IN_TEST)
        if times < 1:
            raise ValueError(f"times must be at least 1, got {times}")
        for _ in range(times):
            self._injector.enqueue_return(primitive, status)
        return self

    def will_return_buffer(
        self,
        primitive: PrimitiveId,
        payload: bytes,
        status: Optional[int] = None,
    ) -> "MockContext":
        """
        Queue receive-buffer content for the next read or transfer.

        Args:
            primitive: A data-producing primitive (read or transfer)
            payload: Bytes copied into the caller's buffer, truncated to
                     the requested length
            status: Also queue this status, for convenience

        Returns:
            self (for chaining)
        """
        self._require_state("will_return_buffer", *_IN_TEST)
        self._injector.enqueue_buffer(primitive, payload)
        if status is not None:
            self._injector.enqueue_return(primitive, status)
        return self

    # ═══════════════════════════════════════════════════════════════════════════
    # CALL HISTORY
    # ═══════════════════════════════════════════════════════════════════════════

    def call_count(self, primitive: PrimitiveId) -> int:
        """Calls to primitive in the current test case."""
        self._require_initialized("call_count")
        return self._ledger.count_of(primitive)

    def was_called(self, primitive: PrimitiveId, times: int) -> bool:
        """True if primitive was called exactly `times` times."""
        return self.call_count(primitive) == times

    def assert_called(self, primitive: PrimitiveId, times: int = 1) -> "MockContext":
        """
        Assert primitive was called exactly `times` times.

        Raises:
            CallCountError: If the count differs

        Returns:
            self (for chaining)
        """
        actual = self.call_count(primitive)
        if actual != times:
            raise CallCountError(
                f"{primitive} called {actual} time(s), expected {times}",
                primitive=primitive,
                expected=times,
                actual=actual,
            )
        return self

    def assert_not_called(self, primitive: PrimitiveId) -> "MockContext":
        return self.assert_called(primitive, 0)

    @property
    def calls(self) -> List[MockCall]:
        """Ordered log of every call in the current test case."""
        if self._ledger is None:
            return []
        return self._ledger.calls

    def calls_for(self, primitive: PrimitiveId) -> List[MockCall]:
        if self._ledger is None:
            return []
        return self._ledger.calls_for(primitive)

    @property
    def counts(self) -> Dict[PrimitiveId, int]:
        """Counter table for the current test case."""
        if self._ledger is None:
            return {}
        return self._ledger.counts

    def exhausted_count(self, primitive: Optional[PrimitiveId] = None) -> int:
        """Calls answered with the default status because no response was queued."""
        if self._injector is None:
            return 0
        return self._injector.exhausted_count(primitive)

    def reset(self) -> "MockContext":
        """
        Zero all counters and clear all queues.

        arm_for_test() already does this at every test boundary. Calling
        it after the test body has started makes earlier counts vanish,
        so it is logged as a state-leak risk. A recorded verification
        failure is kept.

        Returns:
            self (for chaining)
        """
        self._require_initialized("reset")
        if self.state is LifecycleState.CONSUMED:
            logger.warning(
                f"reset() called mid-test in {self.test_name!r}; "
                f"discarding {self._ledger.total} recorded calls"
            )
        failure = self._failure
        self._clear()
        self._failure = failure
        return self

    def _require_initialized(self, operation: str) -> None:
        if self.state is LifecycleState.UNINITIALIZED:
            raise LifecycleError(
                f"{operation}() not allowed before init()",
                state=self.state,
                operation=operation,
            )

    # ═══════════════════════════════════════════════════════════════════════════
    # OUTCOME (read by test orchestration)
    # ═══════════════════════════════════════════════════════════════════════════

    @property
    def failure(self) -> Optional[VerificationError]:
        """The verification failure recorded in this test case, if any."""
        return self._failure

    @property
    def outcome(self) -> str:
        """Either "passed" or "failed" for the current (or last) test case."""
        return "passed" if self._failure is None else "failed"

    def acknowledge_failure(self) -> Optional[VerificationError]:
        """
        Return and forget the recorded verification failure.

        For tests that provoke a failure on purpose, e.g. inside
        pytest.raises, and should still pass teardown. Mocked calls are
        accepted again afterwards.

        Example:
            with pytest.raises(ExpectationMismatchError):
                driver.reset()
            ctx.acknowledge_failure()
        """
        failure = self._failure
        self._failure = None
        return failure

    @property
    def strict(self) -> bool:
        if self._expectations is not None:
            return self._expectations.strict
        return self.config.strict

    def __repr__(self) -> str:
        return (
            f"MockContext(state={self.state.value}, test={self.test_name!r}, "
            f"calls={len(self.calls)}, outcome={self.outcome})"
        )
