"""
busmock - Exception Classes
===========================

Exceptions raised by the mock engine. They give clear, actionable
messages when a driver under test misbehaves or when the harness itself
is misused.

Exception Hierarchy:
    BusMockError (base)
    ├── VerificationError          - Driver behavior did not match the test
    │   ├── UnexpectedCallError        - Call with no queued expectation (strict)
    │   ├── ExpectationMismatchError   - A parameter matcher failed
    │   ├── UnconsumedExpectationError - Expectations left at teardown
    │   └── CallCountError             - Call count assertion failed
    ├── LifecycleError             - Invalid lifecycle transition
    └── StateLeakError             - Previous test case was never torn down

VerificationError subclasses also inherit from AssertionError so pytest
reports them as ordinary test failures. LifecycleError and StateLeakError
are harness defects, not driver failures.

Copyright (c) 2026 busmock Contributors
"""

from typing import Optional, Dict, Any, List


class BusMockError(Exception):
    """
    Base exception for all busmock errors.

    Catch this to handle any harness error with a single except clause.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            context: Additional diagnostic information
        """
        super().__init__(message)
        self.context = context or {}


class VerificationError(BusMockError, AssertionError):
    """
    Base for failures caused by the code under test.

    Inherits from AssertionError for pytest compatibility.
    """


class UnexpectedCallError(VerificationError):
    """Raised in strict mode when a primitive is called with nothing queued."""

    def __init__(
        self,
        message: str,
        *,
        primitive=None,
        ordinal: int = None,
        actual_params: Dict[str, Any] = None,
    ):
        context = {
            "primitive": primitive,
            "ordinal": ordinal,
            "actual_params": actual_params,
        }
        super().__init__(message, context)
        self.primitive = primitive
        self.ordinal = ordinal
        self.actual_params = actual_params


class ExpectationMismatchError(VerificationError):
    """
    Raised when a parameter matcher rejects the actual argument.

    Carries everything needed for a diagnostic: which primitive, which
    call of it, which parameter, and expected versus actual values.
    """

    def __init__(
        self,
        message: str,
        *,
        primitive=None,
        ordinal: int = None,
        param_name: str = None,
        expected: Any = None,
        actual: Any = None,
    ):
        """
        Args:
            message: Formatted diagnostic
            primitive: PrimitiveId of the offending call
            ordinal: 1-based call number of that primitive in this test
            param_name: Parameter whose matcher failed
            expected: Matcher description of the expected value
            actual: Value the driver passed
        """
        context = {
            "primitive": primitive,
            "ordinal": ordinal,
            "param_name": param_name,
            "expected": expected,
            "actual": actual,
        }
        super().__init__(message, context)
        self.primitive = primitive
        self.ordinal = ordinal
        self.param_name = param_name
        self.expected = expected
        self.actual = actual


class UnconsumedExpectationError(VerificationError):
    """Raised at teardown when queued expectations were never consumed."""

    def __init__(self, message: str, *, pending: Dict[Any, int] = None):
        super().__init__(message, {"pending": pending})
        self.pending = pending or {}


class CallCountError(VerificationError):
    """Raised by assert_called() when the count does not match."""

    def __init__(
        self,
        message: str,
        *,
        primitive=None,
        expected: int = None,
        actual: int = None,
    ):
        context = {"primitive": primitive, "expected": expected, "actual": actual}
        super().__init__(message, context)
        self.primitive = primitive
        self.expected = expected
        self.actual = actual


class LifecycleError(BusMockError):
    """
    Raised on an invalid lifecycle transition.

    For example: calling a mocked primitive before arm_for_test(), or
    arming a context that was never initialized.
    """

    def __init__(
        self,
        message: str,
        *,
        state=None,
        operation: str = None,
        allowed: List[Any] = None,
    ):
        context = {"state": state, "operation": operation, "allowed": allowed}
        super().__init__(message, context)
        self.state = state
        self.operation = operation
        self.allowed = allowed


class StateLeakError(BusMockError):
    """
    Raised when a test case is armed while the previous one still owns
    the mock state.

    This points at the test harness wiring (a missing teardown), not at
    the driver under test.
    """

    def __init__(
        self,
        message: str,
        *,
        previous_state=None,
        leaked_calls: int = None,
        leaked_expectations: int = None,
    ):
        context = {
            "previous_state": previous_state,
            "leaked_calls": leaked_calls,
            "leaked_expectations": leaked_expectations,
        }
        super().__init__(message, context)
        self.previous_state = previous_state
        self.leaked_calls = leaked_calls
        self.leaked_expectations = leaked_expectations
