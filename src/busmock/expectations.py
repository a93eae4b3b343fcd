"""
Expectation Queue
=================

Per-primitive FIFO of expected calls. Each expected call holds one or more
parameter expectations, and is consumed whole by the next call to that
primitive.

Grouping
--------
Expectations are enqueued one parameter at a time, the way a test author
would write them::

    queue.enqueue_expectation(PrimitiveId.I2C_WRITE, "command", Exact(0x01))
    queue.enqueue_expectation(PrimitiveId.I2C_WRITE, "data_length", Exact(4))
    queue.enqueue_expectation(PrimitiveId.I2C_WRITE, "command", Exact(0x02))

The first two describe the first write; repeating "command" starts the
second expected write. begin_call() opens a new expected call explicitly,
which is what MockContext.expect() does.

Verification is fail-fast: the first parameter whose matcher fails ends
verification of that call.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Mapping, Optional

from .matchers import Matcher, format_value
from .primitives import PrimitiveId

logger = logging.getLogger(__name__)

# Placeholder for a parameter the driver call did not supply
_MISSING = object()


@dataclass(frozen=True)
class Expectation:
    """
    One queued parameter assertion.

    Attributes:
        primitive: Primitive the assertion applies to
        param_name: Parameter being checked
        matcher: How the actual value is judged
        position: 1-based position of the owning expected call in the
                  primitive's FIFO (counted since the last clear)
    """
    primitive: PrimitiveId
    param_name: str
    matcher: Matcher
    position: int


@dataclass
class ExpectedCall:
    """All parameter expectations for one future call of a primitive."""
    primitive: PrimitiveId
    position: int
    expectations: List[Expectation] = field(default_factory=list)

    def has_param(self, name: str) -> bool:
        return any(e.param_name == name for e in self.expectations)

    def describe(self) -> str:
        if not self.expectations:
            return f"{self.primitive}(<any>)"
        args = ", ".join(f"{e.param_name}={e.matcher.describe()}" for e in self.expectations)
        return f"{self.primitive}({args})"


@dataclass(frozen=True)
class VerifyResult:
    """
    Outcome of verifying one call.

    A passing result has passed=True and nothing else set. A failing
    result names the primitive and, for mismatches, the parameter with
    expected and actual values.
    """
    passed: bool
    primitive: Optional[PrimitiveId] = None
    reason: str = ""
    param_name: Optional[str] = None
    expected: Optional[str] = None
    actual: Any = None
    position: Optional[int] = None

    @property
    def unexpected(self) -> bool:
        return not self.passed and self.param_name is None

    def describe(self, ordinal: Optional[int] = None) -> str:
        """
        Format a one-line diagnostic.

        Example:
            i2c_write call #1: parameter 'command' expected 0x01, actual 0x02
        """
        if self.passed:
            return "passed"
        call = f"{self.primitive} call #{ordinal}" if ordinal else f"{self.primitive} call"
        if self.param_name is None:
            return f"{call}: {self.reason}"
        actual = "<missing>" if self.actual is _MISSING else format_value(self.actual)
        return (
            f"{call}: parameter '{self.param_name}' "
            f"expected {self.expected}, actual {actual}"
        )


PASS = VerifyResult(passed=True)


class ExpectationQueue:
    """
    Ordered parameter expectations, one FIFO per primitive.

    Args:
        strict: If True, a call with an empty FIFO fails as an unexpected
                call. If False it passes as "don't care".
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self._queues: Dict[PrimitiveId, Deque[ExpectedCall]] = {}
        self._enqueued: Dict[PrimitiveId, int] = {}

    def begin_call(self, primitive: PrimitiveId) -> ExpectedCall:
        """Open a new expected call at the tail of primitive's FIFO."""
        position = self._enqueued.get(primitive, 0) + 1
        self._enqueued[primitive] = position
        expected = ExpectedCall(primitive=primitive, position=position)
        self._queues.setdefault(primitive, deque()).append(expected)
        return expected

    def enqueue_expectation(
        self,
        primitive: PrimitiveId,
        param_name: str,
        matcher: Matcher,
    ) -> Expectation:
        """
        Append a parameter expectation to primitive's FIFO.

        Joins the tail expected call unless that call already checks
        param_name, in which case a new expected call is opened.

        Raises:
            ValueError: If param_name is not a checked parameter of primitive.
        """
        if param_name not in primitive.params:
            raise ValueError(
                f"{primitive} has no parameter '{param_name}' "
                f"(parameters: {', '.join(primitive.params)})"
            )

        queue = self._queues.get(primitive)
        if queue and not queue[-1].has_param(param_name):
            expected = queue[-1]
        else:
            expected = self.begin_call(primitive)

        expectation = Expectation(
            primitive=primitive,
            param_name=param_name,
            matcher=matcher,
            position=expected.position,
        )
        expected.expectations.append(expectation)
        logger.debug(
            f"Queued expectation {primitive}.{param_name} == {matcher.describe()} "
            f"(call {expected.position})"
        )
        return expectation

    def consume_and_verify(
        self,
        primitive: PrimitiveId,
        actual_params: Mapping[str, Any],
    ) -> VerifyResult:
        """
        Pop the head expected call for primitive and check it.

        Returns:
            PASS, or a failing VerifyResult for the first mismatched
            parameter (or for an unexpected call in strict mode).
        """
        queue = self._queues.get(primitive)
        if not queue:
            if self.strict:
                return VerifyResult(
                    passed=False,
                    primitive=primitive,
                    reason="unexpected call (no expectation queued)",
                )
            return PASS

        expected = queue.popleft()
        for expectation in expected.expectations:
            actual = actual_params.get(expectation.param_name, _MISSING)
            if actual is _MISSING or not expectation.matcher.matches(actual):
                return VerifyResult(
                    passed=False,
                    primitive=primitive,
                    reason="parameter mismatch",
                    param_name=expectation.param_name,
                    expected=expectation.matcher.describe(),
                    actual=actual,
                    position=expected.position,
                )
        return PASS

    def pending(self, primitive: Optional[PrimitiveId] = None) -> int:
        """Number of expected calls not yet consumed (for one or all primitives)."""
        if primitive is not None:
            return len(self._queues.get(primitive, ()))
        return sum(len(q) for q in self._queues.values())

    def pending_calls(self) -> List[ExpectedCall]:
        """All unconsumed expected calls, grouped by primitive."""
        return [expected for queue in self._queues.values() for expected in queue]

    def clear(self) -> None:
        """Drop every queued expectation and restart positions."""
        self._queues.clear()
        self._enqueued.clear()

    def is_empty(self) -> bool:
        return self.pending() == 0
