"""
Call Ledger
===========

Per-primitive invocation counters and the ordered log of every call made
during one test case.

Parameters are snapshotted when the call is recorded. Bytes-like
arguments are copied into immutable bytes, so a driver that reuses or
clears its buffer after the call cannot change what the ledger saw.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .matchers import buffer_bytes
from .primitives import PrimitiveId

logger = logging.getLogger(__name__)


def snapshot_value(value: Any) -> Any:
    """Copy a parameter value so later caller mutation cannot affect it."""
    data = buffer_bytes(value)
    if data is not None:
        return data
    if isinstance(value, list):
        return [snapshot_value(v) for v in value]
    return value


@dataclass(frozen=True)
class MockCall:
    """
    Record of one intercepted primitive call.

    Attributes:
        primitive: Which primitive was called
        sequence: 1-based position in the test's overall call log
        ordinal: 1-based call number of this primitive in the test
        params: Snapshot of the checked parameters
    """
    primitive: PrimitiveId
    sequence: int
    ordinal: int
    params: Mapping[str, Any] = field(default_factory=dict)


class CallLedger:
    """
    Invocation counters plus ordered call log.

    Counters only grow within a test case. reset() zeroes them and is
    called exactly once per test case, by MockContext.arm_for_test().
    """

    def __init__(self):
        self._counts: Dict[PrimitiveId, int] = {}
        self._log: List[MockCall] = []

    def record(
        self,
        primitive: PrimitiveId,
        params: Optional[Mapping[str, Any]] = None,
    ) -> MockCall:
        """
        Count a call to primitive and append it to the log.

        Args:
            primitive: The called primitive
            params: Actual parameters (copied, not referenced)

        Returns:
            The recorded MockCall
        """
        ordinal = self._counts.get(primitive, 0) + 1
        self._counts[primitive] = ordinal

        snapshot = {name: snapshot_value(value) for name, value in (params or {}).items()}
        call = MockCall(
            primitive=primitive,
            sequence=len(self._log) + 1,
            ordinal=ordinal,
            params=snapshot,
        )
        self._log.append(call)
        logger.debug(f"Recorded {primitive} call #{ordinal} (sequence {call.sequence})")
        return call

    def count_of(self, primitive: PrimitiveId) -> int:
        """Number of calls to primitive since the last reset."""
        return self._counts.get(primitive, 0)

    def reset(self) -> None:
        """Zero all counters and clear the call log."""
        self._counts.clear()
        self._log.clear()

    @property
    def calls(self) -> List[MockCall]:
        """Copy of the ordered call log."""
        return list(self._log)

    @property
    def counts(self) -> Dict[PrimitiveId, int]:
        """Copy of the counter table (primitives never called are absent)."""
        return dict(self._counts)

    def calls_for(self, primitive: PrimitiveId) -> List[MockCall]:
        """Calls to one primitive, in order."""
        return [call for call in self._log if call.primitive is primitive]

    @property
    def total(self) -> int:
        """Total calls across all primitives."""
        return len(self._log)

    def __len__(self) -> int:
        return len(self._log)
