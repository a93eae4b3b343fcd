"""
Return/Data Injector
====================

Per-primitive FIFOs of canned return statuses and receive-buffer payloads.

Every intercepted call consumes one status. Calls to primitives that
produce data (reads and transfers) additionally consume one payload, if
one is queued, and copy it into the caller's buffer:

    copied = min(requested_len, len(payload), len(buffer))

Bytes beyond `copied` are left exactly as the caller had them. Callers
must not assume the remainder is zero-filled.

When no status is queued the injector returns the configured default
status instead of raising. Such calls are counted as exhausted so that
diagnostics can point them out.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional

from .primitives import PrimitiveId, STATUS_NOT_CONFIGURED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CannedResponse:
    """
    One queued response for a primitive.

    Status-only entries have payload=None; payload-only entries have
    status=None.
    """
    primitive: PrimitiveId
    status: Optional[int] = None
    payload: Optional[bytes] = None


class ResponseInjector:
    """
    Canned responses for mocked primitives.

    Args:
        default_status: Returned when a primitive's status FIFO is empty.
    """

    def __init__(self, default_status: int = STATUS_NOT_CONFIGURED):
        self.default_status = default_status
        self._statuses: Dict[PrimitiveId, Deque[CannedResponse]] = {}
        self._payloads: Dict[PrimitiveId, Deque[CannedResponse]] = {}
        self._exhausted: Dict[PrimitiveId, int] = {}

    def enqueue_return(self, primitive: PrimitiveId, status: int) -> CannedResponse:
        """Queue the status for the next unanswered call to primitive."""
        response = CannedResponse(primitive=primitive, status=status)
        self._statuses.setdefault(primitive, deque()).append(response)
        return response

    def enqueue_buffer(self, primitive: PrimitiveId, payload: bytes) -> CannedResponse:
        """
        Queue receive-buffer content for the next data-producing call.

        Raises:
            ValueError: If primitive never fills a receive buffer.
        """
        if not primitive.produces_data:
            raise ValueError(f"{primitive} does not produce data; cannot queue a buffer")
        response = CannedResponse(primitive=primitive, payload=bytes(payload))
        self._payloads.setdefault(primitive, deque()).append(response)
        return response

    def respond(
        self,
        primitive: PrimitiveId,
        buffer: Optional[bytearray] = None,
        requested_len: Optional[int] = None,
    ) -> int:
        """
        Produce the response for one call.

        Args:
            primitive: The called primitive
            buffer: Caller-owned writable buffer (bytearray or memoryview)
            requested_len: Bytes the caller asked for (default: len(buffer))

        Returns:
            The queued status, or default_status if none is queued.
        """
        if primitive.produces_data:
            payloads = self._payloads.get(primitive)
            if payloads:
                payload = payloads.popleft().payload
                self._copy_into(buffer, payload, requested_len)

        statuses = self._statuses.get(primitive)
        if statuses:
            return statuses.popleft().status

        self._exhausted[primitive] = self._exhausted.get(primitive, 0) + 1
        logger.debug(
            f"No response queued for {primitive}; returning default status {self.default_status}"
        )
        return self.default_status

    @staticmethod
    def _copy_into(
        buffer: Optional[bytearray],
        payload: bytes,
        requested_len: Optional[int],
    ) -> int:
        if buffer is None:
            return 0
        limit = len(buffer) if requested_len is None else min(requested_len, len(buffer))
        count = max(0, min(limit, len(payload)))
        buffer[:count] = payload[:count]
        return count

    def pending_statuses(self, primitive: Optional[PrimitiveId] = None) -> int:
        if primitive is not None:
            return len(self._statuses.get(primitive, ()))
        return sum(len(q) for q in self._statuses.values())

    def pending_payloads(self, primitive: Optional[PrimitiveId] = None) -> int:
        if primitive is not None:
            return len(self._payloads.get(primitive, ()))
        return sum(len(q) for q in self._payloads.values())

    def exhausted_count(self, primitive: Optional[PrimitiveId] = None) -> int:
        """Calls answered with the default status because nothing was queued."""
        if primitive is not None:
            return self._exhausted.get(primitive, 0)
        return sum(self._exhausted.values())

    def pending_responses(self) -> List[CannedResponse]:
        """All unconsumed responses (statuses first, then payloads)."""
        responses = [r for q in self._statuses.values() for r in q]
        responses.extend(r for q in self._payloads.values() for r in q)
        return responses

    def clear(self) -> None:
        """Drop all queued responses and exhausted counters."""
        self._statuses.clear()
        self._payloads.clear()
        self._exhausted.clear()

    def is_empty(self) -> bool:
        return self.pending_statuses() == 0 and self.pending_payloads() == 0
