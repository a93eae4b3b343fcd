"""
Tests for the Call Ledger
=========================

Counters, the ordered call log and parameter snapshots.
"""

import array
import ctypes
from dataclasses import FrozenInstanceError

import pytest

from busmock.ledger import CallLedger, MockCall, snapshot_value
from busmock.primitives import PrimitiveId


class TestCallLedger:
    """Tests for CallLedger counting and logging."""

    def test_starts_empty(self):
        ledger = CallLedger()
        assert ledger.total == 0
        assert len(ledger) == 0
        assert ledger.counts == {}
        assert ledger.count_of(PrimitiveId.I2C_WRITE) == 0

    def test_counts_per_primitive(self):
        ledger = CallLedger()
        ledger.record(PrimitiveId.I2C_WRITE)
        ledger.record(PrimitiveId.I2C_WRITE)
        ledger.record(PrimitiveId.I2C_READ)

        assert ledger.count_of(PrimitiveId.I2C_WRITE) == 2
        assert ledger.count_of(PrimitiveId.I2C_READ) == 1
        assert ledger.count_of(PrimitiveId.SPI_TRANSFER) == 0
        assert ledger.total == 3

    def test_sequence_and_ordinal(self):
        ledger = CallLedger()
        first = ledger.record(PrimitiveId.UART_WRITE, {"handle": 1})
        second = ledger.record(PrimitiveId.UART_READ, {"handle": 1})
        third = ledger.record(PrimitiveId.UART_WRITE, {"handle": 1})

        assert (first.sequence, first.ordinal) == (1, 1)
        assert (second.sequence, second.ordinal) == (2, 1)
        assert (third.sequence, third.ordinal) == (3, 2)

    def test_calls_for_keeps_order(self):
        ledger = CallLedger()
        ledger.record(PrimitiveId.SPI_TRANSFER, {"length": 1})
        ledger.record(PrimitiveId.SPI_OPEN)
        ledger.record(PrimitiveId.SPI_TRANSFER, {"length": 2})

        lengths = [c.params["length"] for c in ledger.calls_for(PrimitiveId.SPI_TRANSFER)]
        assert lengths == [1, 2]

    def test_reset_zeroes_everything(self):
        ledger = CallLedger()
        ledger.record(PrimitiveId.I2C_OPEN)
        ledger.reset()

        assert ledger.total == 0
        assert ledger.count_of(PrimitiveId.I2C_OPEN) == 0
        assert ledger.record(PrimitiveId.I2C_OPEN).ordinal == 1

    def test_views_are_copies(self):
        ledger = CallLedger()
        ledger.record(PrimitiveId.I2C_OPEN)
        ledger.calls.clear()
        ledger.counts.clear()
        assert ledger.total == 1
        assert ledger.count_of(PrimitiveId.I2C_OPEN) == 1


class TestSnapshots:
    """Parameters are copied at record time."""

    def test_mutable_buffer_is_frozen(self):
        ledger = CallLedger()
        data = bytearray(b"\x01\x02")
        call = ledger.record(PrimitiveId.I2C_WRITE, {"data": data})
        data[0] = 0xFF

        assert call.params["data"] == b"\x01\x02"
        assert isinstance(call.params["data"], bytes)

    def test_snapshot_value(self):
        assert snapshot_value(memoryview(b"ab")) == b"ab"
        assert snapshot_value([bytearray(b"x"), 3]) == [b"x", 3]
        assert snapshot_value(7) == 7

    def test_snapshot_copies_any_buffer(self):
        """Buffers of every kind are copied, not referenced."""
        ledger = CallLedger()
        data = array.array("B", [1, 2, 3, 4])
        raw = (ctypes.c_ubyte * 2)(5, 6)
        call = ledger.record(PrimitiveId.I2C_WRITE, {"data": data})
        spi = ledger.record(PrimitiveId.SPI_TRANSFER, {"tx_data": raw})
        data[0] = 0xFF
        raw[0] = 0xFF

        assert call.params["data"] == b"\x01\x02\x03\x04"
        assert spi.params["tx_data"] == b"\x05\x06"
        assert snapshot_value("text") == "text"

    def test_mock_call_is_frozen(self):
        call = MockCall(primitive=PrimitiveId.I2C_OPEN, sequence=1, ordinal=1)
        with pytest.raises(FrozenInstanceError):
            call.ordinal = 2
