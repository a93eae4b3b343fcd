"""
Bus Interfaces and Mock Implementations
=======================================

Drivers under test depend on the abstract bus interfaces defined here
rather than on a concrete device library. Tests hand the driver a mock
implementation bound to a MockContext; production code hands it a real
backend (see busmock.backends).

Interfaces
----------
- I2CBus:  open, close, write, read
- UartBus: open, close, write, read
- SpiBus:  open, close, transfer

All primitives return an integer: a handle for open, otherwise a status
(0 or a byte count on success, negative on error). Receive buffers are
caller-owned bytearrays that the primitive fills in place.

Example:
    class TempSensor:
        def __init__(self, bus: I2CBus):
            self.bus = bus

        def read_raw(self) -> int:
            buf = bytearray(2)
            if self.bus.read(self.handle, 0x00, buf, 2) < 0:
                raise IOError("read failed")
            return int.from_bytes(buf, "big")

    sensor = TempSensor(MockI2CBus(ctx))
"""

from abc import ABC, abstractmethod
from typing import Optional

from .context import MockContext
from .primitives import BusFamily, PrimitiveId


# =============================================================================
# Abstract Interfaces
# =============================================================================

class I2CBus(ABC):
    """Register-style I2C access: a command byte followed by data."""

    family = BusFamily.I2C

    @abstractmethod
    def open(self, bus: str, address: int) -> int:
        """Open the device at address on bus; returns a handle or negative error."""
        pass

    @abstractmethod
    def close(self, handle: int) -> int:
        pass

    @abstractmethod
    def write(self, handle: int, command: int, data: bytes, data_length: int) -> int:
        """Write data_length bytes of data after the command byte."""
        pass

    @abstractmethod
    def read(self, handle: int, command: int, rx_buffer: bytearray, rx_length: int) -> int:
        """Send the command byte, then read rx_length bytes into rx_buffer."""
        pass


class UartBus(ABC):
    """Byte-stream serial port access."""

    family = BusFamily.UART

    @abstractmethod
    def open(self, device: str, baudrate: int) -> int:
        pass

    @abstractmethod
    def close(self, handle: int) -> int:
        pass

    @abstractmethod
    def write(self, handle: int, data: bytes, length: int) -> int:
        pass

    @abstractmethod
    def read(self, handle: int, buffer: bytearray, length: int, timeout_ms: int) -> int:
        """Read up to length bytes into buffer, waiting at most timeout_ms."""
        pass


class SpiBus(ABC):
    """Full-duplex SPI access."""

    family = BusFamily.SPI

    @abstractmethod
    def open(self, device: str, mode: int, speed_hz: int) -> int:
        pass

    @abstractmethod
    def close(self, handle: int) -> int:
        pass

    @abstractmethod
    def transfer(
        self,
        handle: int,
        tx_data: bytes,
        rx_buffer: Optional[bytearray],
        length: int,
    ) -> int:
        """Clock out length bytes of tx_data while clocking into rx_buffer."""
        pass


# =============================================================================
# Mock Implementations
# =============================================================================

class MockI2CBus(I2CBus):
    """I2CBus whose every primitive is intercepted by a MockContext."""

    def __init__(self, ctx: MockContext):
        self.ctx = ctx

    def open(self, bus: str, address: int) -> int:
        return self.ctx.intercept(PrimitiveId.I2C_OPEN, {"bus": bus, "address": address})

    def close(self, handle: int) -> int:
        return self.ctx.intercept(PrimitiveId.I2C_CLOSE, {"handle": handle})

    def write(self, handle: int, command: int, data: bytes, data_length: int) -> int:
        params = {
            "handle": handle,
            "command": command,
            "data": data,
            "data_length": data_length,
        }
        return self.ctx.intercept(PrimitiveId.I2C_WRITE, params)

    def read(self, handle: int, command: int, rx_buffer: bytearray, rx_length: int) -> int:
        params = {"handle": handle, "command": command, "rx_length": rx_length}
        return self.ctx.intercept(PrimitiveId.I2C_READ, params, rx_buffer, rx_length)


class MockUartBus(UartBus):
    """UartBus whose every primitive is intercepted by a MockContext."""

    def __init__(self, ctx: MockContext):
        self.ctx = ctx

    def open(self, device: str, baudrate: int) -> int:
        return self.ctx.intercept(PrimitiveId.UART_OPEN, {"device": device, "baudrate": baudrate})

    def close(self, handle: int) -> int:
        return self.ctx.intercept(PrimitiveId.UART_CLOSE, {"handle": handle})

    def write(self, handle: int, data: bytes, length: int) -> int:
        params = {"handle": handle, "data": data, "length": length}
        return self.ctx.intercept(PrimitiveId.UART_WRITE, params)

    def read(self, handle: int, buffer: bytearray, length: int, timeout_ms: int) -> int:
        params = {"handle": handle, "length": length, "timeout_ms": timeout_ms}
        return self.ctx.intercept(PrimitiveId.UART_READ, params, buffer, length)


class MockSpiBus(SpiBus):
    """SpiBus whose every primitive is intercepted by a MockContext."""

    def __init__(self, ctx: MockContext):
        self.ctx = ctx

    def open(self, device: str, mode: int, speed_hz: int) -> int:
        params = {"device": device, "mode": mode, "speed_hz": speed_hz}
        return self.ctx.intercept(PrimitiveId.SPI_OPEN, params)

    def close(self, handle: int) -> int:
        return self.ctx.intercept(PrimitiveId.SPI_CLOSE, {"handle": handle})

    def transfer(
        self,
        handle: int,
        tx_data: bytes,
        rx_buffer: Optional[bytearray],
        length: int,
    ) -> int:
        params = {"handle": handle, "tx_data": tx_data, "length": length}
        return self.ctx.intercept(PrimitiveId.SPI_TRANSFER, params, rx_buffer, length)


def mock_bus_for(family: BusFamily, ctx: MockContext):
    """Create the mock bus implementation for a family."""
    factories = {
        BusFamily.I2C: MockI2CBus,
        BusFamily.UART: MockUartBus,
        BusFamily.SPI: MockSpiBus,
    }
    return factories[family](ctx)
