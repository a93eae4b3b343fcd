"""
Bus Primitive Definitions
=========================

The closed set of hardware bus primitives a driver under test may call.
Each primitive belongs to a bus family (I2C, UART, SPI) and has a fixed
kind (open, close, write, read, transfer) and a fixed, ordered list of
parameter names that expectations may assert on.

Primitive Table
---------------
    Family  Primitive      Checked parameters
    ------  -------------  ---------------------------------------
    I2C     i2c_open       bus, address
    I2C     i2c_close      handle
    I2C     i2c_write      handle, command, data, data_length
    I2C     i2c_read       handle, command, rx_length
    UART    uart_open      device, baudrate
    UART    uart_close     handle
    UART    uart_write     handle, data, length
    UART    uart_read      handle, length, timeout_ms
    SPI     spi_open       device, mode, speed_hz
    SPI     spi_close      handle
    SPI     spi_transfer   handle, tx_data, length

Receive buffers are never checked parameters: they are outputs filled by
the response injector.

Copyright (c) 2026 busmock Contributors
"""

from enum import Enum
from typing import Final


# =============================================================================
# Status Codes
# =============================================================================

# Conventional success status returned by bus primitives
STATUS_OK: Final[int] = 0

# Sentinel returned when no canned response has been configured
STATUS_NOT_CONFIGURED: Final[int] = -1

# Generic failure status used by real backends
STATUS_ERROR: Final[int] = -2


# =============================================================================
# Families and Kinds
# =============================================================================

class BusFamily(Enum):
    """Hardware bus families supported by the harness."""
    I2C = "i2c"
    UART = "uart"
    SPI = "spi"


class PrimitiveKind(Enum):
    """
    Shape of a primitive call.

    READ and TRANSFER produce data into a caller-owned buffer; the other
    kinds only return a status.
    """
    OPEN = "open"
    CLOSE = "close"
    WRITE = "write"
    READ = "read"
    TRANSFER = "transfer"

    @property
    def produces_data(self) -> bool:
        return self in (PrimitiveKind.READ, PrimitiveKind.TRANSFER)


# =============================================================================
# Primitive Identifiers
# =============================================================================

class PrimitiveId(Enum):
    """
    Identifier for one mocked hardware primitive.

    The value is the primitive's canonical name (e.g. "i2c_write"). Family,
    kind and parameter names are looked up from the primitive table below.
    """
    I2C_OPEN = "i2c_open"
    I2C_CLOSE = "i2c_close"
    I2C_WRITE = "i2c_write"
    I2C_READ = "i2c_read"
    UART_OPEN = "uart_open"
    UART_CLOSE = "uart_close"
    UART_WRITE = "uart_write"
    UART_READ = "uart_read"
    SPI_OPEN = "spi_open"
    SPI_CLOSE = "spi_close"
    SPI_TRANSFER = "spi_transfer"

    @property
    def family(self) -> BusFamily:
        return _PRIMITIVE_TABLE[self][0]

    @property
    def kind(self) -> PrimitiveKind:
        return _PRIMITIVE_TABLE[self][1]

    @property
    def params(self) -> tuple[str, ...]:
        """Names of the parameters expectations can assert on, in call order."""
        return _PRIMITIVE_TABLE[self][2]

    @property
    def produces_data(self) -> bool:
        """True if calls fill a caller-owned receive buffer."""
        return self.kind.produces_data

    @classmethod
    def from_name(cls, name: str) -> "PrimitiveId":
        """
        Look up a primitive by canonical name or enum member name.

        Accepts "i2c_write", "I2C_WRITE" or "i2c-write". Only used at the
        configuration and CLI boundary; engine code uses enum members.

        Raises:
            ValueError: If no primitive has that name.
        """
        key = name.strip().lower().replace("-", "_")
        for primitive in cls:
            if primitive.value == key:
                return primitive
        raise ValueError(
            f"Unknown primitive '{name}'. "
            f"Choose from: {', '.join(p.value for p in cls)}"
        )

    @classmethod
    def for_family(cls, family: BusFamily) -> list["PrimitiveId"]:
        """All primitives of one bus family, in table order."""
        return [p for p in cls if p.family is family]

    def __str__(self) -> str:
        return self.value


_PRIMITIVE_TABLE: Final[dict[PrimitiveId, tuple[BusFamily, PrimitiveKind, tuple[str, ...]]]] = {
    PrimitiveId.I2C_OPEN: (BusFamily.I2C, PrimitiveKind.OPEN, ("bus", "address")),
    PrimitiveId.I2C_CLOSE: (BusFamily.I2C, PrimitiveKind.CLOSE, ("handle",)),
    PrimitiveId.I2C_WRITE: (
        BusFamily.I2C, PrimitiveKind.WRITE, ("handle", "command", "data", "data_length"),
    ),
    PrimitiveId.I2C_READ: (
        BusFamily.I2C, PrimitiveKind.READ, ("handle", "command", "rx_length"),
    ),
    PrimitiveId.UART_OPEN: (BusFamily.UART, PrimitiveKind.OPEN, ("device", "baudrate")),
    PrimitiveId.UART_CLOSE: (BusFamily.UART, PrimitiveKind.CLOSE, ("handle",)),
    PrimitiveId.UART_WRITE: (BusFamily.UART, PrimitiveKind.WRITE, ("handle", "data", "length")),
    PrimitiveId.UART_READ: (
        BusFamily.UART, PrimitiveKind.READ, ("handle", "length", "timeout_ms"),
    ),
    PrimitiveId.SPI_OPEN: (BusFamily.SPI, PrimitiveKind.OPEN, ("device", "mode", "speed_hz")),
    PrimitiveId.SPI_CLOSE: (BusFamily.SPI, PrimitiveKind.CLOSE, ("handle",)),
    PrimitiveId.SPI_TRANSFER: (
        BusFamily.SPI, PrimitiveKind.TRANSFER, ("handle", "tx_data", "length"),
    ),
}
