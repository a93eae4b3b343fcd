"""
Serial UART Backend
===================

UartBus implementation over pyserial, for running a driver against a
real serial device with the same code that is tested against MockUartBus.

Handles
-------
open() returns a small positive integer handle mapped to an open
serial.Serial object. Handles are never reused within one backend.

Status Codes
------------
- open:  handle (>= 1); raises BusConnectionError if the port cannot open
- close: STATUS_OK, or STATUS_ERROR for an unknown handle
- write: bytes written, or STATUS_ERROR
- read:  bytes read into the buffer (0 on timeout), or STATUS_ERROR

Port Settings
-------------
8 data bits, no parity, 1 stop bit, no flow control. The read timeout
is set per call from timeout_ms.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import serial
import serial.tools.list_ports

from busmock.buses import UartBus
from busmock.errors import BusConnectionError, BusIOError
from busmock.primitives import STATUS_ERROR, STATUS_OK

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Port Information
# =============================================================================

@dataclass(frozen=True)
class PortInfo:
    """
    Information about an available serial port.

    Attributes:
        device: System device path (e.g., '/dev/ttyUSB0', 'COM3')
        description: Human-readable description from the driver
        manufacturer: Device manufacturer (if available)
        vid: USB Vendor ID (None for non-USB ports)
        pid: USB Product ID (None for non-USB ports)
    """

    device: str
    description: str
    manufacturer: Optional[str]
    vid: Optional[int]
    pid: Optional[int]

    @property
    def is_usb(self) -> bool:
        return self.vid is not None

    def __str__(self) -> str:
        if self.description:
            return f"{self.device} - {self.description}"
        return self.device


def list_serial_ports() -> list[PortInfo]:
    """
    List all serial ports detected by the system.

    Returns:
        List of PortInfo objects describing available ports.
    """
    ports = []
    for port in serial.tools.list_ports.comports():
        ports.append(PortInfo(
            device=port.device,
            description=port.description or "",
            manufacturer=port.manufacturer,
            vid=port.vid,
            pid=port.pid,
        ))
        logger.debug("Found port: %s (vid=%s)", port.device, port.vid)
    return ports


# =============================================================================
# UART Backend
# =============================================================================

class SerialUartBus(UartBus):
    """
    UartBus over pyserial.

    Example:
        bus = SerialUartBus()
        handle = bus.open("/dev/ttyUSB0", 9600)
        bus.write(handle, b"AT\\r", 3)
        buf = bytearray(16)
        n = bus.read(handle, buf, 16, timeout_ms=500)
        bus.close(handle)
    """

    def __init__(self):
        self._ports: Dict[int, serial.Serial] = {}
        self._next_handle = 1

    def open(self, device: str, baudrate: int) -> int:
        """
        Open and configure a serial port.

        Raises:
            BusConnectionError: If the port cannot be opened.
        """
        logger.info("Opening serial port: %s at %d baud", device, baudrate)
        try:
            port = serial.Serial(
                port=device,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=0,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
        except serial.SerialException as e:
            error_msg = str(e)
            if "Permission denied" in error_msg:
                raise BusConnectionError(
                    "permission denied; add your user to the 'dialout' group",
                    device=device,
                )
            elif "No such file" in error_msg or "not found" in error_msg.lower():
                raise BusConnectionError(
                    "serial port not found; use 'busmock ports' to list ports",
                    device=device,
                )
            raise BusConnectionError(f"cannot open: {e}", device=device)

        port.reset_input_buffer()
        handle = self._next_handle
        self._next_handle += 1
        self._ports[handle] = port
        logger.debug("Port %s opened as handle %d", device, handle)
        return handle

    def close(self, handle: int) -> int:
        port = self._ports.pop(handle, None)
        if port is None:
            logger.warning("close: unknown handle %d", handle)
            return STATUS_ERROR
        try:
            port.close()
        except serial.SerialException as e:
            logger.warning("Error closing serial port: %s", e)
            return STATUS_ERROR
        return STATUS_OK

    def write(self, handle: int, data: bytes, length: int) -> int:
        try:
            port = self.port(handle)
            written = port.write(bytes(data[:length]))
            port.flush()
        except (BusIOError, serial.SerialException) as e:
            logger.warning("write failed: %s", e)
            return STATUS_ERROR
        logger.debug("Wrote %s bytes on handle %d", written, handle)
        return written if written is not None else length

    def read(self, handle: int, buffer: bytearray, length: int, timeout_ms: int) -> int:
        try:
            port = self.port(handle)
            port.timeout = timeout_ms / 1000.0
            data = port.read(min(length, len(buffer)))
        except (BusIOError, serial.SerialException) as e:
            logger.warning("read failed: %s", e)
            return STATUS_ERROR
        buffer[:len(data)] = data
        logger.debug("Read %d bytes on handle %d", len(data), handle)
        return len(data)

    def port(self, handle: int) -> serial.Serial:
        """
        Look up the open port for a handle.

        Raises:
            BusIOError: If the handle is not open.
        """
        try:
            return self._ports[handle]
        except KeyError:
            raise BusIOError(f"unknown handle {handle}")

    def close_all(self) -> None:
        """Close every port still open."""
        for handle in list(self._ports):
            self.close(handle)

    @property
    def open_handles(self) -> list[int]:
        return sorted(self._ports)
