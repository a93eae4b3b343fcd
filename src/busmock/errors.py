"""
Bus Backend Error Hierarchy
===========================

Errors raised by real bus backends (for example the pyserial UART
backend). The mock engine never raises these; its own errors live in
busmock.exceptions.

Exception Hierarchy
-------------------
BusError (base)
├── BusConnectionError - cannot open or configure a bus device
└── BusIOError         - read or write failed on an open device
"""

from typing import Optional


class BusError(Exception):
    """
    Base exception for bus backend errors.

    Attributes:
        device: Device path involved in the error (if known)
    """

    def __init__(self, message: str, device: Optional[str] = None):
        self.message = message
        self.device = device
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.device:
            return f"{self.device}: {self.message}"
        return self.message


class BusConnectionError(BusError):
    """
    Raised when a bus device cannot be opened.

    Common causes:
    - Device path does not exist
    - Permission denied (user not in the dialout group)
    - Device already in use by another process
    """
    pass


class BusIOError(BusError):
    """Raised when a transfer on an open device fails."""
    pass
