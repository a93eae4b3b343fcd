"""
Real bus backends.

Production implementations of the bus interfaces in busmock.buses, so
a driver tested against the mocks runs unchanged on hardware.
"""

from .serial import PortInfo, SerialUartBus, list_serial_ports

__all__ = ["PortInfo", "SerialUartBus", "list_serial_ports"]
