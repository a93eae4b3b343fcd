"""
busmock - Bus Primitive Mocking for Driver Unit Tests
=====================================================

A black-box mock engine for hardware bus primitives (I2C, UART, SPI).
Drivers are written against the abstract bus interfaces; tests hand them
mock buses whose every call is counted, checked against queued
expectations, and answered with canned statuses and receive data.

Main Components
---------------
- **context**: MockContext, the owner of all mock state and its
  lifecycle (UNINITIALIZED, READY, ARMED, CONSUMED)
- **buses**: I2CBus / UartBus / SpiBus interfaces and their mocks
- **ledger**: Call counters and the ordered call log
- **expectations**: Per-primitive FIFO of parameter expectations
- **injector**: Per-primitive FIFO of statuses and buffer payloads
- **fixtures**: pytest plugin (bus_mock, i2c_bus, uart_bus, spi_bus)
- **backends**: Real implementations (pyserial UART)

Quick Start
-----------
With the pytest plugin (conftest.py: pytest_plugins = ["busmock.fixtures"])::

    from busmock import PrimitiveId

    def test_reads_two_bytes(bus_mock, i2c_bus):
        bus_mock.expect(PrimitiveId.I2C_READ, command=0x10, rx_length=2)
        bus_mock.will_return_buffer(PrimitiveId.I2C_READ, b"\\x12\\x34", status=0)

        assert SensorDriver(i2c_bus).read_word(0x10) == 0x1234
        bus_mock.assert_called(PrimitiveId.I2C_READ, 1)

Without pytest::

    ctx = MockContext(MockConfig(strict=True)).init()
    with ctx.test_case("reads_two_bytes"):
        ...
    ctx.shutdown()

Or use the command-line tool:
    $ busmock primitives
    $ busmock run --strict tests/

Copyright (c) 2026 busmock Contributors
"""

__version__ = "1.0.0"
__author__ = "busmock Contributors"

# ═══════════════════════════════════════════════════════════════════════════════
# PUBLIC API EXPORTS
# ═══════════════════════════════════════════════════════════════════════════════

# Primitives and status codes
from busmock.primitives import (
    BusFamily,
    PrimitiveKind,
    PrimitiveId,
    STATUS_OK,
    STATUS_NOT_CONFIGURED,
    STATUS_ERROR,
)

# Core context
from busmock.context import LifecycleState, MockContext

# Bus interfaces and mocks
from busmock.buses import (
    I2CBus,
    UartBus,
    SpiBus,
    MockI2CBus,
    MockUartBus,
    MockSpiBus,
    mock_bus_for,
)

# Building blocks
from busmock.ledger import CallLedger, MockCall
from busmock.expectations import ExpectationQueue, ExpectedCall, VerifyResult
from busmock.injector import ResponseInjector
from busmock.matchers import ANY, Anything, BytesEqual, Exact, Matcher, Satisfies

# Configuration
from busmock.config import MockConfig, get_default_config, set_default_config

# Decorators
from busmock.decorators import mock_test, for_modes

# Exceptions
from busmock.exceptions import (
    BusMockError,
    VerificationError,
    UnexpectedCallError,
    ExpectationMismatchError,
    UnconsumedExpectationError,
    CallCountError,
    LifecycleError,
    StateLeakError,
)
from busmock.errors import BusError, BusConnectionError, BusIOError

# Diagnostics and results
from busmock.diagnostics import format_call, format_call_log, format_failure_report
from busmock.results import TestStatus, TestResult, SuiteResult, ResultRecorder

# Test data helpers
from busmock.utils import create_test_data, verify_test_data

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Primitives
    "BusFamily",
    "PrimitiveKind",
    "PrimitiveId",
    "STATUS_OK",
    "STATUS_NOT_CONFIGURED",
    "STATUS_ERROR",
    # Core
    "LifecycleState",
    "MockContext",
    # Buses
    "I2CBus",
    "UartBus",
    "SpiBus",
    "MockI2CBus",
    "MockUartBus",
    "MockSpiBus",
    "mock_bus_for",
    # Building blocks
    "CallLedger",
    "MockCall",
    "ExpectationQueue",
    "ExpectedCall",
    "VerifyResult",
    "ResponseInjector",
    "ANY",
    "Anything",
    "BytesEqual",
    "Exact",
    "Matcher",
    "Satisfies",
    # Configuration
    "MockConfig",
    "get_default_config",
    "set_default_config",
    # Decorators
    "mock_test",
    "for_modes",
    # Exceptions
    "BusMockError",
    "VerificationError",
    "UnexpectedCallError",
    "ExpectationMismatchError",
    "UnconsumedExpectationError",
    "CallCountError",
    "LifecycleError",
    "StateLeakError",
    "BusError",
    "BusConnectionError",
    "BusIOError",
    # Diagnostics and results
    "format_call",
    "format_call_log",
    "format_failure_report",
    "TestStatus",
    "TestResult",
    "SuiteResult",
    "ResultRecorder",
    # Helpers
    "create_test_data",
    "verify_test_data",
]
