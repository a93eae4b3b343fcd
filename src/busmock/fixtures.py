"""
busmock - Pytest Plugin and Fixtures
====================================

Pytest fixtures that give each test case a freshly armed mock context:

    mock_config           - Effective configuration (session-scoped)
    mock_context_session  - Initialized MockContext (session-scoped)
    bus_mock              - MockContext armed for the current test
    i2c_bus / uart_bus / spi_bus - Mock buses bound to bus_mock

Usage:
    In your top-level conftest.py, load the plugin:

        pytest_plugins = ["busmock.fixtures"]

    Then use in tests:

        def test_reads_chip_id(bus_mock, i2c_bus):
            bus_mock.will_return_buffer(PrimitiveId.I2C_READ, b"\\x5a", status=0)
            assert ChipDriver(i2c_bus).chip_id() == 0x5A

The context is initialized once per session and shut down at the end.
Each test arms it in setup and tears it down afterwards, so counters and
queues never carry over between tests.

Copyright (c) 2026 busmock Contributors
"""

from __future__ import annotations
from typing import Generator

import pytest

from .buses import MockI2CBus, MockSpiBus, MockUartBus
from .config import MockConfig
from .context import MockContext
from .diagnostics import format_failure_report
from .exceptions import VerificationError
from .results import ResultRecorder


# ═══════════════════════════════════════════════════════════════════════════════
# PYTEST HOOKS
# ═══════════════════════════════════════════════════════════════════════════════


def pytest_addoption(parser):
    """Register command-line flags and ini options."""
    group = parser.getgroup("busmock", "bus primitive mocking")
    group.addoption(
        "--busmock-strict",
        action="store_const",
        const="strict",
        dest="busmock_mode",
        default=None,
        help="Fail calls to primitives that have no queued expectation",
    )
    group.addoption(
        "--busmock-lenient",
        action="store_const",
        const="lenient",
        dest="busmock_mode",
        help="Let calls without a queued expectation pass (default)",
    )
    parser.addini("busmock_strict", "Strict verification mode (true/false)", default="")
    parser.addini("busmock_default_status", "Status for unconfigured responses", default="")
    parser.addini(
        "busmock_verify_teardown", "Fail tests with unconsumed expectations", default=""
    )


def pytest_configure(config):
    """
    Register markers and the result recorder.

    Registers custom markers:
        busmock_strict: Run this test in strict mode
        busmock_lenient: Run this test in lenient mode
    """
    config.addinivalue_line("markers", "busmock_strict: run the test in strict mode")
    config.addinivalue_line("markers", "busmock_lenient: run the test in lenient mode")
    config.addinivalue_line("markers", "busmock: test uses the @mock_test decorator")

    if not any(isinstance(p, ResultRecorder) for p in config.pluginmanager.get_plugins()):
        config.pluginmanager.register(ResultRecorder(), "busmock-results")


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase's report on the item and attach a failure report.

    The bus_mock fixture reads item.busmock_report_call during teardown
    to know whether the test body already failed, and leaves
    item.busmock_teardown_report when its own teardown checks fail.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"busmock_report_{report.when}", report)

    if report.failed and report.when in ("call", "teardown"):
        # The session context may already be shut down by now, so a
        # teardown failure uses the report captured inside bus_mock.
        text = None
        if report.when == "teardown":
            text = getattr(item, "busmock_teardown_report", None)
        ctx = getattr(item, "busmock_context", None)
        if text is None and ctx is not None:
            error = call.excinfo.value if call.excinfo is not None else None
            text = format_failure_report(ctx, error)
        if text is not None:
            report.sections.append(("busmock", text))


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURE IMPLEMENTATIONS
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(scope="session")
def mock_config(pytestconfig) -> MockConfig:
    """
    Fixture: Mock configuration (session-scoped).

    Built from the environment, then ini options, then command-line
    flags. Override in your conftest.py to customize:

        @pytest.fixture(scope="session")
        def mock_config():
            return MockConfig(strict=True, default_status=-5)
    """
    return MockConfig.from_pytest_config(pytestconfig)


@pytest.fixture(scope="session")
def mock_context_session(mock_config: MockConfig) -> Generator[MockContext, None, None]:
    """
    Fixture: Initialized MockContext shared by the session.

    Tests should not use this directly; bus_mock arms it per test.
    """
    ctx = MockContext(mock_config)
    ctx.init()
    yield ctx
    ctx.shutdown()


@pytest.fixture(scope="function")
def bus_mock(request, mock_context_session: MockContext) -> Generator[MockContext, None, None]:
    """
    Fixture: MockContext armed for the current test.

    Honors @pytest.mark.busmock_strict and @pytest.mark.busmock_lenient.
    After the test, tears the context down; if the test body passed, a
    swallowed verification failure or an unconsumed expectation fails
    the test at teardown.

    Example:
        def test_write_reset_command(bus_mock, i2c_bus):
            bus_mock.expect(PrimitiveId.I2C_WRITE, command=0x01)
            bus_mock.will_return(PrimitiveId.I2C_WRITE, 0)
            Driver(i2c_bus).reset()
    """
    strict = None
    if request.node.get_closest_marker("busmock_strict") is not None:
        strict = True
    elif request.node.get_closest_marker("busmock_lenient") is not None:
        strict = False

    ctx = mock_context_session
    ctx.arm_for_test(request.node.nodeid, strict=strict)
    request.node.busmock_context = ctx

    yield ctx

    call_report = getattr(request.node, "busmock_report_call", None)
    test_passed = call_report is None or call_report.passed
    try:
        ctx.teardown_test(test_passed=test_passed)
    except VerificationError as error:
        request.node.busmock_teardown_report = format_failure_report(ctx, error)
        raise


@pytest.fixture(scope="function")
def i2c_bus(bus_mock: MockContext) -> MockI2CBus:
    """Fixture: Mock I2C bus bound to the armed context."""
    return MockI2CBus(bus_mock)


@pytest.fixture(scope="function")
def uart_bus(bus_mock: MockContext) -> MockUartBus:
    """Fixture: Mock UART bus bound to the armed context."""
    return MockUartBus(bus_mock)


@pytest.fixture(scope="function")
def spi_bus(bus_mock: MockContext) -> MockSpiBus:
    """Fixture: Mock SPI bus bound to the armed context."""
    return MockSpiBus(bus_mock)
