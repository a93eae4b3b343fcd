"""
busmock - Test Configuration
============================

pytest configuration shared by all tests:
- Loads the busmock plugin (bus_mock, i2c_bus, uart_bus, spi_bus)
- Loads pytester for plugin behavior tests
- Provides a fresh, initialized MockContext for engine-level tests

Copyright (c) 2026 busmock Contributors
"""

import pytest

from busmock.config import MockConfig, set_default_config
from busmock.context import MockContext

pytest_plugins = ["busmock.fixtures", "pytester"]


# ═══════════════════════════════════════════════════════════════════════════════
# HELPER FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def ctx() -> MockContext:
    """
    Fixture: Initialized (READY) context in lenient mode.

    Independent of the session context behind bus_mock, so tests can
    drive the lifecycle by hand.
    """
    return MockContext(MockConfig()).init()


@pytest.fixture
def strict_ctx() -> MockContext:
    """Fixture: Initialized (READY) context in strict mode."""
    return MockContext(MockConfig(strict=True)).init()


@pytest.fixture(autouse=True)
def _reset_default_config():
    """Make sure no test leaks a process default configuration."""
    yield
    set_default_config(None)
