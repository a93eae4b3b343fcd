"""
busmock - Configuration
=======================

Mock engine configuration. Values can come from:
- Default values (defined here)
- Environment variables
- Pytest configuration (ini options and command-line flags)

The main policy choice is strictness. In lenient mode (the default) a
call to a primitive with no queued expectation passes as "don't care",
so a test only has to describe the calls it cares about. In strict mode
the same call fails as an unexpected call.

Copyright (c) 2026 busmock Contributors
"""

from dataclasses import dataclass, replace
from typing import Optional
import os

from .primitives import STATUS_NOT_CONFIGURED

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(value: str) -> Optional[bool]:
    """Parse a boolean setting; None if the text is not recognized."""
    text = value.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


@dataclass
class MockConfig:
    """
    Configuration for the mock engine.

    Attributes:
        strict: Fail calls that have no queued expectation (default: False)
        default_status: Status returned when no response is queued (default: -1)
        verify_on_teardown: Fail teardown when expectations remain unconsumed
                            (default: True)
        max_report_calls: Most recent calls listed in a failure report
                          (default: 10)
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # VERIFICATION POLICY
    # ═══════════════════════════════════════════════════════════════════════════

    strict: bool = False
    verify_on_teardown: bool = True

    # ═══════════════════════════════════════════════════════════════════════════
    # RESPONSE DEFAULTS
    # ═══════════════════════════════════════════════════════════════════════════

    default_status: int = STATUS_NOT_CONFIGURED

    # ═══════════════════════════════════════════════════════════════════════════
    # DIAGNOSTICS
    # ═══════════════════════════════════════════════════════════════════════════

    max_report_calls: int = 10

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "MockConfig":
        """
        Create MockConfig from environment variables.

        Environment variables (all optional):
            BUSMOCK_STRICT: "1"/"true" for strict mode, "0"/"false" for lenient
            BUSMOCK_DEFAULT_STATUS: Default status (integer, e.g. "-1")
            BUSMOCK_VERIFY_TEARDOWN: Check for unconsumed expectations

        Invalid values are ignored.

        Returns:
            MockConfig with values from environment variables
        """
        config = cls()

        if strict := os.environ.get("BUSMOCK_STRICT"):
            parsed = _parse_bool(strict)
            if parsed is not None:
                config.strict = parsed

        if status := os.environ.get("BUSMOCK_DEFAULT_STATUS"):
            try:
                config.default_status = int(status, 0)
            except ValueError:
                pass  # Ignore invalid values

        if verify := os.environ.get("BUSMOCK_VERIFY_TEARDOWN"):
            parsed = _parse_bool(verify)
            if parsed is not None:
                config.verify_on_teardown = parsed

        return config

    @classmethod
    def from_pytest_config(cls, pytest_config, base: Optional["MockConfig"] = None) -> "MockConfig":
        """
        Create MockConfig from pytest configuration.

        Reads ini options from pytest.ini or pyproject.toml
        [tool.pytest.ini_options]:
            busmock_strict = true
            busmock_default_status = -1
            busmock_verify_teardown = true

        Command-line flags --busmock-strict / --busmock-lenient override
        the ini setting.

        Args:
            pytest_config: Pytest Config object
            base: Starting configuration (default: from environment)

        Returns:
            MockConfig with values from pytest configuration
        """
        config = replace(base) if base is not None else cls.from_env()

        if hasattr(pytest_config, "getini"):
            if strict := pytest_config.getini("busmock_strict"):
                parsed = _parse_bool(str(strict))
                if parsed is not None:
                    config.strict = parsed

            if status := pytest_config.getini("busmock_default_status"):
                try:
                    config.default_status = int(str(status), 0)
                except ValueError:
                    pass

            if verify := pytest_config.getini("busmock_verify_teardown"):
                parsed = _parse_bool(str(verify))
                if parsed is not None:
                    config.verify_on_teardown = parsed

        if hasattr(pytest_config, "getoption"):
            mode = pytest_config.getoption("busmock_mode", default=None)
            if mode == "strict":
                config.strict = True
            elif mode == "lenient":
                config.strict = False

        return config

    def with_overrides(self, **changes) -> "MockConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT CONFIGURATION INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_default_config: Optional[MockConfig] = None


def get_default_config() -> MockConfig:
    """
    Get the default mock configuration.

    Created from environment variables on first access. Can be
    overridden by calling set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = MockConfig.from_env()
    return _default_config


def set_default_config(config: Optional[MockConfig]) -> None:
    """
    Set the default mock configuration.

    Pass None to go back to reading the environment on next access.
    """
    global _default_config
    _default_config = config
