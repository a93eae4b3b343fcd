"""
busmock - Decorators
====================

Decorators for tests that want a private mock context instead of the
session-wide bus_mock fixture.

Available Decorators:
    @mock_test  - Give the test its own armed MockContext as `ctx`
    @for_modes  - Run the test once per verification mode

Usage:
    from busmock import mock_test, for_modes, PrimitiveId, MockI2CBus

    @mock_test()
    @for_modes("strict", "lenient")
    def test_reset_writes_command(ctx):
        ctx.expect(PrimitiveId.I2C_WRITE, command=0x01)
        ctx.will_return(PrimitiveId.I2C_WRITE, 0)
        Driver(MockI2CBus(ctx)).reset()

Copyright (c) 2026 busmock Contributors
"""

from __future__ import annotations
import functools
import inspect
from typing import Any, Callable, Optional, TypeVar

import pytest

from .config import MockConfig, get_default_config
from .context import MockContext


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])

_MODES = {"strict": True, "lenient": False}


def mock_test(
    strict: Optional[bool] = None,
    config: Optional[MockConfig] = None,
) -> Callable[[F], F]:
    """
    Decorator for tests that drive a mocked bus.

    It handles:
    - MockContext creation, init() and arm_for_test()
    - teardown_test() after the test, with the late verification checks
      when the test body passed
    - shutdown(), even when the test fails

    The decorated function receives the armed MockContext as its first
    argument, named `ctx`. Other arguments are still resolved by pytest.

    Args:
        strict: Verification mode for this test (default: from config)
        config: Custom MockConfig (default: the process default)

    Returns:
        Decorated test function

    Example:
        @mock_test(strict=True)
        def test_no_stray_calls(ctx):
            Driver(MockSpiBus(ctx)).idle()
            ctx.assert_not_called(PrimitiveId.SPI_TRANSFER)
    """

    def decorator(func: F) -> F:
        test_config = config or get_default_config()
        modes = getattr(func, "_busmock_modes", None)

        @functools.wraps(func)
        def wrapper(*args, _busmock_mode=None, **kwargs):
            mode_strict = strict
            if _busmock_mode is not None:
                mode_strict = _MODES[_busmock_mode]

            ctx = MockContext(test_config).init()
            ctx.arm_for_test(func.__name__, strict=mode_strict)
            try:
                try:
                    result = func(ctx, *args, **kwargs)
                except BaseException:
                    ctx.teardown_test(test_passed=False)
                    raise
                ctx.teardown_test()
                return result
            finally:
                ctx.shutdown()

        # Hide ctx (we provide it) so pytest does not look for a fixture
        orig_sig = inspect.signature(func)
        new_params = [p for name, p in orig_sig.parameters.items() if name != "ctx"]
        if modes:
            new_params.append(
                inspect.Parameter("_busmock_mode", inspect.Parameter.KEYWORD_ONLY)
            )
        wrapper.__signature__ = orig_sig.replace(parameters=new_params)

        if modes:
            wrapper = pytest.mark.parametrize(
                "_busmock_mode", modes, ids=lambda m: f"mode={m}"
            )(wrapper)

        # Mark for filtering with pytest -m busmock
        wrapper = pytest.mark.busmock(wrapper)

        return wrapper

    return decorator


def for_modes(*modes: str) -> Callable[[F], F]:
    """
    Parameterize a test to run in several verification modes.

    MUST be used below @mock_test, which detects the modes and turns
    them into one test case per mode.

    Args:
        *modes: "strict" and/or "lenient"

    Example:
        @mock_test()
        @for_modes("strict", "lenient")
        def test_in_both_modes(ctx):
            ...
    """
    unknown = [m for m in modes if m not in _MODES]
    if unknown:
        raise ValueError(f"Unknown mode(s): {', '.join(unknown)} (use strict, lenient)")

    def decorator(func: F) -> F:
        func._busmock_modes = list(modes)
        return func

    return decorator
