"""
busmock CLI - Exit Codes and Error Reporting
============================================

Every busmock command ends in one of four exit codes. `busmock run`
also has to translate pytest's own exit status and the collected suite
result into the same codes, so that CI scripts see one scheme:

    0  SUCCESS         all tests passed (or none were collected)
    1  TEST_FAILURE    failing tests, a verification error or a bus error
    2  INVALID_ARGS    bad options, pytest usage errors, missing paths
    3  INTERNAL_ERROR  anything else (interrupted runs, crashes)
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn, Optional

import click
import pytest

from busmock.errors import BusError
from busmock.exceptions import BusMockError, VerificationError


class ExitCode(IntEnum):
    """Exit codes shared by all busmock commands."""
    SUCCESS = 0
    TEST_FAILURE = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3

    @classmethod
    def from_pytest(cls, status, all_passed: bool = True) -> "ExitCode":
        """
        Map a pytest.main() status onto a busmock exit code.

        A clean pytest status still becomes TEST_FAILURE when the recorded
        suite has failures pytest itself did not count (teardown errors).
        """
        code = _PYTEST_STATUS.get(status, cls.INTERNAL_ERROR)
        if code is cls.SUCCESS and not all_passed:
            return cls.TEST_FAILURE
        return code


_PYTEST_STATUS = {
    pytest.ExitCode.OK: ExitCode.SUCCESS,
    pytest.ExitCode.NO_TESTS_COLLECTED: ExitCode.SUCCESS,
    pytest.ExitCode.TESTS_FAILED: ExitCode.TEST_FAILURE,
    pytest.ExitCode.USAGE_ERROR: ExitCode.INVALID_ARGS,
}


def _classify(error: BaseException, error_type: Optional[str]) -> "tuple[ExitCode, str]":
    """Exit code and message prefix for an exception."""
    if isinstance(error, VerificationError):
        return ExitCode.TEST_FAILURE, "Verification failed: "
    if isinstance(error, BusError):
        return ExitCode.TEST_FAILURE, f"{error_type or 'Bus'} error: "
    if isinstance(error, BusMockError):
        # Lifecycle misuse and state leaks point at the harness setup
        return ExitCode.INTERNAL_ERROR, "Harness error: "
    if isinstance(error, (pytest.UsageError, click.BadParameter, ValueError, FileNotFoundError)):
        return ExitCode.INVALID_ARGS, "Usage error: "
    return ExitCode.INTERNAL_ERROR, "Internal error: "


def handle_cli_exception(
    error: BaseException,
    verbose: bool = False,
    error_type: Optional[str] = None,
) -> NoReturn:
    """
    Report an exception on stderr and exit with its code.

    Args:
        error: The exception a command caught
        verbose: Also print the traceback for internal errors
        error_type: Label for bus errors, e.g. "Serial" gives "Serial error: ..."

    Raises:
        SystemExit: Always
    """
    code, prefix = _classify(error, error_type)
    click.echo(f"{prefix}{error}", err=True)
    if verbose and code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(type(error), error, error.__traceback__)
    sys.exit(code)
