"""
busmock - Command-Line Interface
================================

Usage Examples
--------------
List the mockable primitives:
    $ busmock primitives
    $ busmock primitives --family i2c

List serial ports usable with the pyserial backend:
    $ busmock ports

Run driver tests with the plugin loaded, in strict mode:
    $ busmock run --strict tests/
    $ busmock run --default-status -5 -- -k sensor -x

Arguments after the options are passed to pytest unchanged.

Exit Codes
----------
0 - All tests passed
1 - Test failures (or a verification or bus error)
2 - Invalid arguments
3 - Internal error
"""

import logging
from typing import Optional

import click
import pytest

from busmock import __version__
from busmock.backends.serial import list_serial_ports
from busmock.cli.errors import ExitCode, handle_cli_exception
from busmock.primitives import BusFamily, PrimitiveId
from busmock.results import ResultRecorder

# Configure logging
logger = logging.getLogger(__name__)

def build_pytest_args(
    pytest_args: tuple,
    mode: Optional[str],
    default_status: Optional[int],
) -> list[str]:
    """Translate busmock run options into a pytest argument list."""
    args = ["-p", "busmock.fixtures"]
    if mode is not None:
        args.append(f"--busmock-{mode}")
    if default_status is not None:
        args.extend(["-o", f"busmock_default_status={default_status}"])
    args.extend(pytest_args)
    return args


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(version=__version__, prog_name="busmock")
def main() -> None:
    """
    Mock I2C, UART and SPI primitives for driver unit tests.

    Use 'busmock run' to run your tests with the busmock pytest plugin.
    """


# =============================================================================
# Primitives Command
# =============================================================================

@main.command()
@click.option(
    "-f", "--family",
    type=click.Choice([f.value for f in BusFamily]),
    default=None,
    help="Only list primitives of this bus family",
)
def primitives(family: Optional[str]) -> None:
    """
    List mockable primitives and their checked parameters.

    Example:
        busmock primitives --family uart
    """
    selected = PrimitiveId.for_family(BusFamily(family)) if family else list(PrimitiveId)
    for primitive in selected:
        params = ", ".join(primitive.params)
        click.echo(f"{primitive.value:<14} {primitive.family.value:<5} ({params})")


# =============================================================================
# Ports Command
# =============================================================================

@main.command()
def ports() -> None:
    """
    List available serial ports.

    These are the devices SerialUartBus can open.
    """
    try:
        port_list = list_serial_ports()
    except Exception as e:
        handle_cli_exception(e, error_type="Serial")

    if not port_list:
        click.echo("No serial ports found.")
        return

    click.echo("Available serial ports:")
    for port in port_list:
        click.echo(f"  {port}")


# =============================================================================
# Run Command
# =============================================================================

@main.command(context_settings={"ignore_unknown_options": True})
@click.option("--strict", "mode", flag_value="strict", help="Fail calls with no queued expectation")
@click.option("--lenient", "mode", flag_value="lenient", help="Allow calls with no queued expectation")
@click.option(
    "--default-status",
    type=int,
    default=None,
    help="Status returned when no response is queued (default: -1)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.argument("pytest_args", nargs=-1, type=click.UNPROCESSED)
def run(
    mode: Optional[str],
    default_status: Optional[int],
    verbose: bool,
    pytest_args: tuple,
) -> None:
    """
    Run pytest with the busmock plugin and print a suite summary.

    PYTEST_ARGS are passed to pytest (paths, -k, -x, ...).

    Example:
        busmock run --strict tests/drivers
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(name)s: %(message)s")

    args = build_pytest_args(pytest_args, mode, default_status)
    logger.debug(f"pytest {' '.join(args)}")

    recorder = ResultRecorder()
    try:
        status = pytest.main(args, plugins=[recorder])
    except Exception as e:
        handle_cli_exception(e, verbose=verbose)

    suite = recorder.suite
    click.echo()
    click.echo(str(suite))

    raise SystemExit(int(ExitCode.from_pytest(status, suite.all_passed)))


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
