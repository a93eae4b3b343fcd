"""
busmock - Diagnostics
=====================

Formatting for test failure analysis:
- One-line call summaries
- The full call log of a test case
- A boxed failure report with counters, recent calls and pending
  expectations

When a test fails, the report captures what the driver actually did so
the failure can be understood without re-running the test.

Copyright (c) 2026 busmock Contributors
"""

from typing import TYPE_CHECKING, List, Optional

from .ledger import MockCall
from .matchers import format_value

if TYPE_CHECKING:
    from .context import MockContext

_WIDTH = 78


def format_call(call: MockCall) -> str:
    """
    Format a call as a single-line summary.

    Returns:
        Formatted string like '[  3] i2c_write #1 (handle=0x01, command=0x10)'
    """
    args = ", ".join(f"{name}={format_value(value)}" for name, value in call.params.items())
    return f"[{call.sequence:3}] {call.primitive} #{call.ordinal} ({args})"


def format_call_log(calls: List[MockCall]) -> str:
    """
    Format a complete call log.

    Args:
        calls: Calls in sequence order (e.g. MockContext.calls)

    Returns:
        Formatted call log
    """
    if not calls:
        return "No calls recorded"

    lines = [f"Call Log ({len(calls)} calls):", ""]
    lines.extend(format_call(call) for call in calls)
    return "\n".join(lines)


def _row(text: str = "") -> str:
    return "║" + f"  {text}"[:_WIDTH].ljust(_WIDTH) + "║"


def _rule() -> str:
    return "╠" + "═" * _WIDTH + "╣"


def format_failure_report(ctx: "MockContext", error: Optional[BaseException] = None) -> str:
    """
    Format a comprehensive failure report for one test case.

    Args:
        ctx: The context the test ran against
        error: The exception that failed the test (default: ctx.failure)

    Returns:
        Multi-line formatted failure report
    """
    error = error if error is not None else ctx.failure
    max_calls = ctx.config.max_report_calls
    lines = []

    # Header
    lines.append("╔" + "═" * _WIDTH + "╗")
    lines.append("║" + "BUS MOCK FAILURE".center(_WIDTH) + "║")
    lines.append(_rule())

    lines.append(_row())
    lines.append(_row(f"Test: {ctx.test_name or 'unknown'}"))
    lines.append(_row(f"Mode: {'strict' if ctx.strict else 'lenient'}"))
    if error is not None:
        lines.append(_row(f"Error: {type(error).__name__}"))
        for part in str(error).splitlines() or [""]:
            lines.append(_row(f"  {part}"))
    lines.append(_row())

    # Counters
    lines.append(_rule())
    lines.append(_row("CALL COUNTS"))
    counts = ctx.counts
    if counts:
        for primitive, count in counts.items():
            exhausted = ctx.exhausted_count(primitive)
            suffix = f" ({exhausted} with default status)" if exhausted else ""
            lines.append(_row(f"  {primitive.value:<14} {count:>4}{suffix}"))
    else:
        lines.append(_row("  (no calls)"))
    lines.append(_row())

    # Recent calls
    calls = ctx.calls
    recent = calls[-max_calls:] if max_calls > 0 else []
    lines.append(_rule())
    lines.append(_row(f"RECENT CALLS (last {len(recent)} of {len(calls)})"))
    for call in recent:
        lines.append(_row(format_call(call)))
    lines.append(_row())

    # Pending expectations
    pending = ctx.pending_expectations()
    if pending:
        lines.append(_rule())
        lines.append(_row(f"PENDING EXPECTATIONS ({len(pending)})"))
        for expected in pending:
            lines.append(_row(f"#{expected.position} {expected.describe()}"))
        lines.append(_row())

    # Footer
    lines.append("╚" + "═" * _WIDTH + "╝")

    return "\n".join(lines)
