"""
Test Results
============

Per-test outcomes and suite aggregates, the data the orchestration layer
reads after a run. Formatting the results into an artifact is left to
the orchestration layer; SuiteResult.summary() is only a console summary.

ResultRecorder is a pytest plugin object that builds a SuiteResult from
test reports:

    setup failure     -> ERROR   (harness defect, e.g. a state leak)
    call failure      -> FAILED
    teardown failure  -> FAILED  (e.g. unconsumed expectations)
    skipped           -> SKIPPED
    otherwise         -> PASSED
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class TestStatus(Enum):
    """Outcome of one test case."""
    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class TestResult:
    """
    Result of one test case.

    Attributes:
        name: Test node id
        status: Outcome
        duration: Seconds spent in setup, call and teardown
        message: Failure diagnostic (first line of the error), if any
    """
    __test__ = False

    name: str
    status: TestStatus = TestStatus.PASSED
    duration: float = 0.0
    message: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.status.value.upper():<7} {self.name} ({self.duration:.3f}s)"
        if self.message:
            text += f"\n        {self.message}"
        return text


@dataclass
class SuiteResult:
    """Aggregate of many TestResults."""

    name: str = "busmock"
    results: List[TestResult] = field(default_factory=list)

    def add(self, result: TestResult) -> None:
        self.results.append(result)

    def count(self, status: TestStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def total_tests(self) -> int:
        return len(self.results)

    @property
    def passed_tests(self) -> int:
        return self.count(TestStatus.PASSED)

    @property
    def failed_tests(self) -> int:
        return self.count(TestStatus.FAILED)

    @property
    def skipped_tests(self) -> int:
        return self.count(TestStatus.SKIPPED)

    @property
    def error_tests(self) -> int:
        return self.count(TestStatus.ERROR)

    @property
    def total_duration(self) -> float:
        return sum(r.duration for r in self.results)

    @property
    def all_passed(self) -> bool:
        return self.failed_tests == 0 and self.error_tests == 0

    def summary(self) -> str:
        """One-line totals, e.g. 'busmock: 5 tests, 4 passed, 1 failed, 0 skipped, 0 errors'."""
        return (
            f"{self.name}: {self.total_tests} tests, {self.passed_tests} passed, "
            f"{self.failed_tests} failed, {self.skipped_tests} skipped, "
            f"{self.error_tests} errors ({self.total_duration:.2f}s)"
        )

    def __str__(self) -> str:
        lines = [self.summary()]
        lines.extend(str(r) for r in self.results if r.status is not TestStatus.PASSED)
        return "\n".join(lines)


def _first_line(report) -> Optional[str]:
    crash = getattr(report.longrepr, "reprcrash", None)
    if crash is not None:
        return crash.message.splitlines()[0] if crash.message else None
    if report.longrepr is None:
        return None
    if isinstance(report.longrepr, tuple):
        # Skip reports carry (path, lineno, reason)
        return str(report.longrepr[-1])
    text = str(report.longrepr).strip()
    return text.splitlines()[-1] if text else None


class ResultRecorder:
    """
    Pytest plugin that records a SuiteResult.

    Register it with pytest.main(args, plugins=[recorder]) to read the
    suite after the run; the busmock plugin registers one automatically
    when none is present.
    """

    def __init__(self, name: str = "busmock"):
        self.suite = SuiteResult(name=name)
        self._by_nodeid: Dict[str, TestResult] = {}

    def pytest_runtest_logreport(self, report) -> None:
        result = self._by_nodeid.get(report.nodeid)
        if result is None:
            result = TestResult(name=report.nodeid)
            self._by_nodeid[report.nodeid] = result
            self.suite.add(result)

        result.duration += getattr(report, "duration", 0.0)

        if report.skipped and result.status is TestStatus.PASSED:
            result.status = TestStatus.SKIPPED
            result.message = _first_line(report)
        elif report.failed:
            if report.when == "setup":
                result.status = TestStatus.ERROR
            elif result.status is not TestStatus.ERROR:
                result.status = TestStatus.FAILED
            if result.message is None:
                result.message = _first_line(report)
