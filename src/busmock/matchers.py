"""
Parameter Matchers
==================

Matchers decide whether an actual argument satisfies an expectation.

    Exact(value)              - scalar equality
    BytesEqual(data, length)  - byte-wise equality over the first length bytes
    Anything() / ANY          - wildcard, always matches
    Satisfies(fn, text)       - custom predicate

Plain values passed to MockContext.expect() are converted with
as_matcher(): bytes-like values become BytesEqual, Matcher instances
pass through, anything else becomes Exact.
"""

from typing import Any, Callable, Optional


def buffer_bytes(value: Any) -> Optional[bytes]:
    """
    Copy of a bytes-like value as immutable bytes, or None.

    Anything supporting the buffer protocol counts: bytearray, memoryview,
    array.array, ctypes arrays, numpy arrays.
    """
    if isinstance(value, bytes):
        return value
    try:
        return bytes(memoryview(value))
    except TypeError:
        return None


def format_value(value: Any) -> str:
    """
    Format a parameter value for diagnostics.

    Non-negative integers are shown in hex (protocol commands and
    addresses read naturally that way), bytes as a hex dump.
    """
    if isinstance(value, bool):
        return repr(value)
    if isinstance(value, int):
        if value < 0:
            return str(value)
        return f"0x{value:02X}"
    data = buffer_bytes(value)
    if data is not None:
        if not data:
            return "b''"
        return " ".join(f"{b:02X}" for b in data)
    return repr(value)


class Matcher:
    """Base class for parameter matchers."""

    def matches(self, actual: Any) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        """Expected value as shown in a failure diagnostic."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"


class Exact(Matcher):
    """Matches when the actual value equals the expected value."""

    def __init__(self, value: Any):
        self.value = value

    def matches(self, actual: Any) -> bool:
        return actual == self.value

    def describe(self) -> str:
        return format_value(self.value)


class BytesEqual(Matcher):
    """
    Byte-wise buffer comparison over a fixed length.

    Only the first `length` bytes of the actual buffer are compared, so a
    driver passing a larger scratch buffer still matches. A buffer shorter
    than `length` never matches.
    """

    def __init__(self, expected: bytes, length: Optional[int] = None):
        self.expected = bytes(expected)
        self.length = len(self.expected) if length is None else length
        if self.length < 0:
            raise ValueError(f"length must be non-negative, got {self.length}")
        if self.length > len(self.expected):
            raise ValueError(
                f"length {self.length} exceeds expected data size {len(self.expected)}"
            )

    def matches(self, actual: Any) -> bool:
        data = buffer_bytes(actual)
        if data is None or len(data) < self.length:
            return False
        return data[: self.length] == self.expected[: self.length]

    def describe(self) -> str:
        return f"{format_value(self.expected[: self.length])} ({self.length} bytes)"


class Anything(Matcher):
    """Wildcard matcher used to ignore a parameter."""

    def matches(self, actual: Any) -> bool:
        return True

    def describe(self) -> str:
        return "<any>"


class Satisfies(Matcher):
    """Matches when a predicate returns true for the actual value."""

    def __init__(self, predicate: Callable[[Any], bool], description: str = "predicate"):
        self.predicate = predicate
        self.description = description

    def matches(self, actual: Any) -> bool:
        return bool(self.predicate(actual))

    def describe(self) -> str:
        return f"<{self.description}>"


ANY = Anything()


def as_matcher(value: Any) -> Matcher:
    """Convert a plain expected value into a Matcher."""
    if isinstance(value, Matcher):
        return value
    if buffer_bytes(value) is not None:
        return BytesEqual(value)
    return Exact(value)
