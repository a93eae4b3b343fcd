"""
Tests for Test Data Helpers
===========================
"""

from unittest.mock import MagicMock, patch

import pytest

from busmock.primitives import PrimitiveId
from busmock.utils import create_test_data, run_with_retries, verify_test_data


class TestTestData:
    def test_counting_pattern(self):
        assert create_test_data(4) == b"\x00\x01\x02\x03"

    def test_wraps_at_256(self):
        data = create_test_data(258)
        assert data[255] == 0xFF
        assert data[256:] == b"\x00\x01"

    def test_empty(self):
        assert create_test_data(0) == b""

    def test_negative_size(self):
        with pytest.raises(ValueError):
            create_test_data(-1)

    def test_verify(self):
        assert verify_test_data(create_test_data(300))
        assert verify_test_data(create_test_data(16), expected_size=16)
        assert not verify_test_data(create_test_data(16), expected_size=8)
        assert not verify_test_data(b"\x00\x02")

    def test_as_canned_payload(self, bus_mock, uart_bus):
        bus_mock.will_return_buffer(PrimitiveId.UART_READ, create_test_data(64), status=32)
        buf = bytearray(32)
        assert uart_bus.read(1, buf, 32, 100) == 32
        assert verify_test_data(bytes(buf), expected_size=32)


class TestRunWithRetries:
    def test_first_attempt(self):
        func = MagicMock(return_value=5)
        assert run_with_retries(func) == 5
        func.assert_called_once()

    def test_retries_until_success(self):
        func = MagicMock(side_effect=[OSError("busy"), OSError("busy"), "ok"])
        assert run_with_retries(func, retry_count=3) == "ok"
        assert func.call_count == 3

    def test_reraises_last_error(self):
        func = MagicMock(side_effect=[OSError("first"), OSError("second")])
        with pytest.raises(OSError, match="second"):
            run_with_retries(func, retry_count=2)

    def test_only_listed_exceptions_retried(self):
        func = MagicMock(side_effect=KeyError("nope"))
        with pytest.raises(KeyError):
            run_with_retries(func, retry_count=3, exceptions=(OSError,))
        func.assert_called_once()

    def test_delay_between_attempts(self):
        func = MagicMock(side_effect=[OSError("busy"), "ok"])
        with patch("busmock.utils.time.sleep") as sleep:
            run_with_retries(func, retry_delay=0.5)
        sleep.assert_called_once_with(0.5)

    def test_invalid_count(self):
        with pytest.raises(ValueError):
            run_with_retries(lambda: None, retry_count=0)
