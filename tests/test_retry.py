"""Tests for retry utilities."""

from unittest.mock import MagicMock

import pytest

from instances_collector.exceptions import (
    NetworkError,
    TransientError,
    UpstreamError,
)
from instances_collector.retry import RetryConfig, with_retry_sync


@pytest.mark.unit
class TestRetryConfig:
    """Test RetryConfig defaults and customization."""

    def test_default_config(self):
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.base_delay == 0.5
        assert config.multiplier == 2.0
        assert config.max_delay == 30.0
        assert config.retryable_exceptions == (TransientError,)

    def test_delay_grows_and_caps(self):
        config = RetryConfig(base_delay=1.0, multiplier=2.0, max_delay=5.0)
        assert [config.delay_for(a) for a in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


@pytest.mark.unit
class TestWithRetrySync:
    """Test synchronous retry functionality."""

    def test_succeeds_on_first_attempt(self):
        operation = MagicMock(return_value=b"ok")
        sleep = MagicMock()

        assert with_retry_sync(operation, sleep=sleep) == b"ok"
        assert operation.call_count == 1
        sleep.assert_not_called()

    def test_succeeds_after_transient_failures(self):
        operation = MagicMock(side_effect=[NetworkError("down"), NetworkError("down"), b"ok"])
        sleep = MagicMock()
        on_retry = MagicMock()

        result = with_retry_sync(
            operation,
            RetryConfig(max_attempts=3, base_delay=1.0),
            on_retry=on_retry,
            sleep=sleep,
        )

        assert result == b"ok"
        assert operation.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]
        assert on_retry.call_count == 2

    def test_raises_after_max_attempts(self):
        operation = MagicMock(side_effect=NetworkError("still down"))
        sleep = MagicMock()

        with pytest.raises(NetworkError, match="still down"):
            with_retry_sync(operation, RetryConfig(max_attempts=4), sleep=sleep)

        assert operation.call_count == 4
        assert sleep.call_count == 3

    def test_permanent_error_not_retried(self):
        operation = MagicMock(side_effect=UpstreamError("404"))
        sleep = MagicMock()

        with pytest.raises(UpstreamError):
            with_retry_sync(operation, sleep=sleep)

        assert operation.call_count == 1
        sleep.assert_not_called()
