"""Tests for the retry policy."""

from unittest.mock import Mock

import pytest

from shopsync.exceptions import ShopifyNetworkError, ShopifyPermissionError
from shopsync.sync.retry import (
    NO_DELAY_RETRY_CONFIG,
    RetryConfig,
    exponential_backoff,
    with_retry,
)


class TestExponentialBackoff:
    """Tests for exponential_backoff."""

    def test_doubles_each_attempt(self):
        backoff = exponential_backoff(base_delay=1.0, jitter=0.0, max_delay=100.0)
        assert [backoff(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped_at_max_delay(self):
        backoff = exponential_backoff(base_delay=1.0, jitter=0.0, max_delay=5.0)
        assert backoff(10) == 5.0

    def test_jitter_stays_within_bounds(self):
        backoff = exponential_backoff(base_delay=2.0, jitter=0.5, max_delay=100.0)
        for _ in range(20):
            assert 2.0 <= backoff(1) <= 3.0


class TestWithRetry:
    """Tests for with_retry."""

    @pytest.fixture
    def sleep(self):
        return Mock()

    def test_success_first_attempt(self, sleep):
        """Test a successful operation runs once and never sleeps."""
        operation = Mock(return_value="ok")

        result = with_retry(operation, NO_DELAY_RETRY_CONFIG, sleep)

        assert result == "ok"
        assert operation.call_count == 1
        sleep.assert_not_called()

    def test_succeeds_after_failures(self, sleep):
        """Test that the result of the first successful attempt is returned."""
        operation = Mock(
            side_effect=[ShopifyNetworkError("reset"), ShopifyNetworkError("reset"), 42]
        )

        result = with_retry(operation, RetryConfig(3, lambda n: 0.0), sleep)

        assert result == 42
        assert operation.call_count == 3
        assert sleep.call_count == 2

    def test_reraises_last_error_unchanged(self, sleep):
        """Test the final exception propagates as-is, not wrapped."""
        last = ShopifyNetworkError("third")
        operation = Mock(
            side_effect=[ShopifyNetworkError("first"), ShopifyNetworkError("second"), last]
        )

        with pytest.raises(ShopifyNetworkError) as exc_info:
            with_retry(operation, RetryConfig(3, lambda n: 0.0), sleep)

        assert exc_info.value is last
        assert operation.call_count == 3

    def test_retries_every_error_kind(self, sleep):
        """Test that even permission errors use the full attempt budget."""
        operation = Mock(side_effect=ShopifyPermissionError("Forbidden", 403))

        with pytest.raises(ShopifyPermissionError):
            with_retry(operation, RetryConfig(3, lambda n: 0.0), sleep)

        assert operation.call_count == 3

    def test_sleeps_with_backoff_of_failed_attempt(self, sleep):
        """Test that the backoff receives the 1-based failed attempt number."""
        operation = Mock(side_effect=[ValueError("a"), ValueError("b"), "done"])
        config = RetryConfig(max_attempts=3, backoff=lambda attempt: attempt * 10.0)

        with_retry(operation, config, sleep)

        assert [c.args[0] for c in sleep.call_args_list] == [10.0, 20.0]

    def test_no_sleep_after_final_attempt(self, sleep):
        """Test that exhausting the budget does not wait again."""
        operation = Mock(side_effect=ValueError("nope"))

        with pytest.raises(ValueError):
            with_retry(operation, RetryConfig(2, lambda n: 1.0), sleep)

        assert sleep.call_count == 1

    def test_single_attempt(self, sleep):
        """Test max_attempts=1 disables retrying."""
        operation = Mock(side_effect=ValueError("nope"))

        with pytest.raises(ValueError, match="nope"):
            with_retry(operation, RetryConfig(1, lambda n: 1.0), sleep)

        assert operation.call_count == 1
        sleep.assert_not_called()

    def test_invalid_attempt_budget(self, sleep):
        """Test that a budget below one is rejected before running."""
        operation = Mock()

        with pytest.raises(ValueError, match="max_attempts"):
            with_retry(operation, RetryConfig(0, lambda n: 0.0), sleep)

        operation.assert_not_called()
