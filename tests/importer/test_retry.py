"""Unit tests for the retry/backoff policy."""

from __future__ import annotations

import pytest

from readlater.importer.retry import RetryPolicy


class TestRetryPolicyDelays:
    def test_exponential_growth_without_jitter(self) -> None:
        policy = RetryPolicy(max_retries=5, base_delay=0.5, multiplier=2.0, max_delay=30, jitter=0)

        assert [policy.delay_for(i) for i in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_delay_capped_at_max_delay(self) -> None:
        policy = RetryPolicy(base_delay=1.0, multiplier=10.0, max_delay=5.0, jitter=0)

        assert policy.delay_for(3) == 5.0

    def test_retry_after_raises_the_floor(self) -> None:
        policy = RetryPolicy(base_delay=0.5, max_delay=30, jitter=0)

        assert policy.delay_for(0, retry_after=7.0) == 7.0

    def test_short_retry_after_does_not_shorten_backoff(self) -> None:
        policy = RetryPolicy(base_delay=2.0, max_delay=30, jitter=0)

        assert policy.delay_for(0, retry_after=0.1) == 2.0

    def test_jitter_stays_within_fraction(self) -> None:
        policy = RetryPolicy(base_delay=1.0, multiplier=1.0, max_delay=10, jitter=0.25)

        delays = [policy.delay_for(0) for _ in range(50)]

        assert all(1.0 <= d <= 1.25 for d in delays)


class TestRetryPolicyLimits:
    def test_can_retry_counts_retries_not_attempts(self) -> None:
        policy = RetryPolicy(max_retries=2)

        assert policy.can_retry(0) is True
        assert policy.can_retry(1) is True
        assert policy.can_retry(2) is False

    def test_zero_retries(self) -> None:
        assert RetryPolicy(max_retries=0).can_retry(0) is False

    def test_honours_retry_after_up_to_ceiling(self) -> None:
        policy = RetryPolicy(max_delay=10.0)

        assert policy.honours(None) is True
        assert policy.honours(10.0) is True
        assert policy.honours(10.5) is False

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_retries": -1},
            {"base_delay": -0.1},
            {"max_delay": -1},
            {"multiplier": 0.5},
            {"jitter": 1.5},
        ],
    )
    def test_invalid_configuration_rejected(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)
