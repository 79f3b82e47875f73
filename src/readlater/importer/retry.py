"""Retry and backoff policy for scrape provider calls.

Delay for retry number ``n`` (0-indexed)::

    min(base_delay * multiplier ** n, max_delay) + uniform(0, delay * jitter)

When the provider supplied a ``Retry-After`` hint the delay is at least the
hint.  A hint larger than ``max_delay`` means the caller should stop
retrying rather than park a worker slot for that long.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from readlater.importer.config import (
    DEFAULT_BACKOFF_BASE,
    DEFAULT_BACKOFF_JITTER,
    DEFAULT_BACKOFF_MAX,
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_MAX_RETRIES,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with jitter.

    Attributes:
        max_retries: Retries allowed after the first attempt.
        base_delay: Seconds before the first retry.
        multiplier: Growth factor between consecutive retries.
        max_delay: Ceiling for one delay, jitter excluded.
        jitter: Random fraction of the delay added on top (0 disables it).
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BACKOFF_BASE
    multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    max_delay: float = DEFAULT_BACKOFF_MAX
    jitter: float = DEFAULT_BACKOFF_JITTER

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("backoff delays must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be within [0, 1]")

    def can_retry(self, retries_done: int) -> bool:
        return retries_done < self.max_retries

    def honours(self, retry_after: float | None) -> bool:
        """Return ``True`` if a provider hint is short enough to wait for."""
        return retry_after is None or retry_after <= self.max_delay

    def delay_for(self, retry_index: int, retry_after: float | None = None) -> float:
        """Seconds to sleep before retry number *retry_index* (0-indexed).

        Args:
            retry_index: ``0`` for the first retry, ``1`` for the second, ...
            retry_after: Provider ``Retry-After`` hint in seconds, if any.

        Returns:
            Non-negative delay in seconds.
        """
        delay = min(self.base_delay * (self.multiplier ** retry_index), self.max_delay)
        if retry_after is not None:
            delay = max(delay, retry_after)
        if self.jitter > 0 and delay > 0:
            delay += random.uniform(0, delay * self.jitter)
        return max(0.0, delay)
