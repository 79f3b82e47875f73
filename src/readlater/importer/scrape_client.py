"""Scrape client adapter: one provider call with timeout, retries and containment.

:meth:`ScrapeClient.fetch` is total: every call resolves to a
:data:`~readlater.importer.types.ScrapeOutcome`.  The only exception that
crosses the boundary is :class:`asyncio.CancelledError`, which is how batch
cancellation reaches in-flight calls.

Retry policy:
    Timeouts, retryable provider errors and rate limits are retried up to
    ``RetryPolicy.max_retries`` times with exponential backoff and jitter.
    A rate limit waits at least the provider's ``Retry-After`` hint; a hint
    longer than ``RetryPolicy.max_delay`` ends the loop immediately.
    Everything else fails on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from readlater.core.exceptions import (
    ErrorKind,
    ScrapeError,
    ScrapeRateLimitError,
    ScrapeTimeoutError,
)
from readlater.importer.config import DEFAULT_TIMEOUT
from readlater.importer.provider import ScrapeProvider
from readlater.importer.retry import RetryPolicy
from readlater.importer.types import ScrapeFailure, ScrapeOutcome, ScrapeSuccess

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class ScrapeClient:
    """Wraps a :class:`ScrapeProvider` with the import pipeline's call policy.

    Args:
        provider: The extraction backend.
        timeout: Seconds allowed for a single attempt.
        retry_policy: Backoff configuration; defaults to :class:`RetryPolicy()`.
        sleep: Coroutine used for backoff delays (injected by tests).
    """

    def __init__(
        self,
        provider: ScrapeProvider,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._provider = provider
        self._timeout = timeout
        self._policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    @property
    def provider(self) -> ScrapeProvider:
        return self._provider

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    async def fetch(self, url: str) -> ScrapeOutcome:
        """Extract *url*, retrying transient failures.

        Args:
            url: A normalized absolute URL.

        Returns:
            :class:`ScrapeSuccess` or :class:`ScrapeFailure`; ``attempts``
            records how many provider calls were made.
        """
        retries = 0
        while True:
            attempt = retries + 1
            try:
                item = await asyncio.wait_for(self._provider.scrape(url), timeout=self._timeout)
            except asyncio.TimeoutError:
                error: ScrapeError = ScrapeTimeoutError(
                    f"no answer within {self._timeout:g}s", url=url
                )
            except ScrapeError as exc:
                error = exc
            except Exception as exc:  # noqa: BLE001
                logger.exception("importer: unexpected provider error for %s", url)
                return ScrapeFailure(
                    kind=ErrorKind.PROVIDER_ERROR,
                    message=f"unexpected provider error: {exc}",
                    retryable=False,
                    attempts=attempt,
                )
            else:
                if retries:
                    logger.info("importer: %s succeeded on attempt %d", url, attempt)
                return ScrapeSuccess(item=item, attempts=attempt)

            failure = ScrapeFailure(
                kind=error.kind,
                message=error.message,
                retryable=error.retryable,
                attempts=attempt,
            )
            if not error.retryable:
                logger.info(
                    "importer: %s failed permanently (%s): %s", url, error.kind.value, error.message
                )
                return failure
            if not self._policy.can_retry(retries):
                logger.warning(
                    "importer: %s failed after %d attempt(s) (%s): %s",
                    url,
                    attempt,
                    error.kind.value,
                    error.message,
                )
                return failure

            retry_after = error.retry_after if isinstance(error, ScrapeRateLimitError) else None
            # A hint above the ceiling is honoured by not retrying at all; the
            # failure stays retryable so the caller can resubmit after the wait.
            if not self._policy.honours(retry_after):
                logger.warning(
                    "importer: %s rate limited with retry-after %.1fs above ceiling %.1fs",
                    url,
                    retry_after,
                    self._policy.max_delay,
                )
                return failure

            delay = self._policy.delay_for(retries, retry_after)
            logger.info(
                "importer: %s attempt %d failed (%s), retrying in %.2fs",
                url,
                attempt,
                error.kind.value,
                delay,
            )
            await self._sleep(delay)
            retries += 1
