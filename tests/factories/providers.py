"""In-memory scrape providers and helpers for pipeline tests.

``ScriptedProvider`` answers from a per-URL script and records what it was
asked to do, including how many calls overlapped.  ``RecordingSleep``
replaces ``asyncio.sleep`` in the scrape client so backoff costs no time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Union

from readlater.importer.provider import ScrapeProvider
from readlater.importer.retry import RetryPolicy
from readlater.importer.scrape_client import ScrapeClient
from readlater.importer.types import ItemDraft

Step = Union[ItemDraft, BaseException]


def make_item(url: str, **overrides) -> ItemDraft:
    fields = {"title": f"Title of {url}", "content": "Body text."}
    fields.update(overrides)
    return ItemDraft(url=url, **fields)


class ScriptedProvider(ScrapeProvider):
    """Provider that replays scripted outcomes per URL.

    Args:
        script: URL -> steps.  Each call pops the next step: an
            :class:`ItemDraft` is returned, an exception is raised.  Once a
            URL's steps run out (or it has none) a default draft is returned.
        delays: URL -> seconds to sleep before answering.
        gates: URL -> event the call waits on before answering.
    """

    name = "scripted"

    def __init__(
        self,
        script: Mapping[str, Iterable[Step]] | None = None,
        *,
        delays: Mapping[str, float] | None = None,
        gates: Mapping[str, asyncio.Event] | None = None,
    ) -> None:
        self.script = {url: list(steps) for url, steps in (script or {}).items()}
        self.delays = dict(delays or {})
        self.gates = dict(gates or {})
        self.calls: list[str] = []
        self.finished: list[str] = []
        self.cancelled: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    def call_count(self, url: str) -> int:
        return self.calls.count(url)

    async def scrape(self, url: str) -> ItemDraft:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            gate = self.gates.get(url)
            if gate is not None:
                await gate.wait()
            await asyncio.sleep(self.delays.get(url, 0))
            steps = self.script.get(url)
            step = steps.pop(0) if steps else None
            if isinstance(step, BaseException):
                raise step
            self.finished.append(url)
            return step if step is not None else make_item(url)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        finally:
            self.in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True


class RecordingSleep:
    """Drop-in for ``asyncio.sleep`` that records delays and yields once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


def make_client(
    provider: ScrapeProvider,
    *,
    max_retries: int = 0,
    timeout: float = 5.0,
    max_delay: float = 30.0,
    sleep: RecordingSleep | None = None,
) -> ScrapeClient:
    """Build a scrape client with deterministic backoff (no jitter)."""
    policy = RetryPolicy(
        max_retries=max_retries,
        base_delay=0.5,
        multiplier=2.0,
        max_delay=max_delay,
        jitter=0.0,
    )
    return ScrapeClient(
        provider,
        timeout=timeout,
        retry_policy=policy,
        sleep=sleep or RecordingSleep(),
    )
