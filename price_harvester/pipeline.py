"""Worker pool, collector, and the driver that wires them together.

Data flows URL list -> bounded input queue -> workers -> unbounded output
queue -> collector -> sink. The small input queue is the only backpressure
point: when workers are busy, enqueuing stalls.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import httpx

from .config import Settings
from .extractors import ExtractorRegistry, default_registry
from .fetcher import build_client, fetch_outcome
from .models import FetchFailure, PricePoint, RunSummary
from .retry import RetryPolicy
from .sinks import Sink

logger = logging.getLogger(__name__)

# Sent once per consumer to close a queue.
_CLOSED = object()

# Failure kind for errors outside the fetch taxonomy (bugs, unexpected httpx errors).
INTERNAL_KIND = "Internal"


def load_url_list(path: Path) -> List[str]:
    """Read a newline-delimited URL list, skipping blank lines.

    Raises:
        OSError: If the file cannot be read.
    """
    text = path.read_text(encoding="utf-8")
    urls = [line.strip() for line in text.splitlines()]
    urls = [u for u in urls if u]
    logger.info("Loaded %d URLs from %s", len(urls), path)
    return urls


async def worker(
    inbox: asyncio.Queue,
    outbox: asyncio.Queue,
    client: httpx.AsyncClient,
    *,
    settings: Settings,
    policy: RetryPolicy,
    registry: ExtractorRegistry,
) -> List[FetchFailure]:
    """Process URLs one at a time until the inbox is closed.

    Returns the failures this worker saw. A failure never stops the loop.
    """
    failures: List[FetchFailure] = []
    while True:
        url = await inbox.get()
        if url is _CLOSED:
            return failures

        try:
            outcome = await fetch_outcome(
                client, url, settings=settings, policy=policy, registry=registry
            )
        except Exception as exc:
            logger.exception("Unexpected error while processing %s", url)
            outcome = FetchFailure(
                url=url, kind=INTERNAL_KIND, detail=f"{type(exc).__name__}: {exc}"
            )

        if isinstance(outcome, PricePoint):
            await outbox.put(outcome)
        else:
            logger.error("Fetch failed %s", outcome.summary())
            failures.append(outcome)


async def collect(outbox: asyncio.Queue, sink: Sink) -> int:
    """Drain ``outbox`` into ``sink`` until it is closed; return the count."""
    n = 0
    while True:
        point = await outbox.get()
        if point is _CLOSED:
            return n
        sink.write(point)
        n += 1


async def run_pipeline(
    urls: Iterable[str],
    settings: Settings,
    sink: Sink,
    *,
    client: Optional[httpx.AsyncClient] = None,
    registry: Optional[ExtractorRegistry] = None,
    policy: Optional[RetryPolicy] = None,
) -> RunSummary:
    """Fetch every URL and hand each extracted record to ``sink``.

    Shutdown order: close the input after the last URL, wait for every
    worker, then close the output and wait for the collector. No record
    produced by a worker can be dropped.

    Args:
        urls: Product-page URLs, each processed exactly once.
        settings: Concurrency, queue capacity, retry and debug settings.
        sink: Receives records as they are produced; closed at the end.
        client: Shared HTTP client. Built from settings (and closed) if omitted.
        registry: Extractor registry. Uses the bundled sites if omitted.
        policy: Retry policy. Built from settings if omitted.

    Returns:
        RunSummary with counts and the per-URL failures.
    """
    registry = registry or default_registry()
    policy = policy or RetryPolicy.from_settings(settings)
    owns_client = client is None
    client = client or build_client(settings)

    inbox: asyncio.Queue = asyncio.Queue(maxsize=settings.input_capacity)
    outbox: asyncio.Queue = asyncio.Queue()
    summary = RunSummary(workers=settings.concurrency)

    try:
        workers = [
            asyncio.create_task(
                worker(inbox, outbox, client, settings=settings, policy=policy, registry=registry)
            )
            for _ in range(settings.concurrency)
        ]
        collector = asyncio.create_task(collect(outbox, sink))
        logger.info("Started %d workers", len(workers))

        for url in urls:
            await inbox.put(url)
            summary.submitted += 1
        for _ in workers:
            await inbox.put(_CLOSED)

        for failures in await asyncio.gather(*workers):
            summary.failures.extend(failures)

        await outbox.put(_CLOSED)
        summary.collected = await collector
    finally:
        sink.close()
        if owns_client:
            await client.aclose()

    logger.info(
        "Run finished: %d submitted, %d collected, %d failed",
        summary.submitted, summary.collected, summary.failed_count,
    )
    return summary
