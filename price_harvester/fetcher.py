"""Fetch one product page, parse it, and run its site extractor.

Bodies that parse but don't match the extractor's rules are saved under the
debug directory so the markup can be inspected offline.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

import httpx
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .config import Settings
from .errors import (
    ExtractionError,
    FetchError,
    HttpStatusFailure,
    MarkupError,
    MissingCanonicalError,
    TransportFailure,
)
from .extractors import Extractor, ExtractorRegistry, default_registry
from .models import FetchOutcome, PricePoint, now_sec
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

DEBUG_SUFFIX = ".html"

def build_client(settings: Settings) -> httpx.AsyncClient:
    """One client per run, shared read-only by every worker."""
    return httpx.AsyncClient(
        timeout=settings.timeout_total,
        follow_redirects=True,
        limits=httpx.Limits(max_connections=settings.concurrency),
        headers={
            "user-agent": settings.user_agent,
            "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "accept-language": settings.accept_language,
        },
    )


def parse_document(url: str, html: str) -> BeautifulSoup:
    """Parse markup into a navigable tree.

    Raises:
        MarkupError: If the parser rejects the markup outright.
    """
    try:
        return BeautifulSoup(html, "lxml")
    except ParserRejectedMarkup as exc:
        raise MarkupError(url, f"tl error: {exc}") from exc


def extract_page(
    url: str, document: BeautifulSoup, extractor: Extractor, fetched_at: int
) -> PricePoint:
    """Run ``extractor``; anything it raises is reported as ExtractionError.

    A bug in an extractor is handled like a page that didn't match: the body
    is captured and the worker moves on.
    """
    try:
        return extractor(url, document, fetched_at)
    except ExtractionError:
        raise
    except Exception as exc:
        raise ExtractionError(url, f"parse error: {type(exc).__name__}: {exc}") from exc


def _persist_debug_body(debug_dir: Path, body: bytes) -> Path:
    """Write ``body`` verbatim under a fresh random name. Never overwrites."""
    debug_dir.mkdir(parents=True, exist_ok=True)
    path = debug_dir / f"{uuid.uuid4().hex}{DEBUG_SUFFIX}"
    with path.open("xb") as f:
        f.write(body)
    return path


async def capture_debug_body(debug_dir: Path, body: bytes) -> Optional[Path]:
    """Save a body for offline inspection; a failed write is logged, not raised."""
    try:
        return await asyncio.to_thread(_persist_debug_body, debug_dir, body)
    except OSError as exc:
        logger.error("Could not save debug body to %s: %s", debug_dir, exc)
        return None


async def fetch_and_parse(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
    policy: Optional[RetryPolicy] = None,
    registry: Optional[ExtractorRegistry] = None,
) -> PricePoint:
    """Fetch ``url`` and extract a PricePoint from it.

    Args:
        client: Shared HTTP client.
        url: Absolute product-page URL.
        settings: Harvester settings (debug directory, retry defaults).
        policy: Retry policy. Built from settings if not provided.
        registry: Extractor registry. Uses the bundled sites if not provided.

    Returns:
        The extracted PricePoint.

    Raises:
        InvalidUrlError, UnknownHostError: Before any request is made.
        TransportFailure: Transport errors, after retries run out.
        HttpStatusFailure: On a non-2xx response.
        MarkupError: If the body cannot be parsed.
        ExtractionError: If the extractor cannot find required fields. The
            body is saved to the debug directory and ``debug_path`` is set.
    """
    policy = policy or RetryPolicy.from_settings(settings)
    registry = registry or default_registry()

    extractor = registry.resolve(url)

    async def _get() -> httpx.Response:
        logger.debug("Fetching: %s", url)
        return await client.get(url)

    try:
        resp = await policy.call(_get)
    except httpx.HTTPStatusError as exc:
        raise HttpStatusFailure(url, exc.response.status_code) from exc
    except httpx.HTTPError as exc:
        raise TransportFailure(url, f"http error: {type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        raise HttpStatusFailure(url, resp.status_code)

    fetched_at = now_sec()
    body = resp.content
    try:
        html = resp.text
    except (LookupError, UnicodeDecodeError) as exc:
        raise TransportFailure(url, f"could not decode body: {exc}") from exc

    document = parse_document(url, html)
    try:
        point = extract_page(url, document, extractor, fetched_at)
    except ExtractionError as exc:
        debug_path = await capture_debug_body(settings.debug_dir, body)
        if debug_path is not None:
            exc.debug_path = str(debug_path)
            logger.debug("Failed to parse %s, saved body at %s", url, debug_path)
        raise

    logger.debug("Extracted %s from %s", point.product_id, url)
    return point


async def fetch_outcome(
    client: httpx.AsyncClient,
    url: str,
    *,
    settings: Settings,
    policy: Optional[RetryPolicy] = None,
    registry: Optional[ExtractorRegistry] = None,
) -> FetchOutcome:
    """Like :func:`fetch_and_parse`, but per-URL failures come back as values."""
    try:
        return await fetch_and_parse(
            client, url, settings=settings, policy=policy, registry=registry
        )
    except FetchError as exc:
        return exc.to_failure()


def find_canonical_url(document: BeautifulSoup) -> Optional[str]:
    link = document.find("link", rel="canonical", href=True)
    if link is None:
        return None
    return link["href"].strip() or None


def parse_file(
    path: Path, *, registry: Optional[ExtractorRegistry] = None
) -> Tuple[str, PricePoint]:
    """Run the extraction path over a saved page, without touching the network.

    The URL comes from the page's canonical link and ``fetched_at`` from the
    file's modification time, so the result depends only on the file.

    Returns:
        Tuple of (canonical_url, point).

    Raises:
        OSError: If the file cannot be read.
        MissingCanonicalError: If the page has no canonical link.
        FetchError: If the URL has no extractor or extraction fails.
    """
    registry = registry or default_registry()
    html = path.read_text(encoding="utf-8", errors="replace")
    fetched_at = int(path.stat().st_mtime)

    document = parse_document(str(path), html)
    url = find_canonical_url(document)
    if url is None:
        raise MissingCanonicalError(f"No <link rel=\"canonical\"> in {path}")

    extractor = registry.resolve(url)
    return url, extract_page(url, document, extractor, fetched_at)
