"""Hostname to extractor dispatch."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

import httpx
from bs4 import BeautifulSoup

from ..errors import InvalidUrlError, UnknownHostError
from ..models import PricePoint

logger = logging.getLogger(__name__)

# (url, document, fetched_at) -> PricePoint, raising ExtractionError on mismatch.
Extractor = Callable[[str, BeautifulSoup, int], PricePoint]


def url_host(url: str) -> str:
    """Return the host of an absolute http(s) URL.

    Raises:
        InvalidUrlError: If the URL is malformed, relative, or has no host.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidUrlError(url, f"Malformed URL: {exc}") from exc
    if parsed.scheme not in ("http", "https"):
        raise InvalidUrlError(url, f"Not an absolute http(s) URL: {url!r}")
    if not parsed.host:
        raise InvalidUrlError(url, f"URL has no host: {url!r}")
    return parsed.host


class ExtractorRegistry:
    """Exact-hostname mapping to site extractors.

    There is no fallback: a host that isn't registered is a hard failure.
    """

    def __init__(self) -> None:
        self._extractors: Dict[str, Extractor] = {}

    def register(self, host: str, extractor: Extractor) -> None:
        if host in self._extractors:
            logger.warning("Replacing extractor for host %s", host)
        self._extractors[host] = extractor

    def resolve(self, url: str) -> Extractor:
        """Pick the extractor for ``url``'s host.

        Raises:
            InvalidUrlError: If the URL cannot be parsed into a host.
            UnknownHostError: If no extractor is registered for the host.
        """
        host = url_host(url)
        try:
            return self._extractors[host]
        except KeyError:
            raise UnknownHostError(url, host) from None

    def hosts(self) -> List[str]:
        return sorted(self._extractors)

    def __contains__(self, host: object) -> bool:
        return host in self._extractors
