"""Error taxonomy for the harvester.

Per-URL failures derive from :class:`FetchError` and are contained by the
worker that hit them. Anything else deriving from :class:`HarvesterError`
aborts the run.
"""

from __future__ import annotations

from typing import Optional

from .models import FetchFailure


class HarvesterError(Exception):
    """Base class for all harvester errors."""


class FetchError(HarvesterError):
    """A terminal failure for a single URL."""

    kind = "Fetch"

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(detail)
        self.url = url
        self.detail = detail

    def to_failure(self) -> FetchFailure:
        return FetchFailure(url=self.url, kind=self.kind, detail=self.detail)


class TransportFailure(FetchError):
    """Connection, timeout or other transport error after all retries."""

    kind = "Http"


class HttpStatusFailure(FetchError):
    """The server answered with a non-2xx status."""

    kind = "HttpStatus"

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(url, f"http status: {status_code}")
        self.status_code = status_code

    def to_failure(self) -> FetchFailure:
        return FetchFailure(
            url=self.url,
            kind=self.kind,
            detail=self.detail,
            status_code=self.status_code,
        )


class MarkupError(FetchError):
    """The body could not be parsed into a document at all."""

    kind = "Tl"


class ExtractionError(FetchError):
    """The document parsed but the extractor could not find required fields."""

    kind = "Parse"

    def __init__(self, url: str, detail: str, debug_path: Optional[str] = None) -> None:
        super().__init__(url, detail)
        self.debug_path = debug_path

    def to_failure(self) -> FetchFailure:
        return FetchFailure(
            url=self.url,
            kind=self.kind,
            detail=self.detail,
            debug_path=self.debug_path,
        )


class UnknownHostError(FetchError):
    """No extractor is registered for the URL's host."""

    kind = "UnknownHost"

    def __init__(self, url: str, host: str) -> None:
        super().__init__(url, f"Unknown host {host}")
        self.host = host


class InvalidUrlError(FetchError):
    """The URL is not absolute or has no host."""

    kind = "InvalidUrl"


class MissingCanonicalError(HarvesterError):
    """A saved page has no <link rel="canonical"> to recover its URL from."""
