"""Price harvester: concurrent fetch-and-extract of product-page prices."""

from .config import Settings, get_settings
from .errors import (
    ExtractionError,
    FetchError,
    HarvesterError,
    HttpStatusFailure,
    InvalidUrlError,
    MarkupError,
    MissingCanonicalError,
    TransportFailure,
    UnknownHostError,
)
from .extractors import ExtractorRegistry, default_registry
from .fetcher import fetch_and_parse, fetch_outcome, parse_file
from .models import FetchFailure, FetchOutcome, PricePoint, RunSummary
from .pipeline import load_url_list, run_pipeline
from .retry import RetryPolicy

__all__ = [
    "Settings",
    "get_settings",
    "HarvesterError",
    "FetchError",
    "TransportFailure",
    "HttpStatusFailure",
    "MarkupError",
    "ExtractionError",
    "UnknownHostError",
    "InvalidUrlError",
    "MissingCanonicalError",
    "ExtractorRegistry",
    "default_registry",
    "fetch_and_parse",
    "fetch_outcome",
    "parse_file",
    "PricePoint",
    "FetchFailure",
    "FetchOutcome",
    "RunSummary",
    "load_url_list",
    "run_pipeline",
    "RetryPolicy",
]
