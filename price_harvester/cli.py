"""Command-line interface for the price harvester."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .config import get_settings
from .errors import (
    ExtractionError,
    InvalidUrlError,
    MarkupError,
    MissingCanonicalError,
    UnknownHostError,
)
from .fetcher import parse_file
from .pipeline import load_url_list, run_pipeline
from .sinks import JsonlSink, StdoutSink

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="price-harvester",
        description="Fetch product pages concurrently and extract price records.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    # --- fetch-list ---
    fetch = sub.add_parser("fetch-list", help="Fetch and parse every URL in a list file")
    fetch.add_argument("list_path", type=Path, help="File with one URL per line")
    fetch.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Append records to this JSONL file instead of stdout",
    )

    # --- parse-file ---
    parse = sub.add_parser("parse-file", help="Run extraction on a saved HTML page")
    parse.add_argument("file_path", type=Path, help="Saved page with a canonical link")

    return p


def _configure_logging(verbose: bool) -> None:
    """Set up root logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _fetch_list(list_path: Path, output: Path | None) -> int:
    settings = get_settings()
    settings.ensure_dirs()
    urls = load_url_list(list_path)
    sink = JsonlSink(output) if output else StdoutSink()
    asyncio.run(run_pipeline(urls, settings, sink))
    return 0


def _parse_file(file_path: Path) -> int:
    try:
        url, point = parse_file(file_path)
    except (ExtractionError, UnknownHostError) as exc:
        print(f"URL: {exc.url}")
        print(f"Error: [{exc.kind}] {exc.detail}")
        return 0
    print(f"URL: {url}")
    print(point.model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.cmd == "fetch-list":
            return _fetch_list(args.list_path, args.output)
        if args.cmd == "parse-file":
            return _parse_file(args.file_path)
    except (
        OSError, ValidationError, MissingCanonicalError, InvalidUrlError, MarkupError
    ) as exc:
        logger.error("Fatal: %s", exc)
        return 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
