"""Destinations for harvested records.

A sink receives records one at a time from the collector, which is its only
writer, so sinks need no locking.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Protocol, TextIO

from .models import PricePoint

logger = logging.getLogger(__name__)


class Sink(Protocol):
    def write(self, point: PricePoint) -> None: ...

    def close(self) -> None: ...


class StdoutSink:
    """Print one JSON record per line."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdout

    def write(self, point: PricePoint) -> None:
        self._stream.write(point.model_dump_json())
        self._stream.write("\n")

    def close(self) -> None:
        self._stream.flush()


class JsonlSink:
    """Append records to a JSONL file, one per line."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.count = 0
        path.parent.mkdir(parents=True, exist_ok=True)
        self._f = path.open("a", encoding="utf-8", newline="\n")

    def write(self, point: PricePoint) -> None:
        self._f.write(point.model_dump_json())
        self._f.write("\n")
        self.count += 1

    def close(self) -> None:
        if self._f.closed:
            return
        self._f.close()
        logger.info("Wrote %d rows to %s", self.count, self.path)

