"""Pydantic models and result types shared across the harvester."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def now_sec() -> int:
    """Current time as whole seconds since the epoch."""
    return int(time.time())


class PricePoint(BaseModel):
    """A price observation extracted from one product page."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    fetched_at: int = Field(ge=0)
    price_minor_units: Optional[int] = Field(default=None, ge=0)
    in_stock: Optional[bool] = None
    source_url: str
    extractor_version: int = Field(ge=0, le=65535)
    name: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class FetchFailure:
    """A classified per-URL failure."""

    url: str
    kind: str
    detail: str
    status_code: Optional[int] = None
    debug_path: Optional[str] = None

    def summary(self) -> str:
        line = f"[{self.kind}] {self.url}: {self.detail}"
        if self.debug_path:
            line += f" (debug body: {self.debug_path})"
        return line


FetchOutcome = Union[PricePoint, FetchFailure]


@dataclass
class RunSummary:
    """What a pipeline run did."""

    workers: int
    submitted: int = 0
    collected: int = 0
    failures: List[FetchFailure] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failures)
