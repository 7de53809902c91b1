"""Shared test fixtures for price harvester tests."""

from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from price_harvester.config import Settings
from price_harvester.models import PricePoint
from price_harvester.retry import RetryPolicy

DIA_URL = "https://diaonline.supermercadosdia.com.ar/gaseosa-cola-2-25-l-12345/p"
CARREFOUR_URL = "https://www.carrefour.com.ar/gaseosa-cola-2-25-l/p"
COTO_URL = "https://www.cotodigital3.com.ar/sitios/cdigi/producto/-gaseosa-cola-2-25-l/_/R-00012345-00012345-200"


@pytest.fixture
def dia_html() -> str:
    """Dia product page with EAN, price, and JSON-LD stock state."""
    return f"""
    <html><head>
    <link rel="canonical" href="{DIA_URL}">
    <meta property="product:retailer_item_id" content="7790895000997">
    <meta property="product:price:amount" content="1234.5">
    <meta property="og:title" content="Gaseosa Cola 2.25 L">
    <meta property="og:image" content="https://diaonline.example/img/cola.jpg">
    <script type="application/ld+json">
    {{"@context": "https://schema.org", "@type": "Product", "name": "Gaseosa Cola",
      "offers": {{"@type": "AggregateOffer",
                  "offers": [{{"@type": "Offer", "availability": "http://schema.org/InStock"}}]}}}}
    </script>
    </head><body><h1>Gaseosa Cola 2.25 L</h1></body></html>
    """


@pytest.fixture
def dia_no_price_html() -> str:
    """Dia page whose price meta is missing."""
    return f"""
    <html><head>
    <link rel="canonical" href="{DIA_URL}">
    <meta property="product:retailer_item_id" content="7790895000997">
    </head><body><h1>Gaseosa Cola 2.25 L</h1></body></html>
    """


@pytest.fixture
def carrefour_html() -> str:
    return f"""
    <html><head>
    <link rel="canonical" href="{CARREFOUR_URL}">
    <meta property="product:price:amount" content="999.99">
    <meta property="product:availability" content="outofstock">
    <script type="application/ld+json">
    {{"@context": "https://schema.org", "@graph": [
      {{"@type": "BreadcrumbList", "itemListElement": []}},
      {{"@type": "Product", "name": "Gaseosa  Cola 2.25 L", "gtin13": "7790895000997",
        "image": ["https://carrefour.example/cola.jpg"]}}
    ]}}
    </script>
    </head><body></body></html>
    """


@pytest.fixture
def coto_html() -> str:
    return f"""
    <html><head><link rel="canonical" href="{COTO_URL}"></head>
    <body>
    <h1 class="product_page">Gaseosa Cola   2.25 L</h1>
    <img class="zoomImage1" src="https://coto.example/cola.jpg">
    <span class="atg_store_newPrice">$ 1.234,56</span>
    <span class="span_codigoplu">PLU: 00012345</span>
    <span class="span_codigoplu">EAN: 7790895000997</span>
    </body></html>
    """


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(debug_dir=tmp_path / "debug", concurrency=4)


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def policy(sleeps: List[float]) -> RetryPolicy:
    """Fast retry policy that records its backoff delays instead of sleeping."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return RetryPolicy(max_attempts=3, base_delay=0.3, jitter=False, sleep=_sleep)


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Factory for an AsyncClient backed by a request handler."""

    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


class MemorySink:
    """Keep records in a list."""

    def __init__(self) -> None:
        self.points: List[PricePoint] = []
        self.closed = False

    def write(self, point: PricePoint) -> None:
        self.points.append(point)

    def close(self) -> None:
        self.closed = True


def debug_files(settings: Settings) -> List[Path]:
    if not settings.debug_dir.exists():
        return []
    return sorted(settings.debug_dir.iterdir())
