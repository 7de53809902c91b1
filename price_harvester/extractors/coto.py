"""Extractor for www.cotodigital3.com.ar (ATG storefront).

Coto drops the price block entirely for unavailable products, so a missing
price is reported as out of stock rather than as a mismatch.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from ..errors import ExtractionError
from ..models import PricePoint
from .common import clean_text, parse_price_minor_units

HOST = "www.cotodigital3.com.ar"
EXTRACTOR_VERSION = 1

EAN_RE = re.compile(r"EAN\s*:?\s*(\d{8,14})", re.IGNORECASE)


def _ean(document: BeautifulSoup):
    for span in document.select("span.span_codigoplu"):
        m = EAN_RE.search(span.get_text(" ", strip=True))
        if m:
            return m.group(1)
    return None


def extract(url: str, document: BeautifulSoup, fetched_at: int) -> PricePoint:
    ean = _ean(document)
    if not ean:
        raise ExtractionError(url, "No EAN found in span.span_codigoplu")

    price_node = document.select_one(".atg_store_newPrice")
    price = parse_price_minor_units(price_node.get_text(" ", strip=True)) if price_node else None
    unavailable = document.select_one(".product_not_available") is not None

    name_node = document.select_one("h1.product_page")
    img = document.select_one("img.zoomImage1")

    return PricePoint(
        product_id=ean,
        fetched_at=fetched_at,
        price_minor_units=price,
        in_stock=not unavailable and price_node is not None,
        source_url=url,
        extractor_version=EXTRACTOR_VERSION,
        name=clean_text(name_node.get_text(" ", strip=True)) if name_node else None,
        image_url=clean_text(img.get("src")) if img else None,
    )
