"""Extractor for www.carrefour.com.ar (VTEX IO storefront)."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ..errors import ExtractionError
from ..models import PricePoint
from .common import (
    clean_text,
    first_image,
    get_meta_prop,
    has_meta_prop,
    price_from_meta,
    product_json_ld,
)

HOST = "www.carrefour.com.ar"
EXTRACTOR_VERSION = 1


def _availability(document: BeautifulSoup):
    value = get_meta_prop(document, "product:availability")
    if value is None:
        return None
    return value.lower() in ("instock", "in stock")


def extract(url: str, document: BeautifulSoup, fetched_at: int) -> PricePoint:
    ld = product_json_ld(document)
    if ld is None:
        raise ExtractionError(url, "No Product JSON-LD found")

    gtin = ld.get("gtin13") or ld.get("gtin")
    ean = clean_text(str(gtin)) if gtin is not None else None
    if not ean:
        raise ExtractionError(url, "Product JSON-LD has no gtin13/gtin")
    if not has_meta_prop(document, "product:price:amount"):
        raise ExtractionError(url, "No product:price:amount meta found")

    return PricePoint(
        product_id=ean,
        fetched_at=fetched_at,
        price_minor_units=price_from_meta(document),
        in_stock=_availability(document),
        source_url=url,
        extractor_version=EXTRACTOR_VERSION,
        name=clean_text(ld.get("name")),
        image_url=first_image(ld.get("image")),
    )
