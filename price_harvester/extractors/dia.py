"""Extractor for diaonline.supermercadosdia.com.ar (VTEX storefront)."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ..errors import ExtractionError
from ..models import PricePoint
from .common import (
    first_image,
    get_meta_prop,
    has_meta_prop,
    offer_in_stock,
    price_from_meta,
    product_json_ld,
)

HOST = "diaonline.supermercadosdia.com.ar"
EXTRACTOR_VERSION = 1


def extract(url: str, document: BeautifulSoup, fetched_at: int) -> PricePoint:
    ean = get_meta_prop(document, "product:retailer_item_id")
    if not ean:
        raise ExtractionError(url, "No product:retailer_item_id meta (EAN) found")
    if not has_meta_prop(document, "product:price:amount"):
        raise ExtractionError(url, "No product:price:amount meta found")

    ld = product_json_ld(document)

    return PricePoint(
        product_id=ean,
        fetched_at=fetched_at,
        price_minor_units=price_from_meta(document),
        in_stock=offer_in_stock(ld),
        source_url=url,
        extractor_version=EXTRACTOR_VERSION,
        name=get_meta_prop(document, "og:title") or (ld or {}).get("name"),
        image_url=get_meta_prop(document, "og:image") or first_image((ld or {}).get("image")),
    )
