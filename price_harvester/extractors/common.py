"""Helpers shared by the site extractors."""

from __future__ import annotations

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

IN_STOCK_SUFFIX = "/InStock"
PRICE_CHARS_RE = re.compile(r"[^0-9.,]")


def clean_text(text: Optional[str]) -> Optional[str]:
    """Collapse whitespace; return None for empty strings."""
    if text is None:
        return None
    cleaned = " ".join(text.split())
    return cleaned or None


def get_meta_prop(document: BeautifulSoup, prop: str) -> Optional[str]:
    """Return the ``content`` of ``<meta property=prop>``, or None."""
    tag = document.find("meta", attrs={"property": prop})
    if tag is None:
        return None
    return clean_text(tag.get("content"))


def has_meta_prop(document: BeautifulSoup, prop: str) -> bool:
    return document.find("meta", attrs={"property": prop}) is not None


def parse_price_minor_units(text: Optional[str]) -> Optional[int]:
    """Parse a price string into cents.

    Handles both ``1234.56`` (meta tags) and ``$ 1.234,56`` (storefront
    text). When both separators appear the last one is the decimal mark.
    A lone separator followed by exactly three digits is a thousands mark.
    Returns None when nothing usable is left.
    """
    if not text:
        return None
    raw = PRICE_CHARS_RE.sub("", text)
    if not raw:
        return None

    if "." in raw and "," in raw:
        decimal_mark = "." if raw.rfind(".") > raw.rfind(",") else ","
    elif "," in raw or "." in raw:
        sep = "," if "," in raw else "."
        head, _, tail = raw.rpartition(sep)
        decimal_mark = None if (len(tail) == 3 and head) else sep
    else:
        decimal_mark = None

    thousands = {".", ","} - {decimal_mark}
    for t in thousands:
        raw = raw.replace(t, "")
    if decimal_mark:
        raw = raw.replace(decimal_mark, ".")

    try:
        value = Decimal(raw)
    except InvalidOperation:
        return None
    return int((value * 100).to_integral_value())


def price_from_meta(document: BeautifulSoup) -> Optional[int]:
    return parse_price_minor_units(get_meta_prop(document, "product:price:amount"))


def _iter_ld_nodes(data: Any) -> Iterable[Dict[str, Any]]:
    if isinstance(data, list):
        for item in data:
            yield from _iter_ld_nodes(item)
    elif isinstance(data, dict):
        yield data
        if "@graph" in data:
            yield from _iter_ld_nodes(data["@graph"])


def product_json_ld(document: BeautifulSoup) -> Optional[Dict[str, Any]]:
    """Return the first JSON-LD node typed ``Product``, or None."""
    for script in document.find_all("script", attrs={"type": "application/ld+json"}):
        payload = script.string or script.get_text()
        if not payload or not payload.strip():
            continue
        try:
            data = json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON-LD block")
            continue
        for node in _iter_ld_nodes(data):
            node_type = node.get("@type")
            types = node_type if isinstance(node_type, list) else [node_type]
            if "Product" in types:
                return node
    return None


def offer_in_stock(ld: Optional[Dict[str, Any]]) -> Optional[bool]:
    """Stock state from a JSON-LD Product's offers, or None if not stated."""
    if not ld:
        return None
    offers = ld.get("offers")
    # AggregateOffer nests the actual offers one level down.
    if isinstance(offers, dict) and "offers" in offers:
        offers = offers["offers"]
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    if not isinstance(offers, dict):
        return None
    availability = offers.get("availability")
    if not availability:
        return None
    return str(availability).endswith(IN_STOCK_SUFFIX)


def first_image(value: Any) -> Optional[str]:
    """JSON-LD ``image`` may be a string, a list, or an ImageObject."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("url")
    return clean_text(value) if isinstance(value, str) else None
