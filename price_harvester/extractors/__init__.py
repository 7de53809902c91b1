"""Site extractors and the hostname registry that dispatches to them."""

from . import carrefour, coto, dia
from .registry import Extractor, ExtractorRegistry, url_host

SITES = (carrefour, coto, dia)


def default_registry() -> ExtractorRegistry:
    """Return a registry with every bundled site extractor registered."""
    registry = ExtractorRegistry()
    for site in SITES:
        registry.register(site.HOST, site.extract)
    return registry


__all__ = [
    "Extractor",
    "ExtractorRegistry",
    "SITES",
    "default_registry",
    "url_host",
]
