"""Market — price source and instrument catalog."""

from .catalog import DEFAULT_CATALOG, CatalogEntry, load_catalog
from .price_source import InstrumentQuote, PriceSource

__all__ = [
    "PriceSource",
    "InstrumentQuote",
    "CatalogEntry",
    "DEFAULT_CATALOG",
    "load_catalog",
]
