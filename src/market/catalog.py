"""
Catalog bootstrap — initial (symbol, name, price) triples for the price source

The default catalog lists ten large-cap US stocks. A custom catalog can be
read from a YAML file:

    - symbol: AAPL
      name: Apple Inc.
      price: 175.50
"""

from decimal import Decimal
from pathlib import Path
from typing import Final

import yaml
from pydantic import BaseModel, Field, TypeAdapter

from src.core.errors import ValidationError


class CatalogEntry(BaseModel):
    symbol: str = Field(..., min_length=1)
    name: str
    price: Decimal = Field(..., gt=0)

    model_config = {"frozen": True}

    def as_triple(self) -> tuple[str, str, Decimal]:
        return (self.symbol, self.name, self.price)


DEFAULT_CATALOG: Final[tuple[tuple[str, str, Decimal], ...]] = (
    ("AAPL", "Apple Inc.", Decimal("175.50")),
    ("GOOGL", "Alphabet Inc.", Decimal("142.30")),
    ("MSFT", "Microsoft Corporation", Decimal("378.85")),
    ("AMZN", "Amazon.com Inc.", Decimal("145.20")),
    ("TSLA", "Tesla Inc.", Decimal("248.50")),
    ("META", "Meta Platforms Inc.", Decimal("485.00")),
    ("NVDA", "NVIDIA Corporation", Decimal("875.00")),
    ("JPM", "JPMorgan Chase & Co.", Decimal("180.25")),
    ("V", "Visa Inc.", Decimal("280.75")),
    ("JNJ", "Johnson & Johnson", Decimal("165.40")),
)

_ENTRIES = TypeAdapter(list[CatalogEntry])


def load_catalog(path: str | Path) -> list[tuple[str, str, Decimal]]:
    """
    Read catalog triples from a YAML list.

    Raises:
        ValidationError: If the file is missing, not YAML, or an entry is invalid
    """
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Cannot read catalog {path}: {e}") from e

    try:
        # prices go through str so 175.5 in YAML stays 175.5 and not its float expansion
        entries = _ENTRIES.validate_python(
            [
                {**item, "price": str(item.get("price"))} if isinstance(item, dict) else item
                for item in (raw or [])
            ]
        )
    except ValueError as e:
        raise ValidationError(f"Invalid catalog {path}: {e}") from e

    if not entries:
        raise ValidationError(f"Catalog {path} is empty")
    return [entry.as_triple() for entry in entries]
