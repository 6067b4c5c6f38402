"""
Instrument — tradable symbol with current price and price history

The history is append-only and chronological. The first point is the
listing price; change_percent is measured against it.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from src.core.math.money import percent_change


# =============================================================================
# PRICE POINT
# =============================================================================


class PricePoint(BaseModel):
    """A price observed at a point in time."""

    timestamp: datetime = Field(default_factory=datetime.now, description="Observation time")
    price: Decimal = Field(..., gt=0, description="Price per share")

    model_config = {"frozen": True}


# =============================================================================
# INSTRUMENT
# =============================================================================


class Instrument(BaseModel):
    """
    Tradable instrument.

    Mutated only through record_price; never deleted. The symbol is
    normalized to upper case on construction.
    """

    symbol: str = Field(..., min_length=1, description="Ticker symbol (upper case)")
    name: str = Field(..., description="Display name")
    price: Decimal = Field(..., gt=0, description="Current price per share")

    _history: list[PricePoint] = PrivateAttr(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        symbol = v.strip().upper()
        if not symbol:
            raise ValueError("symbol must not be blank")
        return symbol

    def model_post_init(self, __context) -> None:
        if not self._history:
            self._history.append(PricePoint(price=self.price))

    def record_price(self, price: Decimal, timestamp: datetime | None = None) -> PricePoint:
        """
        Set the current price and append it to the history.

        Args:
            price: New price (must be positive, enforced by the model)
            timestamp: Observation time, defaults to now

        Returns:
            The appended PricePoint
        """
        point = PricePoint(price=price, timestamp=timestamp or datetime.now())
        self.price = point.price
        self._history.append(point)
        return point

    def history(self) -> tuple[PricePoint, ...]:
        return tuple(self._history)

    def change_percent(self) -> Decimal:
        """
        Percent change of the current price versus the first historical price.

        Returns:
            0 when the history has fewer than two points
        """
        if len(self._history) < 2:
            return Decimal("0")
        return percent_change(self.price, self._history[0].price)

    def __str__(self) -> str:
        return f"{self.symbol} ({self.name}): ${self.price:.2f}"
