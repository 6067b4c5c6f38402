"""
Transaction — immutable record of an executed order

Created exactly once per successful order and never mutated.
total_value is derived from quantity × price_per_share at construction, so
a transaction can never be repriced after the fact.
"""

import time
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class TransactionType(str, Enum):
    """Side of an executed order"""

    BUY = "BUY"
    SELL = "SELL"


# =============================================================================
# TRANSACTION MODEL
# =============================================================================


def new_transaction_id(symbol: str) -> str:
    """Epoch millis + symbol + short random suffix."""
    return f"{int(time.time() * 1000)}_{symbol.upper()}_{uuid.uuid4().hex[:8]}"


class Transaction(BaseModel):
    """
    Executed BUY or SELL.

    Immutable model (frozen=True). total_value is a computed field, so it
    always equals quantity × price_per_share.
    """

    transaction_id: str = Field(default="", description="Unique id")
    transaction_type: TransactionType = Field(..., description="BUY or SELL")
    symbol: str = Field(..., min_length=1, description="Instrument symbol (upper case)")
    quantity: int = Field(..., gt=0, description="Number of shares")
    price_per_share: Decimal = Field(..., gt=0, description="Execution price snapshot")
    account_id: str = Field(..., min_length=1, description="Owning account")
    timestamp: datetime = Field(default_factory=datetime.now, description="Execution time")

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="before")
    @classmethod
    def assign_transaction_id(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("transaction_id") and data.get("symbol"):
            data["transaction_id"] = new_transaction_id(str(data["symbol"]).strip())
        return data

    @computed_field
    @property
    def total_value(self) -> Decimal:
        """quantity × price_per_share, fixed at execution time."""
        return self.price_per_share * self.quantity

    @property
    def is_buy(self) -> bool:
        return self.transaction_type == TransactionType.BUY

    def signed_value(self) -> Decimal:
        """+total_value for BUY, -total_value for SELL."""
        return self.total_value if self.is_buy else -self.total_value

    def __str__(self) -> str:
        return (
            f"{self.transaction_type.value} {self.quantity} shares of {self.symbol} "
            f"@ ${self.price_per_share:.2f} = ${self.total_value:.2f}"
        )
