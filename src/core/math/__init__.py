"""
Core math modules

Decimal money primitives shared by the ledger, the price source and the executor.
"""

from src.core.math.money import (
    HUNDRED,
    MIN_PRICE,
    PRICE_QUANTUM,
    ZERO,
    Number,
    apply_step,
    percent_change,
    safe_percent,
    to_decimal,
)

__all__ = [
    # Constants
    "HUNDRED",
    "MIN_PRICE",
    "PRICE_QUANTUM",
    "ZERO",
    "Number",
    # Conversion
    "to_decimal",
    # Arithmetic
    "percent_change",
    "safe_percent",
    "apply_step",
]
