"""
Money — Decimal primitives for cash and prices

All cash balances, prices and transaction totals are decimal.Decimal.
Floats never enter the ledger: inputs are converted through to_decimal,
which goes via str() so that 175.5 becomes Decimal("175.5") and not the
binary expansion of the float.

INVARIANTS:
1. Random-walk prices are kept to PRICE_QUANTUM, rounded toward the previous
   price, so new / old - 1 stays inside the step interval unless the floor
   lifts the price. Explicit prices are stored as given.
2. quantity × price and cash balances are never rounded; with prices on an
   8-decimal grid this arithmetic is exact.
3. Cents appear only when formatting for display.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal, InvalidOperation
from typing import Final, Union

# =============================================================================
# CONSTANTS
# =============================================================================

ZERO: Final[Decimal] = Decimal("0")
HUNDRED: Final[Decimal] = Decimal("100")

# Grid of random-walk prices
PRICE_QUANTUM: Final[Decimal] = Decimal("0.00000001")

# Floor for any price produced by the random walk
MIN_PRICE: Final[Decimal] = Decimal("0.01")

Number = Union[Decimal, int, float, str]


# =============================================================================
# CONVERSION
# =============================================================================


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number to Decimal without float artefacts.

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal value

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


# =============================================================================
# ARITHMETIC
# =============================================================================


def percent_change(current: Decimal, reference: Decimal) -> Decimal:
    """
    (current - reference) / reference * 100.

    Returns 0 when reference is zero.
    """
    if reference == ZERO:
        return ZERO
    return (current - reference) / reference * HUNDRED


def safe_percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    """
    numerator / denominator * 100 for a positive denominator, else 0.

    Used wherever a zero or negative base has no meaningful percentage
    (P/L against a non-positive cost basis).
    """
    if denominator <= ZERO:
        return ZERO
    return numerator / denominator * HUNDRED


def apply_step(price: Decimal, step_fraction: float, floor: Decimal = MIN_PRICE) -> Decimal:
    """
    Multiplicative price step floored at a minimum positive price.

    new = max(floor, price * (1 + step_fraction))

    The product is cut to PRICE_QUANTUM toward the old price: down when
    rising, up when falling.

    Args:
        price: Current price
        step_fraction: Relative change, e.g. -0.05 for -5%
        floor: Minimum price returned

    Returns:
        New price on the PRICE_QUANTUM grid, never below floor
    """
    step = to_decimal(step_fraction)
    rounding = ROUND_FLOOR if step >= 0 else ROUND_CEILING
    stepped = (price * (Decimal(1) + step)).quantize(PRICE_QUANTUM, rounding=rounding)
    return max(floor, stepped)
