"""
PriceSource — current prices and price history of the instrument catalog

- get_price / get_instrument: case-insensitive lookup, NotFoundError if unknown
- list_instruments: quotes ordered by symbol with % change since listing
- update_all: bounded multiplicative random walk, one step per instrument
- set_price: explicit override

Randomness comes from an injected random.Random-compatible object so that
a seeded source reproduces the same walk. History appends for a single
instrument are serialized by a per-instrument lock; different instruments
do not contend.
"""

import logging
import random
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from src.core.domain.instrument import Instrument, PricePoint
from src.core.errors import NotFoundError, ValidationError
from src.core.math.money import MIN_PRICE, Number, apply_step, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_STEP_PCT = 0.05


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


@dataclass(frozen=True)
class InstrumentQuote:
    """Row of list_instruments."""

    symbol: str
    name: str
    price: Decimal
    change_percent: Decimal


class PriceSource:
    """Holds the instrument catalog and moves its prices."""

    def __init__(
        self,
        catalog: Iterable[tuple[str, str, Number]] = (),
        rng: Optional[RandomSource] = None,
        step_pct: float = DEFAULT_STEP_PCT,
        min_price: Number = MIN_PRICE,
    ):
        """
        Args:
            catalog: (symbol, name, price) triples, consumed once
            rng: random source with uniform(a, b); defaults to random.Random()
            step_pct: bound of a random step, 0.05 = [-5%, +5%]
            min_price: floor applied after every random step
        """
        if not 0 < step_pct < 1:
            raise ValidationError(f"step_pct must be in (0, 1), got {step_pct}")
        self._rng = rng if rng is not None else random.Random()
        self._step_pct = step_pct
        self._min_price = to_decimal(min_price)
        if self._min_price <= 0:
            raise ValidationError(f"min_price must be positive, got {min_price}")

        self._instruments: dict[str, Instrument] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._catalog_lock = threading.Lock()

        for symbol, name, price in catalog:
            self.add_instrument(symbol, name, price)

    # =========================================================================
    # CATALOG
    # =========================================================================

    def add_instrument(self, symbol: str, name: str, price: Number) -> Instrument:
        """
        List a new instrument.

        Raises:
            ValidationError: Blank or duplicate symbol, non-positive price
        """
        key = _normalize(symbol)
        if not key:
            raise ValidationError("Symbol must not be blank")
        value = _positive_price(price)
        with self._catalog_lock:
            if key in self._instruments:
                raise ValidationError(f"Instrument {key} already listed")
            instrument = Instrument(symbol=key, name=name, price=value)
            self._instruments[key] = instrument
            self._locks[key] = threading.Lock()
        return instrument

    def has_instrument(self, symbol: str) -> bool:
        return _normalize(symbol) in self._instruments

    def get_instrument(self, symbol: str) -> Instrument:
        """
        Raises:
            NotFoundError: If the symbol is not listed
        """
        instrument = self._instruments.get(_normalize(symbol))
        if instrument is None:
            raise NotFoundError(f"Stock {symbol} not found in market")
        return instrument

    def get_price(self, symbol: str) -> Decimal:
        """Current price; NotFoundError if unknown."""
        return self.get_instrument(symbol).price

    def snapshot(self) -> dict[str, Decimal]:
        """Point-in-time symbol -> price map."""
        return {symbol: instrument.price for symbol, instrument in self._instruments.items()}

    def history(self, symbol: str) -> tuple[PricePoint, ...]:
        return self.get_instrument(symbol).history()

    def list_instruments(self) -> list[InstrumentQuote]:
        """All instruments ordered by symbol."""
        return [
            InstrumentQuote(
                symbol=instrument.symbol,
                name=instrument.name,
                price=instrument.price,
                change_percent=instrument.change_percent(),
            )
            for _, instrument in sorted(self._instruments.items())
        ]

    # =========================================================================
    # PRICE UPDATES
    # =========================================================================

    def update_all(self) -> None:
        """
        One random-walk step for every instrument.

        new = max(min_price, price × (1 + u)), u ~ uniform[-step_pct, +step_pct]
        """
        for symbol in sorted(self._instruments):
            step = self._rng.uniform(-self._step_pct, self._step_pct)
            with self._locks[symbol]:
                instrument = self._instruments[symbol]
                old_price = instrument.price
                instrument.record_price(apply_step(old_price, step, self._min_price))
            logger.debug(f"{symbol}: {old_price} -> {instrument.price} (step {step:+.4%})")

    def set_price(self, symbol: str, price: Number) -> PricePoint:
        """
        Override the price of one instrument.

        Raises:
            ValidationError: If price <= 0
            NotFoundError: If the symbol is not listed
        """
        value = _positive_price(price)
        instrument = self.get_instrument(symbol)
        with self._locks[instrument.symbol]:
            point = instrument.record_price(value)
        logger.info(f"Price of {instrument.symbol} set to {value}")
        return point


def _normalize(symbol: str) -> str:
    return symbol.strip().upper()


def _positive_price(price: Number) -> Decimal:
    try:
        value = to_decimal(price)
    except ValueError as e:
        raise ValidationError(str(e)) from None
    if value <= 0:
        raise ValidationError(f"Price must be positive, got {price}")
    return value
