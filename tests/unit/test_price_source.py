"""
Tests for PriceSource

Checks:
1. Case-insensitive lookup and NotFoundError
2. list_instruments ordering and % change
3. update_all bounds, history growth, determinism with a seeded RNG
4. set_price override and its validation
"""

import random
from decimal import Decimal

import pytest

from src.core.errors import NotFoundError, ValidationError
from src.market.catalog import DEFAULT_CATALOG
from src.market.price_source import PriceSource


class FixedRandom:
    """uniform() always returns the given edge of the interval."""

    def __init__(self, edge: str):
        self.edge = edge

    def uniform(self, a: float, b: float) -> float:
        return a if self.edge == "low" else b


# =============================================================================
# LOOKUP
# =============================================================================


class TestLookup:
    def test_get_price_case_insensitive(self, price_source: PriceSource) -> None:
        assert price_source.get_price("aapl") == Decimal("175.50")
        assert price_source.get_price(" AAPL ") == Decimal("175.50")

    def test_unknown_symbol(self, price_source: PriceSource) -> None:
        with pytest.raises(NotFoundError):
            price_source.get_price("ZZZZ")

    def test_has_instrument(self, price_source: PriceSource) -> None:
        assert price_source.has_instrument("msft")
        assert not price_source.has_instrument("ZZZZ")

    def test_duplicate_instrument_rejected(self, price_source: PriceSource) -> None:
        with pytest.raises(ValidationError):
            price_source.add_instrument("aapl", "Apple again", Decimal("1.00"))

    def test_non_positive_listing_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PriceSource([("BAD", "Bad Corp", Decimal("0"))])

    def test_default_catalog_loads(self) -> None:
        source = PriceSource(DEFAULT_CATALOG)
        assert len(source.list_instruments()) == 10
        assert source.get_price("NVDA") == Decimal("875.00")

    def test_snapshot_is_point_in_time(self, price_source: PriceSource) -> None:
        snapshot = price_source.snapshot()
        price_source.set_price("AAPL", Decimal("200.00"))
        assert snapshot["AAPL"] == Decimal("175.50")


# =============================================================================
# LISTING
# =============================================================================


class TestListInstruments:
    def test_sorted_by_symbol(self) -> None:
        source = PriceSource(
            [("MSFT", "Microsoft", Decimal("1")), ("AAPL", "Apple", Decimal("1")), ("JNJ", "J&J", Decimal("1"))]
        )
        assert [q.symbol for q in source.list_instruments()] == ["AAPL", "JNJ", "MSFT"]

    def test_change_percent_zero_before_any_update(self, price_source: PriceSource) -> None:
        assert all(q.change_percent == 0 for q in price_source.list_instruments())

    def test_change_percent_after_override(self, price_source: PriceSource) -> None:
        price_source.add_instrument("TEST", "Test Corp", Decimal("100.00"))
        price_source.set_price("TEST", Decimal("90.00"))
        quote = next(q for q in price_source.list_instruments() if q.symbol == "TEST")
        assert quote.price == Decimal("90.00")
        assert quote.change_percent == Decimal("-10")


# =============================================================================
# RANDOM WALK
# =============================================================================


class TestUpdateAll:
    def test_step_within_five_percent(self) -> None:
        source = PriceSource([("TEST", "Test Corp", Decimal("100.00"))], rng=random.Random(7))
        for _ in range(200):
            before = source.get_price("TEST")
            source.update_all()
            after = source.get_price("TEST")
            assert before * Decimal("0.95") <= after <= before * Decimal("1.05")

    def test_single_step_from_100(self) -> None:
        source = PriceSource([("TEST", "Test Corp", Decimal("100.00"))], rng=random.Random(1))
        source.update_all()
        assert Decimal("95.00") <= source.get_price("TEST") <= Decimal("105.00")
        assert len(source.history("TEST")) == 2

    @pytest.mark.parametrize("edge, expected", [("low", Decimal("95.00")), ("high", Decimal("105.00"))])
    def test_interval_edges(self, edge: str, expected: Decimal) -> None:
        source = PriceSource([("TEST", "Test Corp", Decimal("100.00"))], rng=FixedRandom(edge))
        source.update_all()
        assert source.get_price("TEST") == expected

    @pytest.mark.parametrize("edge, expected", [("low", Decimal("0.095")), ("high", Decimal("0.105"))])
    def test_low_price_step_stays_in_interval(self, edge: str, expected: Decimal) -> None:
        source = PriceSource([("PENNY", "Penny Corp", Decimal("0.10"))], rng=FixedRandom(edge))
        source.update_all()
        assert source.get_price("PENNY") == expected

    def test_price_can_rise_from_floor(self) -> None:
        source = PriceSource([("PENNY", "Penny Corp", Decimal("0.01"))], rng=FixedRandom("high"))
        for _ in range(20):
            before = source.get_price("PENNY")
            source.update_all()
            after = source.get_price("PENNY")
            assert before < after <= before * Decimal("1.05")
        assert source.get_price("PENNY") > Decimal("0.026")

    def test_floor_at_min_price(self) -> None:
        source = PriceSource([("PENNY", "Penny Corp", Decimal("0.01"))], rng=FixedRandom("low"))
        source.update_all()
        assert source.get_price("PENNY") == Decimal("0.01")

    def test_every_instrument_gets_one_point(self, price_source: PriceSource) -> None:
        price_source.update_all()
        price_source.update_all()
        assert len(price_source.history("AAPL")) == 3
        assert len(price_source.history("MSFT")) == 3

    def test_deterministic_with_seed(self) -> None:
        a = PriceSource(DEFAULT_CATALOG, rng=random.Random(123))
        b = PriceSource(DEFAULT_CATALOG, rng=random.Random(123))
        for _ in range(5):
            a.update_all()
            b.update_all()
        assert a.snapshot() == b.snapshot()

    def test_invalid_step_pct(self) -> None:
        with pytest.raises(ValidationError):
            PriceSource([], step_pct=1.5)


# =============================================================================
# OVERRIDE
# =============================================================================


class TestSetPrice:
    def test_override_appends_history(self, price_source: PriceSource) -> None:
        price_source.set_price("aapl", Decimal("180.00"))
        assert price_source.get_price("AAPL") == Decimal("180.00")
        assert [p.price for p in price_source.history("AAPL")] == [Decimal("175.50"), Decimal("180.00")]

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-1"), Decimal("-0.001"), "abc"])
    def test_invalid_price_rejected(self, price_source: PriceSource, price) -> None:
        with pytest.raises(ValidationError):
            price_source.set_price("AAPL", price)
        assert len(price_source.history("AAPL")) == 1

    @pytest.mark.parametrize("price", [Decimal("0.004"), Decimal("123.456")])
    def test_positive_price_stored_as_given(self, price_source: PriceSource, price: Decimal) -> None:
        price_source.set_price("AAPL", price)
        assert price_source.get_price("AAPL") == price

    def test_unknown_symbol(self, price_source: PriceSource) -> None:
        with pytest.raises(NotFoundError):
            price_source.set_price("ZZZZ", Decimal("1.00"))
