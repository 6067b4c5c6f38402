"""
Invariant tests over randomized order sequences.

After any sequence the executor accepted:
1. balance >= 0
2. every held quantity > 0
3. holdings == replay of the transaction log
4. each transaction's total equals quantity × its execution price
5. cash + cost basis is conserved (balance == initial - Σ signed totals)
"""

import random
from decimal import Decimal

import pytest

from src.core.domain import replay_holdings
from src.executor.order_executor import OrderExecutor
from src.market.catalog import DEFAULT_CATALOG
from src.market.price_source import PriceSource


def run_random_session(seed: int, steps: int = 300) -> OrderExecutor:
    rng = random.Random(seed)
    executor = OrderExecutor(PriceSource(DEFAULT_CATALOG, rng=random.Random(seed)))
    executor.register_account("alice", "Alice", Decimal("25000.00"))
    symbols = [symbol for symbol, _, _ in DEFAULT_CATALOG] + ["ZZZZ"]

    for _ in range(steps):
        action = rng.random()
        symbol = rng.choice(symbols)
        quantity = rng.randint(-2, 40)
        if action < 0.45:
            executor.buy("alice", symbol, quantity)
        elif action < 0.9:
            executor.sell("alice", symbol, quantity)
        else:
            executor.update_market("alice")
    return executor


@pytest.mark.parametrize("seed", [1, 7, 42, 2024, 31337])
def test_invariants_hold_after_random_orders(seed: int) -> None:
    executor = run_random_session(seed)
    account = executor.get_account("alice")
    portfolio = executor.get_portfolio("alice")
    log = portfolio.transaction_history()

    assert account.balance >= 0
    assert all(quantity > 0 for quantity in portfolio.holdings().values())
    assert portfolio.holdings() == replay_holdings(log)
    assert portfolio.verify_consistency()
    assert account.transaction_history() == log
    for tx in log:
        assert tx.total_value == tx.price_per_share * tx.quantity
    assert account.balance == account.initial_balance - sum((tx.signed_value() for tx in log), Decimal("0"))


@pytest.mark.parametrize("seed", [3, 11])
def test_round_trip_law_at_unchanged_price(seed: int) -> None:
    rng = random.Random(seed)
    executor = OrderExecutor(PriceSource(DEFAULT_CATALOG, rng=random.Random(seed)))
    executor.register_account("alice", "Alice", Decimal("100000.00"))

    for _ in range(20):
        symbol, _, _ = rng.choice(DEFAULT_CATALOG)
        quantity = rng.randint(1, 50)
        before = executor.get_account("alice").balance
        held_before = executor.get_portfolio("alice").quantity_of(symbol)
        if executor.buy("alice", symbol, quantity).success:
            assert executor.sell("alice", symbol, quantity).success
        assert executor.get_account("alice").balance == before
        assert executor.get_portfolio("alice").quantity_of(symbol) == held_before
