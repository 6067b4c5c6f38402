import random
from decimal import Decimal

import pytest

from src.executor.order_executor import OrderExecutor
from src.market.price_source import PriceSource


@pytest.fixture
def price_source() -> PriceSource:
    """Seeded source with AAPL at 175.50 and MSFT at 378.85."""
    return PriceSource(
        [
            ("AAPL", "Apple Inc.", Decimal("175.50")),
            ("MSFT", "Microsoft Corporation", Decimal("378.85")),
        ],
        rng=random.Random(42),
    )


@pytest.fixture
def executor(price_source: PriceSource) -> OrderExecutor:
    """Executor with account 'alice' holding 10000.00 cash."""
    ex = OrderExecutor(price_source)
    ex.register_account("alice", "Alice", Decimal("10000.00"))
    return ex
