"""
Portfolio — holdings derived from the transaction log

Holdings map symbol -> share count (> 0). They are never edited directly:
every change goes through apply_transaction, so the map always equals the
replay of the portfolio's log (see replay_holdings).

Valuation and P/L take a price snapshot (symbol -> price) rather than a
live price source, so the numbers refer to a single instant.

Cost basis is the simplified, non-lot-based figure:
    cost_basis = Σ BUY.total_value - Σ SELL.total_value
It is not FIFO/LIFO accounting and can go negative after profitable
round trips.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping

from pydantic import BaseModel, Field, PrivateAttr

from src.core.domain.transaction import Transaction, TransactionType
from src.core.math.money import ZERO, safe_percent

logger = logging.getLogger(__name__)


# =============================================================================
# VALUE OBJECTS
# =============================================================================


class PerformancePoint(BaseModel):
    """Total holdings value at an instant."""

    timestamp: datetime = Field(default_factory=datetime.now, description="Snapshot time")
    value: Decimal = Field(..., ge=0, description="Holdings value")

    model_config = {"frozen": True}


class ProfitLoss(BaseModel):
    """P/L of a portfolio against a price snapshot."""

    cost_basis: Decimal = Field(..., description="Σ BUY totals - Σ SELL totals")
    current_value: Decimal = Field(..., ge=0, description="Holdings valued at the snapshot")
    pnl: Decimal = Field(..., description="current_value - cost_basis")
    pnl_percent: Decimal = Field(..., description="pnl / cost_basis * 100, 0 if cost_basis <= 0")

    model_config = {"frozen": True}


# =============================================================================
# REPLAY RULE
# =============================================================================


def apply_to_holdings(holdings: dict[str, int], transaction: Transaction) -> None:
    """
    Apply one transaction to a holdings map in place.

    BUY adds shares. SELL removes shares and drops the key once the count
    reaches zero or below; no key is ever stored with 0.
    """
    symbol = transaction.symbol
    if transaction.transaction_type == TransactionType.BUY:
        holdings[symbol] = holdings.get(symbol, 0) + transaction.quantity
        return

    remaining = holdings.get(symbol, 0) - transaction.quantity
    if remaining < 0:
        logger.warning(
            f"SELL {transaction.transaction_id} exceeds holdings of {symbol} "
            f"by {-remaining} shares; position floored at zero"
        )
    if remaining <= 0:
        holdings.pop(symbol, None)
    else:
        holdings[symbol] = remaining


def replay_holdings(transactions: Iterable[Transaction]) -> dict[str, int]:
    """Fold a transaction log into holdings, in order."""
    holdings: dict[str, int] = {}
    for transaction in transactions:
        apply_to_holdings(holdings, transaction)
    return holdings


# =============================================================================
# PORTFOLIO
# =============================================================================


class Portfolio(BaseModel):
    """
    Holdings and history of one account.

    The transaction log and the performance history are append-only.
    """

    account_id: str = Field(..., min_length=1, description="Owning account")

    _holdings: dict[str, int] = PrivateAttr(default_factory=dict)
    _transactions: list[Transaction] = PrivateAttr(default_factory=list)
    _performance: list[PerformancePoint] = PrivateAttr(default_factory=list)

    @classmethod
    def from_history(
        cls,
        account_id: str,
        transactions: Iterable[Transaction],
        performance: Iterable[PerformancePoint] = (),
    ) -> "Portfolio":
        """Rebuild a portfolio by replaying a stored log."""
        portfolio = cls(account_id=account_id)
        for transaction in transactions:
            portfolio.apply_transaction(transaction)
        portfolio._performance.extend(performance)
        return portfolio

    # =========================================================================
    # HOLDINGS
    # =========================================================================

    def quantity_of(self, symbol: str) -> int:
        """Shares held, 0 if none."""
        return self._holdings.get(symbol.strip().upper(), 0)

    def holdings(self) -> dict[str, int]:
        return dict(self._holdings)

    def apply_transaction(self, transaction: Transaction) -> None:
        """Append to the log and update holdings by the replay rule."""
        self._transactions.append(transaction)
        apply_to_holdings(self._holdings, transaction)

    def transaction_history(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    def verify_consistency(self) -> bool:
        """True if holdings equal the replay of the transaction log."""
        return self._holdings == replay_holdings(self._transactions)

    # =========================================================================
    # VALUATION
    # =========================================================================

    def valuation(self, prices: Mapping[str, Decimal]) -> Decimal:
        """
        Σ quantity × price over holdings.

        Symbols missing from the snapshot contribute 0 and are logged; a
        gap in price data is not a reason to fail a valuation.
        """
        total = ZERO
        for symbol, quantity in self._holdings.items():
            price = prices.get(symbol)
            if price is None:
                logger.warning(f"No price for {symbol} in snapshot; valued at 0")
                continue
            total += price * quantity
        return total

    def cost_basis(self) -> Decimal:
        return sum((tx.signed_value() for tx in self._transactions), ZERO)

    def profit_loss(self, prices: Mapping[str, Decimal]) -> ProfitLoss:
        """
        P/L against a price snapshot.

        Returns:
            ProfitLoss; an empty portfolio yields all zeros
        """
        cost_basis = self.cost_basis()
        current_value = self.valuation(prices)
        pnl = current_value - cost_basis
        return ProfitLoss(
            cost_basis=cost_basis,
            current_value=current_value,
            pnl=pnl,
            pnl_percent=safe_percent(pnl, cost_basis),
        )

    # =========================================================================
    # PERFORMANCE HISTORY
    # =========================================================================

    def record_snapshot(self, prices: Mapping[str, Decimal]) -> PerformancePoint:
        """Append (now, valuation) to the performance history."""
        point = PerformancePoint(value=self.valuation(prices))
        self._performance.append(point)
        return point

    def performance_history(self) -> tuple[PerformancePoint, ...]:
        return tuple(self._performance)

    def __str__(self) -> str:
        positions = ", ".join(f"{s}:{q}" for s, q in self._holdings.items())
        return f"Portfolio(account_id={self.account_id}, holdings={positions})"
