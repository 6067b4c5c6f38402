"""
Domain models of the ledger.

Contains the fundamental entities: Instrument, Transaction, Account, Portfolio.
"""

from src.core.domain.account import Account
from src.core.domain.instrument import Instrument, PricePoint
from src.core.domain.portfolio import (
    PerformancePoint,
    Portfolio,
    ProfitLoss,
    apply_to_holdings,
    replay_holdings,
)
from src.core.domain.transaction import Transaction, TransactionType, new_transaction_id

__all__ = [
    # Instrument
    "Instrument",
    "PricePoint",
    # Transaction
    "Transaction",
    "TransactionType",
    "new_transaction_id",
    # Account
    "Account",
    # Portfolio
    "Portfolio",
    "PerformancePoint",
    "ProfitLoss",
    "apply_to_holdings",
    "replay_holdings",
]
