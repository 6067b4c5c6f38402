"""Executor — account registry and order execution."""

from .order_executor import (
    DEFAULT_INITIAL_BALANCE,
    HoldingRow,
    OrderExecutor,
    OrderResult,
    PortfolioSummary,
    RejectReason,
)

__all__ = [
    "OrderExecutor",
    "OrderResult",
    "RejectReason",
    "PortfolioSummary",
    "HoldingRow",
    "DEFAULT_INITIAL_BALANCE",
]
