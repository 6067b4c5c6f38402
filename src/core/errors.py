"""
Error taxonomy of the ledger core.

- ValidationError — malformed input at the API boundary (non-positive price,
  non-positive amount, duplicate registration). No state change.
- NotFoundError — direct lookup of an unknown account, portfolio or instrument.
- InsufficientFundsError — Account.debit called with more than the balance.
  OrderExecutor pre-checks funds, so seeing this through an order means an
  invariant is broken upstream.

Business-rule rejections of orders are NOT errors: they are returned as
OrderResult(success=False, ...) by the executor.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""


class ValidationError(LedgerError, ValueError):
    """Malformed input (non-positive price/quantity/amount, duplicate id)."""


class NotFoundError(LedgerError, LookupError):
    """Unknown account, portfolio or instrument."""


class InsufficientFundsError(LedgerError):
    """Debit would drive the account balance below zero."""

    def __init__(self, required, available):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
