"""
Account — cash ledger of one user

Holds the cash balance, the immutable initial balance and the
account-scoped transaction log. Balance changes only through debit and
credit; the executor is the only caller that moves cash for orders.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from src.core.domain.transaction import Transaction
from src.core.errors import InsufficientFundsError, ValidationError
from src.core.math.money import ZERO, Number, to_decimal


class Account(BaseModel):
    """
    User cash account.

    INVARIANT: balance >= 0 after every operation.
    """

    account_id: str = Field(..., min_length=1, description="Unique user id")
    name: str = Field(..., description="Display name")
    balance: Decimal = Field(..., ge=0, description="Cash balance")
    initial_balance: Decimal = Field(..., ge=0, description="Balance at registration")

    _transactions: list[Transaction] = PrivateAttr(default_factory=list)

    model_config = {"validate_assignment": True}

    @field_validator("account_id")
    @classmethod
    def strip_account_id(cls, v: str) -> str:
        account_id = v.strip()
        if not account_id:
            raise ValueError("account_id must not be blank")
        return account_id

    @classmethod
    def open(cls, account_id: str, name: str, initial_balance: Number) -> "Account":
        """New account whose balance starts at initial_balance."""
        amount = to_decimal(initial_balance)
        return cls(account_id=account_id, name=name, balance=amount, initial_balance=amount)

    @classmethod
    def from_history(
        cls,
        account_id: str,
        name: str,
        balance: Number,
        initial_balance: Number,
        transactions: list[Transaction],
    ) -> "Account":
        """Rebuild a stored account together with its transaction log."""
        account = cls(
            account_id=account_id,
            name=name,
            balance=to_decimal(balance),
            initial_balance=to_decimal(initial_balance),
        )
        account._transactions.extend(transactions)
        return account

    # =========================================================================
    # CASH MOVEMENTS
    # =========================================================================

    def debit(self, amount: Number) -> Decimal:
        """
        Withdraw cash.

        Args:
            amount: Positive amount

        Returns:
            New balance

        Raises:
            ValidationError: If amount <= 0
            InsufficientFundsError: If amount exceeds the balance
        """
        value = _positive_amount(amount)
        if value > self.balance:
            raise InsufficientFundsError(required=value, available=self.balance)
        self.balance = self.balance - value
        return self.balance

    def credit(self, amount: Number) -> Decimal:
        """
        Deposit cash.

        Raises:
            ValidationError: If amount <= 0
        """
        value = _positive_amount(amount)
        self.balance = self.balance + value
        return self.balance

    # =========================================================================
    # TRANSACTION LOG
    # =========================================================================

    def append_transaction(self, transaction: Transaction) -> None:
        """Append to the log. No validation: the executor has already checked."""
        self._transactions.append(transaction)

    def transaction_history(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    def total_invested(self) -> Decimal:
        """Net cash committed: BUY totals minus SELL totals."""
        return sum((tx.signed_value() for tx in self._transactions), ZERO)

    def __str__(self) -> str:
        return f"User({self.account_id}, {self.name}, Balance: ${self.balance:.2f})"


def _positive_amount(amount: Number) -> Decimal:
    try:
        value = to_decimal(amount)
    except ValueError as e:
        raise ValidationError(str(e)) from None
    if value <= ZERO:
        raise ValidationError(f"Amount must be positive, got {value}")
    return value
