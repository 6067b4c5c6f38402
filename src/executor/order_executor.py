"""OrderExecutor — validates and executes BUY/SELL orders.

Order of checks (both sides):
1. Account and portfolio resolved by id → NotFoundError if missing (fault)
2. Instrument known to the price source → else failure result
3. quantity > 0 → else failure result
4. BUY: balance >= price × quantity / SELL: held shares >= quantity
   → else failure result
5. Transaction built with the current price snapshot
6. Account cash, account log, portfolio holdings and portfolio log updated
   as one unit under the executor lock
7. Success result with the transaction

Business-rule rejections are OrderResult(success=False), never exceptions.
A single re-entrant lock guards the registries and every compound mutation,
so no reader sees cash moved without the matching holdings change.
"""

import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional

from src.core.domain.account import Account
from src.core.domain.portfolio import PerformancePoint, Portfolio, ProfitLoss
from src.core.domain.transaction import Transaction, TransactionType
from src.core.errors import InsufficientFundsError, NotFoundError, ValidationError
from src.core.math.money import ZERO, Number, safe_percent, to_decimal
from src.market.price_source import PriceSource

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_BALANCE = Decimal("10000.00")


# =============================================================================
# RESULTS
# =============================================================================


class RejectReason:
    """Machine-readable rejection codes of OrderResult.reason."""

    UNKNOWN_INSTRUMENT = "unknown_instrument"
    INVALID_QUANTITY = "invalid_quantity"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_SHARES = "insufficient_shares"


@dataclass(frozen=True)
class OrderResult:
    """Outcome of buy/sell."""

    success: bool
    message: str
    transaction: Optional[Transaction] = None
    reason: str = ""

    @classmethod
    def rejected(cls, reason: str, message: str) -> "OrderResult":
        return cls(success=False, message=message, transaction=None, reason=reason)


@dataclass(frozen=True)
class HoldingRow:
    symbol: str
    quantity: int
    price: Decimal
    value: Decimal


@dataclass(frozen=True)
class PortfolioSummary:
    """Structured portfolio view for the presentation layer."""

    account_id: str
    name: str
    balance: Decimal
    initial_balance: Decimal
    holdings: list[HoldingRow] = field(default_factory=list)
    holdings_value: Decimal = ZERO
    profit_loss: Optional[ProfitLoss] = None
    total_value: Decimal = ZERO
    overall_return: Decimal = ZERO
    overall_return_percent: Decimal = ZERO


# =============================================================================
# EXECUTOR
# =============================================================================


class OrderExecutor:
    """Account registry plus the buy/sell engine."""

    def __init__(
        self,
        price_source: PriceSource,
        default_initial_balance: Number = DEFAULT_INITIAL_BALANCE,
    ):
        self.price_source = price_source
        self.default_initial_balance = to_decimal(default_initial_balance)
        self._accounts: dict[str, Account] = {}
        self._portfolios: dict[str, Portfolio] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # REGISTRY
    # =========================================================================

    def register_account(
        self, account_id: str, name: str, initial_balance: Optional[Number] = None
    ) -> Account:
        """
        Create an account and its portfolio together.

        Raises:
            ValidationError: Blank id, duplicate id, or negative balance
        """
        key = account_id.strip()
        if not key:
            raise ValidationError("Account id must not be blank")
        balance = self.default_initial_balance if initial_balance is None else initial_balance
        try:
            balance = to_decimal(balance)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        if balance < ZERO:
            raise ValidationError(f"Initial balance must not be negative, got {balance}")

        with self._lock:
            if key in self._accounts:
                raise ValidationError(f"User {key} already exists")
            account = Account.open(key, name.strip(), balance)
            self._accounts[key] = account
            self._portfolios[key] = Portfolio(account_id=key)
        logger.info(f"Registered account {key} with balance {balance}")
        return account

    def has_account(self, account_id: str) -> bool:
        return account_id.strip() in self._accounts

    def get_account(self, account_id: str) -> Account:
        account = self._accounts.get(account_id.strip())
        if account is None:
            raise NotFoundError(f"User {account_id} not found")
        return account

    def get_portfolio(self, account_id: str) -> Portfolio:
        portfolio = self._portfolios.get(account_id.strip())
        if portfolio is None:
            raise NotFoundError(f"Portfolio for user {account_id} not found")
        return portfolio

    def accounts(self) -> dict[str, Account]:
        with self._lock:
            return dict(self._accounts)

    def portfolios(self) -> dict[str, Portfolio]:
        with self._lock:
            return dict(self._portfolios)

    def restore(
        self, accounts: Mapping[str, Account], portfolios: Mapping[str, Portfolio]
    ) -> None:
        """
        Replace both registries with loaded state.

        Each pair must tell one story: the account and portfolio logs are
        identical, holdings equal the replay of that log, and the balance
        equals the initial balance minus the net cash the log committed.

        Raises:
            ValidationError: Accounts and portfolios do not pair up, or any
                pair fails the checks above
        """
        if set(accounts) != set(portfolios):
            missing = sorted(set(accounts) ^ set(portfolios))
            raise ValidationError(f"Accounts and portfolios do not match: {missing}")
        for account_id, account in accounts.items():
            portfolio = portfolios[account_id]
            if account.transaction_history() != portfolio.transaction_history():
                raise ValidationError(f"Account and portfolio logs of {account_id} differ")
            if not portfolio.verify_consistency():
                raise ValidationError(f"Holdings of {account_id} differ from its transaction log")
            if account.balance != account.initial_balance - account.total_invested():
                raise ValidationError(
                    f"Balance of {account_id} ({account.balance}) does not match its transaction log"
                )

        with self._lock:
            self._accounts = dict(accounts)
            self._portfolios = dict(portfolios)
        logger.info(f"Restored {len(accounts)} accounts")

    # =========================================================================
    # ORDERS
    # =========================================================================

    def buy(self, account_id: str, symbol: str, quantity: int) -> OrderResult:
        return self._execute(TransactionType.BUY, account_id, symbol, quantity)

    def sell(self, account_id: str, symbol: str, quantity: int) -> OrderResult:
        return self._execute(TransactionType.SELL, account_id, symbol, quantity)

    def _execute(
        self, side: TransactionType, account_id: str, symbol: str, quantity: int
    ) -> OrderResult:
        with self._lock:
            # 1. Account + portfolio (fault if missing)
            account = self.get_account(account_id)
            portfolio = self.get_portfolio(account_id)

            # 2. Instrument
            if not self.price_source.has_instrument(symbol):
                return self._reject(
                    account.account_id,
                    RejectReason.UNKNOWN_INSTRUMENT,
                    f"Stock {symbol} not found in market",
                )
            instrument = self.price_source.get_instrument(symbol)

            # 3. Quantity
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                return self._reject(
                    account.account_id, RejectReason.INVALID_QUANTITY, "Quantity must be positive"
                )

            # 4. Funds / shares
            price = instrument.price
            total = price * quantity
            if side == TransactionType.BUY:
                if account.balance < total:
                    return self._reject(
                        account.account_id,
                        RejectReason.INSUFFICIENT_FUNDS,
                        f"Insufficient funds. Need ${total:.2f}, have ${account.balance:.2f}",
                    )
            else:
                owned = portfolio.quantity_of(instrument.symbol)
                if owned < quantity:
                    return self._reject(
                        account.account_id,
                        RejectReason.INSUFFICIENT_SHARES,
                        f"Insufficient shares. Have {owned}, trying to sell {quantity}",
                    )

            # 5. Transaction at the snapshot price
            transaction = Transaction(
                transaction_type=side,
                symbol=instrument.symbol,
                quantity=quantity,
                price_per_share=price,
                account_id=account.account_id,
            )

            # 6. Cash first: if it raises nothing else has been touched
            try:
                if side == TransactionType.BUY:
                    account.debit(total)
                else:
                    account.credit(total)
            except InsufficientFundsError:
                logger.error(
                    f"Debit of {total} failed for {account.account_id} after funds pre-check; "
                    f"ledger invariant broken"
                )
                raise
            account.append_transaction(transaction)
            portfolio.apply_transaction(transaction)

        verb = "bought" if side == TransactionType.BUY else "sold"
        logger.info(
            f"{account.account_id} {verb} {quantity} {instrument.symbol} @ {price} "
            f"(tx {transaction.transaction_id})"
        )
        # 7. Success
        return OrderResult(
            success=True,
            message=f"Successfully {verb} {quantity} shares of {instrument.symbol} @ ${price:.2f}",
            transaction=transaction,
        )

    @staticmethod
    def _reject(account_id: str, reason: str, message: str) -> OrderResult:
        logger.info(f"Order rejected for {account_id}: {reason} ({message})")
        return OrderResult.rejected(reason, message)

    # =========================================================================
    # VALUATION
    # =========================================================================

    def record_performance(self, account_id: str) -> PerformancePoint:
        """Snapshot the account's holdings value at current prices."""
        with self._lock:
            portfolio = self.get_portfolio(account_id)
            return portfolio.record_snapshot(self.price_source.snapshot())

    def update_market(self, account_id: Optional[str] = None) -> Optional[PerformancePoint]:
        """Move all prices one step; record performance for account_id if given."""
        self.price_source.update_all()
        if account_id is None:
            return None
        return self.record_performance(account_id)

    def portfolio_summary(self, account_id: str) -> PortfolioSummary:
        with self._lock:
            account = self.get_account(account_id)
            portfolio = self.get_portfolio(account_id)
            prices = self.price_source.snapshot()

            rows = []
            for symbol, quantity in sorted(portfolio.holdings().items()):
                price = prices.get(symbol, ZERO)
                rows.append(HoldingRow(symbol=symbol, quantity=quantity, price=price, value=price * quantity))

            holdings_value = portfolio.valuation(prices)
            total_value = account.balance + holdings_value
            overall_return = total_value - account.initial_balance
            return PortfolioSummary(
                account_id=account.account_id,
                name=account.name,
                balance=account.balance,
                initial_balance=account.initial_balance,
                holdings=rows,
                holdings_value=holdings_value,
                profit_loss=portfolio.profit_loss(prices),
                total_value=total_value,
                overall_return=overall_return,
                overall_return_percent=safe_percent(overall_return, account.initial_balance),
            )
