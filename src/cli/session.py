"""
TradingSession — interactive menu around the executor and the price source

Owns all input parsing and text output. The core is only reached through
OrderExecutor / PriceSource / JsonLedgerStore public methods.
"""

import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Optional, TextIO

from src.cli import render
from src.core.errors import LedgerError
from src.executor.order_executor import OrderExecutor
from src.persistence.json_store import JsonLedgerStore

logger = logging.getLogger(__name__)

MAIN_MENU = """
================================================================================
                                   MAIN MENU
================================================================================

1. View Market Data
2. View Portfolio
3. Buy Stock
4. Sell Stock
5. View Transaction History
6. View Performance History
7. Update Market Prices
8. Switch User
9. Exit"""

LOGIN_MENU = """
================================================================================
                             STOCK TRADING PLATFORM
================================================================================

1. Login
2. Register New User
3. Exit"""


class SessionExit(Exception):
    """Raised to leave the session loop."""


class TradingSession:
    def __init__(
        self,
        executor: OrderExecutor,
        store: JsonLedgerStore,
        max_login_attempts: int = 5,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        self.executor = executor
        self.store = store
        self.max_login_attempts = max_login_attempts
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.current_user: Optional[str] = None

    # =========================================================================
    # I/O HELPERS
    # =========================================================================

    def say(self, text: str = "") -> None:
        self.stdout.write(text + "\n")

    def ask(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise SessionExit()
        return line.strip()

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def load_data(self) -> None:
        loaded = self.store.load_all()
        if loaded.is_empty:
            return
        try:
            self.executor.restore(loaded.accounts, loaded.portfolios)
        except LedgerError as e:
            logger.warning(f"Saved data rejected: {e}. Starting with empty state.")
            return
        self.say("Loaded saved data from previous session.")

    def save_data(self) -> None:
        if self.store.save_all(self.executor.accounts(), self.executor.portfolios()):
            self.say("Data saved successfully.")
        else:
            self.say("Warning: Failed to save data.")

    # =========================================================================
    # LOGIN
    # =========================================================================

    def login_or_register(self) -> bool:
        """
        Bounded retry loop.

        Returns:
            True when a user is logged in, False on exit or after
            max_login_attempts failed attempts
        """
        for _ in range(self.max_login_attempts):
            self.say(LOGIN_MENU)
            choice = self.ask("\nSelect option (1-3): ")

            if choice == "1":
                user_id = self.ask("Enter User ID: ")
                if self.executor.has_account(user_id):
                    self.current_user = user_id
                    self.say(f"\nWelcome back, {self.executor.get_account(user_id).name}!")
                    return True
                self.say(f"User {user_id} not found. Please register first.")

            elif choice == "2":
                if self._register():
                    return True

            elif choice == "3":
                return False

            else:
                self.say("Invalid choice. Please try again.")

        self.say("Too many failed attempts.")
        return False

    def _register(self) -> bool:
        user_id = self.ask("Enter User ID: ")
        if self.executor.has_account(user_id):
            self.say(f"User {user_id} already exists. Please login instead.")
            return False
        name = self.ask("Enter your name: ")
        default = self.executor.default_initial_balance
        balance_text = self.ask(f"Enter initial balance (default {default}): ")
        try:
            balance = Decimal(balance_text) if balance_text else default
        except InvalidOperation:
            self.say("Invalid number format. Please try again.")
            return False
        try:
            account = self.executor.register_account(user_id, name, balance)
        except LedgerError as e:
            self.say(f"Error: {e}")
            return False
        self.current_user = account.account_id
        self.say(f"\nWelcome, {account.name}! Your account has been created with ${account.balance:.2f}.")
        return True

    # =========================================================================
    # MENU ACTIONS
    # =========================================================================

    def show_market(self) -> None:
        self.say(render.render_market(self.executor.price_source.list_instruments()))

    def show_portfolio(self) -> None:
        self.say(render.render_portfolio(self.executor.portfolio_summary(self.current_user)))

    def buy(self) -> None:
        self.show_market()
        symbol = self.ask("\nEnter stock symbol to buy: ").upper()
        quantity = self._ask_quantity()
        if quantity is None:
            return
        result = self.executor.buy(self.current_user, symbol, quantity)
        self.say("\n" + result.message)
        if result.success:
            self.save_data()

    def sell(self) -> None:
        holdings = self.executor.get_portfolio(self.current_user).holdings()
        if not holdings:
            self.say("\nYou have no stocks to sell.")
            return
        self.say(render.render_holdings_brief(holdings, self.executor.price_source.snapshot()))
        symbol = self.ask("\nEnter stock symbol to sell: ").upper()
        quantity = self._ask_quantity()
        if quantity is None:
            return
        result = self.executor.sell(self.current_user, symbol, quantity)
        self.say("\n" + result.message)
        if result.success:
            self.save_data()

    def show_transactions(self) -> None:
        account = self.executor.get_account(self.current_user)
        self.say(render.render_transactions(account.name, account.transaction_history()))

    def show_performance(self) -> None:
        portfolio = self.executor.get_portfolio(self.current_user)
        self.say(render.render_performance(portfolio.performance_history()))

    def update_prices(self) -> None:
        self.say("\nUpdating market prices...")
        self.executor.update_market(self.current_user)
        self.say("Market prices updated!")
        self.show_market()
        if self.current_user is not None:
            self.save_data()

    def _ask_quantity(self) -> Optional[int]:
        text = self.ask("Enter quantity: ")
        try:
            return int(text)
        except ValueError:
            self.say("Invalid number format. Please try again.")
            return None

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def run(self) -> None:
        self.load_data()
        try:
            if not self.login_or_register():
                self._goodbye()
                return

            actions = {
                "1": self.show_market,
                "2": self.show_portfolio,
                "3": self.buy,
                "4": self.sell,
                "5": self.show_transactions,
                "6": self.show_performance,
                "7": self.update_prices,
            }
            while True:
                self.say(MAIN_MENU)
                choice = self.ask("\nSelect option (1-9): ")
                if choice in actions:
                    actions[choice]()
                elif choice == "8":
                    self.save_data()
                    self.current_user = None
                    if not self.login_or_register():
                        self._goodbye()
                        return
                elif choice == "9":
                    self._goodbye()
                    return
                else:
                    self.say("Invalid choice. Please try again.")
        except SessionExit:
            self._goodbye()

    def _goodbye(self) -> None:
        self.save_data()
        self.say("\nThank you for using Stock Trading Platform. Goodbye!")
