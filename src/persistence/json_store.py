"""
JsonLedgerStore — versioned JSON files for accounts and portfolios

Layout of data_dir:
    accounts.json    {"schema_version": "1", "saved_at": ..., "accounts": {id: {...}}}
    portfolios.json  {"schema_version": "1", "saved_at": ..., "portfolios": {id: {...}}}

Decimals are written as plain strings, timestamps as ISO-8601. Holdings are
not stored: they are rebuilt by replaying each portfolio's transaction log.
Both documents are checked against contracts/schema/*.json on save and load.

Failures never propagate: a load problem yields an empty mapping (cold
start), a save problem returns False. Both are logged.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from jsonschema import ValidationError as SchemaValidationError

from src.core.contracts.validators import DocumentValidator
from src.core.domain.account import Account
from src.core.domain.portfolio import PerformancePoint, Portfolio
from src.core.domain.transaction import Transaction

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"
ACCOUNTS_FILE = "accounts.json"
PORTFOLIOS_FILE = "portfolios.json"


@dataclass
class LoadResult:
    accounts: Dict[str, Account] = field(default_factory=dict)
    portfolios: Dict[str, Portfolio] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.accounts and not self.portfolios


# =============================================================================
# ENCODING
# =============================================================================


def _dec(value: Decimal) -> str:
    return format(value, "f")


def encode_transaction(tx: Transaction) -> Dict[str, Any]:
    return {
        "transaction_id": tx.transaction_id,
        "transaction_type": tx.transaction_type.value,
        "symbol": tx.symbol,
        "quantity": tx.quantity,
        "price_per_share": _dec(tx.price_per_share),
        "total_value": _dec(tx.total_value),
        "account_id": tx.account_id,
        "timestamp": tx.timestamp.isoformat(),
    }


def decode_transaction(data: Mapping[str, Any]) -> Transaction:
    return Transaction(
        transaction_id=data["transaction_id"],
        transaction_type=data["transaction_type"],
        symbol=data["symbol"],
        quantity=data["quantity"],
        price_per_share=Decimal(data["price_per_share"]),
        account_id=data["account_id"],
        timestamp=datetime.fromisoformat(data["timestamp"]),
    )


def encode_account(account: Account) -> Dict[str, Any]:
    return {
        "account_id": account.account_id,
        "name": account.name,
        "balance": _dec(account.balance),
        "initial_balance": _dec(account.initial_balance),
        "transactions": [encode_transaction(tx) for tx in account.transaction_history()],
    }


def decode_account(data: Mapping[str, Any]) -> Account:
    return Account.from_history(
        account_id=data["account_id"],
        name=data["name"],
        balance=Decimal(data["balance"]),
        initial_balance=Decimal(data["initial_balance"]),
        transactions=[decode_transaction(tx) for tx in data["transactions"]],
    )


def encode_portfolio(portfolio: Portfolio) -> Dict[str, Any]:
    return {
        "account_id": portfolio.account_id,
        "transactions": [encode_transaction(tx) for tx in portfolio.transaction_history()],
        "performance_history": [
            {"timestamp": point.timestamp.isoformat(), "value": _dec(point.value)}
            for point in portfolio.performance_history()
        ],
    }


def decode_portfolio(data: Mapping[str, Any]) -> Portfolio:
    return Portfolio.from_history(
        account_id=data["account_id"],
        transactions=[decode_transaction(tx) for tx in data["transactions"]],
        performance=[
            PerformancePoint(
                timestamp=datetime.fromisoformat(point["timestamp"]),
                value=Decimal(point["value"]),
            )
            for point in data["performance_history"]
        ],
    )


# =============================================================================
# STORE
# =============================================================================


class JsonLedgerStore:
    """File-backed persistence of accounts and portfolios."""

    def __init__(self, data_dir: str | Path = "data"):
        self.data_dir = Path(data_dir)
        self.accounts_file = self.data_dir / ACCOUNTS_FILE
        self.portfolios_file = self.data_dir / PORTFOLIOS_FILE
        self._accounts_validator = DocumentValidator("accounts")
        self._portfolios_validator = DocumentValidator("portfolios")

    # -- accounts ---------------------------------------------------------

    def save_accounts(self, accounts: Mapping[str, Account]) -> bool:
        document = {
            "schema_version": SCHEMA_VERSION,
            "saved_at": datetime.now().isoformat(),
            "accounts": {key: encode_account(account) for key, account in accounts.items()},
        }
        return self._write(self.accounts_file, document, self._accounts_validator.validate)

    def load_accounts(self) -> Dict[str, Account]:
        document = self._read(self.accounts_file, self._accounts_validator.validate)
        if document is None:
            return {}
        try:
            return {key: decode_account(item) for key, item in document["accounts"].items()}
        except (KeyError, ValueError, ArithmeticError) as e:
            logger.warning(f"Error decoding {self.accounts_file}: {e}. Starting with no accounts.")
            return {}

    # -- portfolios -------------------------------------------------------

    def save_portfolios(self, portfolios: Mapping[str, Portfolio]) -> bool:
        document = {
            "schema_version": SCHEMA_VERSION,
            "saved_at": datetime.now().isoformat(),
            "portfolios": {key: encode_portfolio(p) for key, p in portfolios.items()},
        }
        return self._write(self.portfolios_file, document, self._portfolios_validator.validate)

    def load_portfolios(self) -> Dict[str, Portfolio]:
        document = self._read(self.portfolios_file, self._portfolios_validator.validate)
        if document is None:
            return {}
        try:
            return {key: decode_portfolio(item) for key, item in document["portfolios"].items()}
        except (KeyError, ValueError, ArithmeticError) as e:
            logger.warning(f"Error decoding {self.portfolios_file}: {e}. Starting with no portfolios.")
            return {}

    # -- both -------------------------------------------------------------

    def save_all(self, accounts: Mapping[str, Account], portfolios: Mapping[str, Portfolio]) -> bool:
        accounts_ok = self.save_accounts(accounts)
        portfolios_ok = self.save_portfolios(portfolios)
        return accounts_ok and portfolios_ok

    def load_all(self) -> LoadResult:
        return LoadResult(accounts=self.load_accounts(), portfolios=self.load_portfolios())

    # -- file I/O ---------------------------------------------------------

    def _write(self, path: Path, document: Dict[str, Any], validate: Callable[[Dict[str, Any]], None]) -> bool:
        try:
            validate(document)
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, SchemaValidationError, TypeError) as e:
            logger.error(f"Error saving {path}: {e}")
            return False
        logger.debug(f"Saved {path}")
        return True

    def _read(self, path: Path, validate: Callable[[Dict[str, Any]], None]) -> Dict[str, Any] | None:
        if not path.exists():
            logger.debug(f"No saved state at {path}")
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Error reading {path}: {e}. Starting with empty state.")
            return None

        if not isinstance(document, dict) or document.get("schema_version") != SCHEMA_VERSION:
            version = document.get("schema_version") if isinstance(document, dict) else None
            logger.warning(f"Unsupported schema version {version!r} in {path}. Starting with empty state.")
            return None
        try:
            validate(document)
        except SchemaValidationError as e:
            logger.warning(f"{path} does not match its schema: {e.message}. Starting with empty state.")
            return None
        return document
