"""
Tests for the interactive session, driven through injected streams
"""

import io
import random
from decimal import Decimal
from pathlib import Path

import pytest

from src.cli.main import build_session, main
from src.cli.session import TradingSession
from src.config import EngineConfig
from src.executor.order_executor import OrderExecutor
from src.market.price_source import PriceSource
from src.persistence.json_store import JsonLedgerStore


def make_session(tmp_path: Path, script: str, max_attempts: int = 5) -> tuple[TradingSession, io.StringIO]:
    source = PriceSource([("AAPL", "Apple Inc.", Decimal("175.50"))], rng=random.Random(0))
    out = io.StringIO()
    session = TradingSession(
        OrderExecutor(source),
        JsonLedgerStore(tmp_path),
        max_login_attempts=max_attempts,
        stdin=io.StringIO(script),
        stdout=out,
    )
    return session, out


class TestLogin:
    def test_register_buy_and_exit(self, tmp_path: Path) -> None:
        script = "2\nalice\nAlice\n\n3\nAAPL\n10\n9\n"
        session, out = make_session(tmp_path, script)
        session.run()

        text = out.getvalue()
        assert "Your account has been created with $10000.00" in text
        assert "Successfully bought 10 shares of AAPL @ $175.50" in text
        assert "Goodbye" in text
        assert session.executor.get_account("alice").balance == Decimal("8245.00")
        assert (tmp_path / "accounts.json").exists()

    def test_bounded_retries(self, tmp_path: Path) -> None:
        script = "1\nghost\n1\nghost\n1\nghost\n"
        session, out = make_session(tmp_path, script, max_attempts=3)
        assert session.login_or_register() is False
        assert out.getvalue().count("User ghost not found") == 3
        assert "Too many failed attempts." in out.getvalue()

    def test_invalid_balance_reprompts(self, tmp_path: Path) -> None:
        script = "2\nbob\nBob\nlots\n2\nbob\nBob\n500\n"
        session, out = make_session(tmp_path, script)
        assert session.login_or_register() is True
        assert "Invalid number format" in out.getvalue()
        assert session.executor.get_account("bob").balance == Decimal("500")

    def test_end_of_input_exits_cleanly(self, tmp_path: Path) -> None:
        session, out = make_session(tmp_path, "")
        session.run()
        assert "Goodbye" in out.getvalue()


class TestMenu:
    def test_rejections_are_printed_not_raised(self, tmp_path: Path) -> None:
        script = "2\nalice\nAlice\n100\n3\nAAPL\n1\n4\n3\nAAPL\nabc\n9\n"
        session, out = make_session(tmp_path, script)
        session.run()
        text = out.getvalue()
        assert "You have no stocks to sell." in text
        assert "Insufficient funds. Need $175.50, have $100.00" in text
        assert "Invalid number format" in text

    def test_portfolio_and_history_views(self, tmp_path: Path) -> None:
        script = "2\nalice\nAlice\n\n3\nAAPL\n2\n7\n2\n5\n6\n9\n"
        session, out = make_session(tmp_path, script)
        session.run()
        text = out.getvalue()
        assert "PORTFOLIO - Alice (alice)" in text
        assert "TRANSACTION HISTORY - Alice" in text
        assert "PERFORMANCE HISTORY" in text
        assert "Market prices updated!" in text

    def test_state_reloaded_in_new_session(self, tmp_path: Path) -> None:
        first, _ = make_session(tmp_path, "2\nalice\nAlice\n\n3\nAAPL\n3\n9\n")
        first.run()

        second, out = make_session(tmp_path, "1\nalice\n9\n")
        second.run()
        assert "Loaded saved data from previous session." in out.getvalue()
        assert "Welcome back, Alice!" in out.getvalue()
        assert second.executor.get_portfolio("alice").quantity_of("AAPL") == 3


class TestMain:
    def test_build_session_uses_config(self, tmp_path: Path) -> None:
        config = EngineConfig(data_dir=tmp_path, random_seed=5, default_initial_balance=Decimal("50"))
        session = build_session(config, stdin=io.StringIO(""), stdout=io.StringIO())
        assert session.store.data_dir == tmp_path
        assert session.executor.default_initial_balance == Decimal("50")
        assert session.executor.price_source.has_instrument("AAPL")

    def test_bad_catalog_exit_code(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        code = main(["--data-dir", str(tmp_path), "--catalog", str(tmp_path / "missing.yaml")])
        assert code == 1
