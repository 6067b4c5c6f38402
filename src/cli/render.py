"""Text rendering of market, portfolio and history views. Pure functions."""

from typing import Iterable

from src.core.domain.portfolio import PerformancePoint
from src.core.domain.transaction import Transaction
from src.executor.order_executor import PortfolioSummary
from src.market.price_source import InstrumentQuote

WIDTH = 80


def _banner(title: str) -> list[str]:
    return ["", "=" * WIDTH, title.center(WIDTH).rstrip(), "=" * WIDTH]


def _timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def render_market(quotes: Iterable[InstrumentQuote]) -> str:
    lines = _banner("MARKET DATA")
    lines.append(f"{'Symbol':<10} {'Company Name':<30} {'Price':<15} {'Change %':<15}")
    lines.append("-" * WIDTH)
    for quote in quotes:
        change = f"{quote.change_percent:+.2f}%"
        lines.append(f"{quote.symbol:<10} {quote.name:<30} ${quote.price:<14.2f} {change:<15}")
    lines.append("=" * WIDTH)
    return "\n".join(lines) + "\n"


def render_portfolio(summary: PortfolioSummary) -> str:
    lines = _banner(f"PORTFOLIO - {summary.name} ({summary.account_id})")
    lines.append("")
    lines.append(f"Account Balance: ${summary.balance:.2f}")
    lines.append(f"Initial Balance: ${summary.initial_balance:.2f}")

    if not summary.holdings:
        lines.append("")
        lines.append("No current holdings.")
        lines.append("=" * WIDTH)
        return "\n".join(lines) + "\n"

    lines.append("")
    lines.append("Current Holdings:")
    lines.append(f"{'Symbol':<10} {'Quantity':<15} {'Current Price':<20} {'Total Value':<15}")
    lines.append("-" * 60)
    for row in summary.holdings:
        lines.append(f"{row.symbol:<10} {row.quantity:<15d} ${row.price:<19.2f} ${row.value:<14.2f}")
    lines.append("-" * 60)
    lines.append(f"{'Total Holdings Value':<45} ${summary.holdings_value:.2f}")

    pnl = summary.profit_loss
    lines.append("")
    lines.append("Performance Metrics:")
    lines.append(f"  Total Cost Basis: ${pnl.cost_basis:.2f}")
    lines.append(f"  Current Holdings Value: ${pnl.current_value:.2f}")
    lines.append(f"  Profit/Loss: ${pnl.pnl:.2f} ({pnl.pnl_percent:.2f}%)")
    lines.append(f"  Total Portfolio Value: ${summary.total_value:.2f}")
    lines.append(
        f"  Overall Return: ${summary.overall_return:.2f} ({summary.overall_return_percent:.2f}%)"
    )
    lines.append("=" * WIDTH)
    return "\n".join(lines) + "\n"


def render_transactions(name: str, transactions: Iterable[Transaction]) -> str:
    transactions = list(transactions)
    lines = _banner(f"TRANSACTION HISTORY - {name}")
    if not transactions:
        lines.append("No transactions yet.")
    else:
        lines.append(
            f"{'Type':<8} {'Symbol':<10} {'Quantity':<12} {'Price':<15} {'Total':<15} {'Time':<20}"
        )
        lines.append("-" * WIDTH)
        for tx in transactions:
            lines.append(
                f"{tx.transaction_type.value:<8} {tx.symbol:<10} {tx.quantity:<12d} "
                f"${tx.price_per_share:<14.2f} ${tx.total_value:<14.2f} {_timestamp(tx.timestamp):<20}"
            )
    lines.append("=" * WIDTH)
    return "\n".join(lines) + "\n"


def render_performance(points: Iterable[PerformancePoint]) -> str:
    points = list(points)
    if not points:
        return "\nNo performance history available yet. Make some trades and update prices!\n"
    lines = _banner("PERFORMANCE HISTORY")
    lines.append(f"{'Timestamp':<25} {'Portfolio Value':<20}")
    lines.append("-" * 45)
    for point in points:
        lines.append(f"{_timestamp(point.timestamp):<25} ${point.value:<19.2f}")
    lines.append("=" * WIDTH)
    return "\n".join(lines) + "\n"


def render_holdings_brief(holdings: dict[str, int], prices: dict) -> str:
    lines = ["", "Your Holdings:"]
    for symbol, quantity in sorted(holdings.items()):
        price = prices.get(symbol)
        price_text = f"${price:.2f}" if price is not None else "n/a"
        lines.append(f"  {symbol}: {quantity} shares @ {price_text}")
    return "\n".join(lines) + "\n"
