from decimal import Decimal
from typing import List, Sequence

from quotewatch.domain.models import Quote
from quotewatch.domain.services.portfolio_summary import PortfolioSummary

_COLUMNS = ("Ticker", "Name", "Exchange", "Shares", "Price", "Change", "%Change", "Value", "%Profit")


def format_money(value: Decimal) -> str:
    return f"{value:,.2f}"


def format_percent(value: Decimal) -> str:
    return f"{value:+.2f}%"


def format_quote_table(quotes: Sequence[Quote]) -> str:
    rows: List[Sequence[str]] = [_COLUMNS]
    for quote in quotes:
        stock = quote.stock
        rows.append((
            stock.ticker,
            stock.name,
            stock.exchange.name,
            str(stock.num_shares),
            format_money(quote.price),
            f"{quote.change:+.2f}",
            format_percent(quote.percent_change),
            format_money(quote.current_value),
            format_percent(quote.percent_profit),
        ))

    widths = [max(len(row[i]) for row in rows) for i in range(len(_COLUMNS))]
    lines = []
    for row in rows:
        lines.append("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
    lines.insert(1, "  ".join("-" * width for width in widths))
    return "\n".join(lines)


def format_summary(summary: PortfolioSummary) -> str:
    return (
        f"Book Value: {format_money(summary.book_value)} | "
        f"Current Value: {format_money(summary.current_value)} | "
        f"Profit: {format_money(summary.profit)} | "
        f"% Profit: {format_percent(summary.percent_profit)}"
    )
