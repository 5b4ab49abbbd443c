"""
PORTFOLIO SUMMARY

Totals over a set of quotes: book value, current value, profit and
percent profit. Also finds the first quote the service could not price.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from quotewatch.domain.models import Quote, ZERO_MONEY, is_zero_money, percentage


@dataclass(frozen=True)
class PortfolioSummary:
    """Portfolio totals - Immutable"""
    book_value: Decimal
    current_value: Decimal

    @classmethod
    def from_quotes(cls, quotes: Iterable[Quote]) -> "PortfolioSummary":
        book_value = Decimal(0)
        current_value = Decimal(0)
        for quote in quotes:
            book_value += quote.stock.book_value
            current_value += quote.current_value
        return cls(book_value=book_value, current_value=current_value)

    @property
    def profit(self) -> Decimal:
        return self.current_value - self.book_value

    @property
    def percent_profit(self) -> Decimal:
        if is_zero_money(self.book_value):
            return ZERO_MONEY
        return percentage(self.profit, self.book_value)


def first_unpriced(quotes: Iterable[Quote]) -> Optional[Quote]:
    """Return the first quote whose price is exactly zero"""
    for quote in quotes:
        if is_zero_money(quote.price):
            return quote
    return None
