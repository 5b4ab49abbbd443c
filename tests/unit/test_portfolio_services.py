from decimal import Decimal

import pytest

from quotewatch.config import Settings
from quotewatch.domain.errors import ValidationError
from quotewatch.domain.models import Quote
from quotewatch.domain.services.portfolio_summary import PortfolioSummary, first_unpriced
from quotewatch.realtime.refresh_events import InstrumentSetChanged, PeriodChanged, RefreshEventQueue
from quotewatch.services.portfolio_service import CurrentPortfolio
from quotewatch.services.preferences_service import QuoteTablePreferences


def drain(queue):
    events = []
    while queue.size():
        events.append(queue._queue.get_nowait())
    return events


class TestCurrentPortfolio:

    @pytest.mark.asyncio
    async def test_edits_publish_instrument_set_changed(self, stocks):
        events = RefreshEventQueue()
        portfolio = CurrentPortfolio(stocks[:1], events=events)
        assert events.size() == 0

        portfolio.add_stock(stocks[1])
        portfolio.remove_stock(stocks[0])
        portfolio.set_stocks(stocks)

        assert drain(events) == [
            InstrumentSetChanged(tuple(stocks[:2])),
            InstrumentSetChanged((stocks[1],)),
            InstrumentSetChanged(tuple(stocks)),
        ]

    def test_keeps_display_order(self, stocks):
        portfolio = CurrentPortfolio(reversed(stocks))
        assert portfolio.stocks == tuple(reversed(stocks))

    def test_rejects_duplicates(self, stocks):
        portfolio = CurrentPortfolio(stocks)
        with pytest.raises(ValidationError, match="already in portfolio"):
            portfolio.add_stock(stocks[0])

    def test_rejects_removing_unknown_stock(self, stocks):
        portfolio = CurrentPortfolio(stocks[:1])
        with pytest.raises(ValidationError):
            portfolio.remove_stock(stocks[1])

    def test_rejects_non_stock_entries(self):
        with pytest.raises(ValidationError):
            CurrentPortfolio(["IBM"])

    def test_show_quotes_replaces_wholesale(self, stocks):
        portfolio = CurrentPortfolio(stocks)
        first = [Quote(stock, Decimal("1.00"), Decimal("0")) for stock in stocks]
        second = [Quote(stock, Decimal("2.00"), Decimal("0")) for stock in stocks[:2]]

        portfolio.show_quotes(first)
        portfolio.show_quotes(second)

        assert portfolio.quotes == tuple(second)


class TestQuoteTablePreferences:

    @pytest.mark.asyncio
    async def test_change_publishes_period_changed(self):
        events = RefreshEventQueue()
        preferences = QuoteTablePreferences(update_frequency=1, events=events)

        preferences.update_frequency = 5
        preferences.update_frequency = 5

        assert preferences.update_frequency == 5
        assert drain(events) == [PeriodChanged(5)]

    @pytest.mark.parametrize("minutes", [0, 61, -1, 2.5, "5", True])
    def test_rejects_out_of_range(self, minutes):
        preferences = QuoteTablePreferences()
        with pytest.raises(ValidationError):
            preferences.update_frequency = minutes
        assert preferences.update_frequency == 1

    @pytest.mark.parametrize("minutes", [1, 60])
    def test_accepts_bounds(self, minutes):
        assert QuoteTablePreferences(update_frequency=minutes).update_frequency == minutes

    def test_from_settings(self):
        cfg = Settings(UPDATE_FREQUENCY_MINUTES=15, USE_MONITOR=True)
        preferences = QuoteTablePreferences.from_settings(cfg)
        assert preferences.update_frequency == 15
        assert preferences.use_monitor is True


class TestPortfolioSummary:

    def test_totals(self, stocks):
        quotes = [Quote(stock, Decimal("12.00"), Decimal("0.10")) for stock in stocks]
        summary = PortfolioSummary.from_quotes(quotes)

        assert summary.book_value == Decimal("3000.00")
        assert summary.current_value == Decimal("3600.00")
        assert summary.profit == Decimal("600.00")
        assert summary.percent_profit == Decimal("20.00")

    def test_empty_portfolio(self):
        summary = PortfolioSummary.from_quotes([])
        assert summary.profit == 0
        assert summary.percent_profit == Decimal("0.00")


class TestFirstUnpriced:

    def test_returns_first_zero_price(self, stocks):
        prices = ["5.00", "0", "0", "1.00", "1.00"]
        quotes = [Quote(stock, Decimal(price), Decimal("0")) for stock, price in zip(stocks, prices)]
        assert first_unpriced(quotes) is quotes[1]

    def test_none_when_all_priced(self, stocks):
        quotes = [Quote(stock, Decimal("1.00"), Decimal("0")) for stock in stocks]
        assert first_unpriced(quotes) is None
