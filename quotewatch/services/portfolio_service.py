import logging
from typing import Iterable, List, Optional, Tuple

from quotewatch.domain.errors import ValidationError
from quotewatch.domain.models import Quote, Stock
from quotewatch.realtime.refresh_events import InstrumentSetChanged, RefreshEventQueue

logger = logging.getLogger(__name__)


class CurrentPortfolio:
    """
    The stocks the user is tracking, in display order, and the quotes
    currently shown for them.

    Every edit publishes InstrumentSetChanged. ``show_quotes`` must only be
    called from the event loop.
    """

    def __init__(
        self,
        stocks: Iterable[Stock] = (),
        events: Optional[RefreshEventQueue] = None,
        name: str = "Untitled",
    ):
        self.name = name
        self._events = events
        self._stocks: List[Stock] = []
        for stock in stocks:
            self._append(stock)
        self._quotes: Tuple[Quote, ...] = ()

    @property
    def stocks(self) -> Tuple[Stock, ...]:
        return tuple(self._stocks)

    @property
    def quotes(self) -> Tuple[Quote, ...]:
        return self._quotes

    def set_stocks(self, stocks: Iterable[Stock]) -> None:
        self._stocks = []
        for stock in stocks:
            self._append(stock)
        self._changed()

    def add_stock(self, stock: Stock) -> None:
        self._append(stock)
        self._changed()

    def remove_stock(self, stock: Stock) -> None:
        try:
            self._stocks.remove(stock)
        except ValueError:
            raise ValidationError(f"Stock not in portfolio: {stock.ticker}") from None
        self._changed()

    def show_quotes(self, quotes: Iterable[Quote]) -> None:
        """Replace the displayed quotes wholesale"""
        self._quotes = tuple(quotes)

    def _append(self, stock: Stock) -> None:
        if not isinstance(stock, Stock):
            raise ValidationError(f"Portfolio entries must be Stock objects: {stock!r}")
        if stock in self._stocks:
            raise ValidationError(f"Stock already in portfolio: {stock.to_text()}")
        self._stocks.append(stock)

    def _changed(self) -> None:
        logger.debug("Portfolio %r now tracks %d stocks", self.name, len(self._stocks))
        if self._events is not None:
            self._events.publish_nowait(InstrumentSetChanged(self.stocks))
