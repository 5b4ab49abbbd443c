"""
QUOTE REFRESHER

Fetches quotes for the current portfolio:
- once at startup
- periodically, every ``update_frequency`` minutes
- when the tracked stocks change
- when the user explicitly asks

The event loop is the interactive context. Timer callbacks and event
handlers run on it, but every fetch is a separate task whose blocking
network read runs in a worker thread. Results are applied when the task
resumes on the loop. Nothing is ever cancelled: a trigger that arrives
while a fetch is running starts another, independent fetch, and whichever
finishes last is what the user sees.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional, Protocol, Sequence, Set

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from quotewatch.domain.errors import RequestBuildError, TransportError
from quotewatch.domain.models import Quote, Stock
from quotewatch.domain.services.portfolio_summary import PortfolioSummary, first_unpriced
from quotewatch.infrastructure.market_data.types import QuoteSource
from quotewatch.realtime.refresh_events import InstrumentSetChanged, PeriodChanged, RefreshEvent
from quotewatch.services.portfolio_service import CurrentPortfolio
from quotewatch.services.preferences_service import QuoteTablePreferences

logger = logging.getLogger(__name__)

FETCH_QUOTES_JOB_ID = "fetch_quotes_job"

FETCHING_MESSAGE = "Fetching quotes..."
DONE_MESSAGE = "Done."
NO_PRICE_WARNING = "Warning - no price for ticker {ticker} ({exchange})"
FAILED_MESSAGE = "Failed - {reason}"


class RefreshState(str, Enum):
    IDLE = "IDLE"
    FETCH_IN_FLIGHT = "FETCH_IN_FLIGHT"


class QuoteView(Protocol):
    """The interactive surface that displays quotes and status"""

    def show_quotes(self, quotes: Sequence[Quote], summary: PortfolioSummary) -> None:
        ...

    def show_status(self, message: str) -> None:
        ...


class QuoteRefresher:
    def __init__(
        self,
        source: QuoteSource,
        portfolio: CurrentPortfolio,
        preferences: QuoteTablePreferences,
        view: QuoteView,
        scheduler: Optional[AsyncIOScheduler] = None,
        timezone: str = "UTC",
    ):
        self._source = source
        self._portfolio = portfolio
        self._preferences = preferences
        self._view = view
        self._scheduler = scheduler or AsyncIOScheduler(timezone=pytz.timezone(timezone))
        self._period_minutes = preferences.update_frequency
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def state(self) -> RefreshState:
        if self._in_flight:
            return RefreshState.FETCH_IN_FLIGHT
        return RefreshState.IDLE

    @property
    def period_minutes(self) -> int:
        return self._period_minutes

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    def start(self, fetch_now: bool = True) -> None:
        """Register the periodic job and start the timer; must run on the loop"""
        self._scheduler.add_job(
            self._on_timer,
            trigger=IntervalTrigger(minutes=self._period_minutes),
            id=FETCH_QUOTES_JOB_ID,
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info("✅ Quote refresh timer started, every %d minutes", self._period_minutes)
        if fetch_now:
            self.refresh("startup")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("🛑 Quote refresh timer shut down")

    async def wait_idle(self) -> None:
        """Wait for every fetch in flight, including ones started meanwhile"""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    # ------------------------------------------------------------------
    # TRIGGERS
    # ------------------------------------------------------------------

    def refresh(self, reason: str = "manual") -> asyncio.Task:
        """Start a fetch for the current portfolio; must run on the loop"""
        stocks = self._portfolio.stocks
        use_monitor = self._preferences.use_monitor
        logger.info("Fetching quotes from web (%s).", reason)
        self._view.show_status(FETCHING_MESSAGE)

        task = asyncio.get_running_loop().create_task(
            self._fetch_and_show(stocks, use_monitor),
            name=f"fetch-quotes-{reason}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._fetch_done)
        return task

    async def handle_event(self, event: RefreshEvent) -> None:
        if isinstance(event, PeriodChanged):
            self.reset_period(event.minutes)
        elif isinstance(event, InstrumentSetChanged):
            self.refresh("portfolio changed")
        else:
            logger.warning("Ignoring unknown refresh event: %r", event)

    def reset_period(self, minutes: int) -> None:
        """Restart the timer with a new initial delay and period"""
        if minutes == self._period_minutes:
            return
        self._period_minutes = minutes
        if self._scheduler.get_job(FETCH_QUOTES_JOB_ID) is None:
            return
        logger.info("Resetting initial delay and delay to: %d minutes.", minutes)
        self._scheduler.reschedule_job(
            FETCH_QUOTES_JOB_ID,
            trigger=IntervalTrigger(minutes=minutes),
        )

    # ------------------------------------------------------------------
    # INTERNAL
    # ------------------------------------------------------------------

    async def _on_timer(self) -> None:
        self.refresh("timer")

    async def _fetch_and_show(self, stocks: Sequence[Stock], use_monitor: bool) -> None:
        try:
            quotes = await asyncio.to_thread(self._source.fetch_quotes, stocks, use_monitor)
        except TransportError as exc:
            logger.warning("Quote fetch failed: %s", exc)
            self._view.show_status(FAILED_MESSAGE.format(reason=exc.user_message))
            return
        except RequestBuildError as exc:
            logger.error("Quote request not sent: %s", exc)
            self._view.show_status(FAILED_MESSAGE.format(reason="Cannot build the quote request."))
            return
        self._show_updated(quotes)

    def _show_updated(self, quotes: Sequence[Quote]) -> None:
        self._portfolio.show_quotes(quotes)
        self._view.show_quotes(quotes, PortfolioSummary.from_quotes(quotes))

        unpriced = first_unpriced(quotes)
        if unpriced is None:
            self._view.show_status(DONE_MESSAGE)
        else:
            self._view.show_status(
                NO_PRICE_WARNING.format(
                    ticker=unpriced.stock.ticker,
                    exchange=unpriced.stock.exchange,
                )
            )

    def _fetch_done(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Quote fetch crashed", exc_info=exc)
            self._view.show_status(FAILED_MESSAGE.format(reason=str(exc) or type(exc).__name__))
