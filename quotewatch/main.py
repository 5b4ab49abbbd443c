"""
Console entry point

Tracks a portfolio and keeps its quotes fresh until stopped.

    quotewatch --stock "IBM:Ibm:NYSE Stock Exchanges:100:10.00" \
               --stock "CTR:Cdn Tire:Toronto Stock Exchange:50:80.25"

Press Enter to refresh now, ``q`` then Enter to quit.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from quotewatch.config import Settings, settings
from quotewatch.console.view import ConsoleQuoteView
from quotewatch.core.logging import setup_logging
from quotewatch.domain.errors import ValidationError
from quotewatch.domain.models import Stock
from quotewatch.infrastructure.market_data.quotes_client import QuotesClient
from quotewatch.realtime.refresh_events import RefreshEventQueue, RefreshEventWorker
from quotewatch.scheduler.quote_refresher import QuoteRefresher
from quotewatch.services.exchange_registry import ExchangeRegistry
from quotewatch.services.portfolio_service import CurrentPortfolio
from quotewatch.services.preferences_service import QuoteTablePreferences

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monitor live stock quotes for a portfolio")
    parser.add_argument(
        "--stock",
        action="append",
        default=[],
        metavar="TICKER:NAME:EXCHANGE:SHARES:AVG_PRICE",
        help="A stock to track; repeat for more",
    )
    parser.add_argument("--minutes", type=int, help="Minutes between periodic refreshes (1-60)")
    parser.add_argument("--offline", action="store_true", help="Use fixed quotes, no network access")
    parser.add_argument("--once", action="store_true", help="Fetch once and exit")
    parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL)")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, cfg: Settings, stocks: List[Stock]) -> int:
    events = RefreshEventQueue()
    portfolio = CurrentPortfolio(stocks, events=events)
    preferences = QuoteTablePreferences(
        update_frequency=args.minutes or cfg.UPDATE_FREQUENCY_MINUTES,
        use_monitor=cfg.USE_MONITOR,
        events=events,
    )
    client = QuotesClient.from_settings(cfg)
    if args.offline:
        client.offline = True

    view = ConsoleQuoteView()
    refresher = QuoteRefresher(client, portfolio, preferences, view, timezone=cfg.TIMEZONE)

    if args.once:
        refresher.refresh("once")
        await refresher.wait_idle()
        return 0 if view.last_status.startswith(("Done", "Warning")) else 1

    worker = RefreshEventWorker(events, refresher.handle_event)
    worker.start()
    refresher.start()

    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    reading_stdin = _watch_stdin(loop, refresher, stop)
    try:
        await stop.wait()
    finally:
        if reading_stdin:
            loop.remove_reader(sys.stdin.fileno())
        refresher.shutdown()
        await worker.stop()
        await refresher.wait_idle()
    return 0


def _watch_stdin(loop: asyncio.AbstractEventLoop, refresher: QuoteRefresher, stop: asyncio.Event) -> bool:
    def on_input() -> None:
        line = sys.stdin.readline()
        if not line or line.strip().lower() == "q":
            stop.set()
            return
        refresher.refresh("manual")

    try:
        loop.add_reader(sys.stdin.fileno(), on_input)
    except (NotImplementedError, OSError, ValueError):
        logger.info("Manual refresh from the keyboard is not available here")
        return False
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level or settings.LOG_LEVEL)

    registry = ExchangeRegistry.load_default(settings.EXCHANGES_FILE)
    try:
        stocks = [Stock.from_text(text, registry) for text in args.stock]
    except ValidationError as exc:
        logger.error("Invalid --stock: %s", exc)
        return 2

    try:
        return asyncio.run(run(args, settings, stocks))
    except ValidationError as exc:
        logger.error("Invalid portfolio: %s", exc)
        return 2
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
