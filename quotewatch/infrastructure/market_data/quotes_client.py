"""
Quote Service Client
Fetches current prices for a batch of stocks from the text quote service.

A single GET carries every ticker:

    http://quote.yahoo.com/d/quotes.csv?s=SUNW,CTR.TO&f=sl1d1t1c1ohgv&e=.csv

The service answers with one line per ticker, in request order, and does not
echo anything that maps a line back to a (ticker, exchange) pair. Lines are
therefore matched to stocks by position.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

import httpx

from quotewatch.config import Settings
from quotewatch.domain.errors import ParseAnomaly, RequestBuildError, TransportError
from quotewatch.domain.models import Quote, Stock, ZERO_MONEY, rounded
from quotewatch.infrastructure.market_data.quote_text_parser import parse_quote_line

logger = logging.getLogger(__name__)

TICKER_SEPARATOR = ","
SUFFIX_SEPARATOR = "."

OFFLINE_PRICE = Decimal("10.00")
OFFLINE_CHANGE = Decimal("-0.75")

ProgressCallback = Callable[[int], None]


def request_ticker(stock: Stock) -> str:
    """``TICKER`` or ``TICKER.SUFFIX`` when the exchange has a suffix"""
    suffix = stock.exchange.ticker_suffix
    if suffix:
        return f"{stock.ticker}{SUFFIX_SEPARATOR}{suffix}"
    return stock.ticker


class QuotesClient:
    def __init__(
        self,
        base_url: str = "http://quote.yahoo.com/d/quotes.csv?s=",
        field_format: str = "&f=sl1d1t1c1ohgv&e=.csv",
        timeout: float = 30.0,
        offline: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.base_url = base_url
        self.field_format = field_format
        self.timeout = timeout
        self.offline = offline
        self._transport = transport
        self._on_progress = on_progress

    @classmethod
    def from_settings(cls, cfg: Settings, **kwargs) -> "QuotesClient":
        return cls(
            base_url=cfg.QUOTE_SERVICE_URL,
            field_format=cfg.QUOTE_FIELD_FORMAT,
            timeout=cfg.QUOTE_REQUEST_TIMEOUT,
            offline=cfg.QUOTES_OFFLINE,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # PUBLIC
    # ------------------------------------------------------------------

    def fetch_quotes(self, stocks: Sequence[Stock], use_monitor: bool = False) -> List[Quote]:
        """
        Return one Quote per stock, in the same order.

        An unknown ticker still gets a Quote; its price is zero.
        Raises RequestBuildError before any network access if the request
        target is malformed, and TransportError on network failure.
        """
        if self.offline:
            logger.warning("Quote service offline mode - serving fixed prices")
            return self.static_quotes(stocks)
        if not stocks:
            return []

        url = self.build_request_url(stocks)
        logger.info("Fetching %d quotes from %s", len(stocks), url.host)
        lines = self._read_lines(url, use_monitor)
        return self._correlate(stocks, lines)

    def build_request_url(self, stocks: Sequence[Stock]) -> httpx.URL:
        tickers = TICKER_SEPARATOR.join(request_ticker(stock) for stock in stocks)
        target = f"{self.base_url}{tickers}{self.field_format}"
        try:
            url = httpx.URL(target)
        except (httpx.InvalidURL, TypeError) as exc:
            logger.error("Cannot create quote service URL using: %s", target)
            raise RequestBuildError(target) from exc
        if url.scheme not in ("http", "https") or not url.host:
            logger.error("Cannot create quote service URL using: %s", target)
            raise RequestBuildError(target, "not an absolute http(s) URL")
        return url

    @staticmethod
    def static_quotes(stocks: Sequence[Stock]) -> List[Quote]:
        """Fixed prices for working without a network"""
        return [Quote(stock, OFFLINE_PRICE, OFFLINE_CHANGE) for stock in stocks]

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _read_lines(self, url: httpx.URL, use_monitor: bool) -> List[str]:
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                if use_monitor:
                    return self._read_lines_with_progress(client, url)
                response = client.get(url)
                response.raise_for_status()
                return _content_lines(response.text.splitlines())
        except httpx.HTTPError as exc:
            logger.warning("Quote service request failed: %s", exc)
            raise TransportError(f"Quote service request failed: {exc}") from exc

    def _read_lines_with_progress(self, client: httpx.Client, url: httpx.URL) -> List[str]:
        lines: List[str] = []
        with client.stream("GET", url) as response:
            response.raise_for_status()
            for line in response.iter_lines():
                lines.append(line)
                self._report_progress(len(lines))
        return _content_lines(lines)

    def _report_progress(self, lines_read: int) -> None:
        if self._on_progress is not None:
            self._on_progress(lines_read)
        else:
            logger.debug("Fetching... %d lines read", lines_read)

    def _correlate(self, stocks: Sequence[Stock], lines: List[str]) -> List[Quote]:
        if len(lines) > len(stocks):
            logger.warning(
                "Quote service returned %d lines for %d tickers; ignoring the surplus",
                len(lines),
                len(stocks),
            )
        quotes: List[Quote] = []
        for index, stock in enumerate(stocks):
            line = lines[index] if index < len(lines) else None
            quotes.append(self._quote_for(stock, line))
        return quotes

    def _quote_for(self, stock: Stock, line: Optional[str]) -> Quote:
        if line is None:
            logger.error("No quote line received for %s", request_ticker(stock))
            return Quote(stock, ZERO_MONEY, ZERO_MONEY)

        try:
            parsed = parse_quote_line(line)
            if parsed.price < 0:
                raise ParseAnomaly(f"Negative price: {line!r}")
        except ParseAnomaly as exc:
            logger.error("Cannot read quote for %s: %s", request_ticker(stock), exc)
            return Quote(stock, ZERO_MONEY, ZERO_MONEY)

        if not parsed.change_readable:
            logger.error("Cannot read price change for %s, showing no change: %s", request_ticker(stock), line)
        if not parsed.ticker.startswith(stock.ticker):
            logger.error(
                "Invalid ticker-exchange? Expected line for %s, but received: %s",
                stock.ticker,
                line,
            )
        logger.debug("Quote line for %s: %s", stock.ticker, line)
        return Quote(stock, rounded(parsed.price), rounded(parsed.change))


def _content_lines(lines: List[str]) -> List[str]:
    return [line for line in lines if line.strip()]
