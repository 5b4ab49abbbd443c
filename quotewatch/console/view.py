import sys
from datetime import datetime
from typing import Optional, Sequence, TextIO

from quotewatch.console.formatters import format_quote_table, format_summary
from quotewatch.domain.models import Quote
from quotewatch.domain.services.portfolio_summary import PortfolioSummary


class ConsoleQuoteView:
    """Prints quotes and status lines to a text stream, stdout by default"""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self.last_status = ""

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def show_quotes(self, quotes: Sequence[Quote], summary: PortfolioSummary) -> None:
        print(format_quote_table(quotes), file=self.stream)
        print(format_summary(summary), file=self.stream)
        print(f"Last Update: {datetime.now():%H:%M:%S}", file=self.stream)

    def show_status(self, message: str) -> None:
        self.last_status = message
        print(f"Status: {message}", file=self.stream, flush=True)
