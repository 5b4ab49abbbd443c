"""
Quote source protocol for type hints.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence

from quotewatch.domain.models import Quote, Stock


class QuoteSource(Protocol):
    def fetch_quotes(self, stocks: Sequence[Stock], use_monitor: bool = False) -> List[Quote]:
        ...
