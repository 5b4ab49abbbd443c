"""
EXCHANGE REGISTRY

Read-only table of exchanges known to the quote service.
Built once at startup from a tab-separated text resource and passed
to whoever needs it; there is no module-level instance.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from quotewatch.domain.errors import UnknownExchangeError, ValidationError
from quotewatch.domain.models import Exchange

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGES_FILE = Path(__file__).resolve().parent.parent / "resources" / "exchanges.txt"

COMMENT_MARKER = "#"
FIELD_SEPARATOR = "\t"
NOT_AVAILABLE = "N/A"


class ExchangeRegistry:
    """Ordered, immutable collection of Exchange records"""

    def __init__(self, exchanges: Iterable[Exchange]):
        self._values: Tuple[Exchange, ...] = tuple(exchanges)
        self._by_name: Dict[str, Exchange] = {}
        for exchange in self._values:
            if exchange.name in self._by_name:
                raise ValidationError(f"Duplicate exchange name: {exchange.name!r}")
            self._by_name[exchange.name] = exchange

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "ExchangeRegistry":
        exchanges: List[Exchange] = []
        for line_number, raw_line in enumerate(lines, start=1):
            line = raw_line.rstrip("\r\n")
            if not line.strip() or line.startswith(COMMENT_MARKER):
                continue
            exchanges.append(_parse_exchange(line, line_number, order=len(exchanges)))
        return cls(exchanges)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ExchangeRegistry":
        path = Path(path)
        with path.open(encoding="utf-8") as handle:
            registry = cls.from_lines(handle)
        logger.info("Loaded %d exchanges from %s", len(registry), path)
        return registry

    @classmethod
    def load_default(cls, path: Optional[Union[str, Path]] = None) -> "ExchangeRegistry":
        """Load ``path`` if given, else the bundled exchange table"""
        return cls.load(path or DEFAULT_EXCHANGES_FILE)

    @property
    def values(self) -> Tuple[Exchange, ...]:
        return self._values

    def value_from(self, name: str) -> Exchange:
        """Exact-name lookup; unknown names are a caller error"""
        exchange = self._by_name.get(name)
        if exchange is None:
            raise UnknownExchangeError(name)
        return exchange

    def __iter__(self) -> Iterator[Exchange]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


def _parse_exchange(line: str, line_number: int, order: int) -> Exchange:
    fields = [part.strip() for part in line.split(FIELD_SEPARATOR) if part.strip()]
    if len(fields) < 3:
        raise ValidationError(f"Exchange table line {line_number} needs 3 tab-separated fields: {line!r}")
    full_name, _abbreviation, raw_suffix = fields[:3]
    return Exchange(name=full_name, ticker_suffix=_suffix(raw_suffix), order=order)


def _suffix(raw_suffix: str) -> str:
    if raw_suffix == NOT_AVAILABLE:
        return ""
    return raw_suffix[1:] if raw_suffix.startswith(".") else raw_suffix
