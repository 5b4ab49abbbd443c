"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_EVEN
from functools import total_ordering
from typing import TYPE_CHECKING, List

from quotewatch.domain.errors import ValidationError

if TYPE_CHECKING:
    from quotewatch.services.exchange_registry import ExchangeRegistry


MONEY_DECIMALS = 2
EXTRA_DECIMALS = 4
MONEY_ROUNDING = ROUND_HALF_EVEN

ZERO_MONEY = Decimal("0.00")
HUNDRED = Decimal("100")

TICKER_MAX_LENGTH = 20
TICKER_EXTRA_CHARS = frozenset("._^")
INDEX_PREFIX = "^"
TEXT_FIELD_DELIMITER = ":"

_MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_DECIMALS)
_EXTRA_QUANTUM = Decimal(1).scaleb(-EXTRA_DECIMALS)


def rounded(value: Decimal) -> Decimal:
    """Round to 2 decimals, half-even"""
    return value.quantize(_MONEY_QUANTUM, rounding=MONEY_ROUNDING)


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator * 100, divided at 4 decimals then rounded to 2"""
    ratio = (numerator / denominator).quantize(_EXTRA_QUANTUM, rounding=MONEY_ROUNDING)
    return rounded(ratio * HUNDRED)


def is_zero_money(value: Decimal) -> bool:
    return value.compare(ZERO_MONEY) == 0


@total_ordering
@dataclass(frozen=True)
class Exchange:
    """
    Trading venue, identified by its full display name.

    ``ticker_suffix`` qualifies symbols in outbound quote requests
    (``TO`` -> ``CTR.TO``) and is empty for venues that need none.
    ``order`` is the registration order and defines the total order.
    """
    name: str
    ticker_suffix: str = ""
    order: int = field(default=0, compare=False)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Exchange name must have content")
        if not isinstance(self.ticker_suffix, str):
            raise ValidationError("Exchange ticker suffix must be text")
        if self.ticker_suffix.startswith("."):
            raise ValidationError("Exchange ticker suffix excludes the leading dot")

    def __lt__(self, other: "Exchange") -> bool:
        if not isinstance(other, Exchange):
            return NotImplemented
        return self.order < other.order

    def __str__(self) -> str:
        return self.name


@total_ordering
@dataclass(frozen=True)
class Stock:
    """
    A tracked holding - Immutable

    Non-index instruments sort before index instruments; ties are broken by
    name, ticker, exchange order, shares and average price.
    """
    name: str
    ticker: str
    exchange: Exchange
    num_shares: int
    average_price: Decimal

    def __post_init__(self):
        errors = Stock.validation_errors(
            self.name, self.ticker, self.exchange, self.num_shares, self.average_price
        )
        if errors:
            raise ValidationError("; ".join(errors))

    @staticmethod
    def validation_errors(name, ticker, exchange, num_shares, average_price) -> List[str]:
        """Return every problem with the given field values, empty if valid"""
        errors: List[str] = []
        if not _is_valid_name(name):
            errors.append("Name must have content.")
        if not _is_valid_ticker(ticker):
            errors.append(
                "Ticker symbols must have 1..20 characters, "
                "which are only letters, periods, underscores, and ^."
            )
        if not isinstance(exchange, Exchange):
            errors.append("An exchange must be selected.")
        if isinstance(num_shares, bool) or not isinstance(num_shares, int):
            errors.append("Quantity must be a whole number.")
        if not isinstance(average_price, Decimal) or not average_price.is_finite() or average_price < 0:
            errors.append("Average price must be zero or positive.")
        return errors

    @property
    def is_index(self) -> bool:
        return self.ticker.startswith(INDEX_PREFIX)

    @property
    def book_value(self) -> Decimal:
        """Shares times average acquisition price"""
        return Decimal(self.num_shares) * self.average_price

    def _sort_key(self):
        return (
            self.is_index,
            self.name,
            self.ticker,
            self.exchange.order,
            self.num_shares,
            self.average_price,
        )

    def __lt__(self, other: "Stock") -> bool:
        if not isinstance(other, Stock):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def to_text(self) -> str:
        """Render as ``TICKER:Name:Exchange Name:shares:averagePrice``"""
        return TEXT_FIELD_DELIMITER.join(
            [self.ticker, self.name, self.exchange.name, str(self.num_shares), str(self.average_price)]
        )

    @classmethod
    def from_text(cls, text: str, registry: "ExchangeRegistry") -> "Stock":
        parts = text.split(TEXT_FIELD_DELIMITER)
        if len(parts) != 5:
            raise ValidationError(f"Cannot parse into Stock object: {text!r}")
        ticker, name, exchange_name, shares_text, price_text = parts
        exchange = registry.value_from(exchange_name)
        try:
            num_shares = int(shares_text)
            average_price = Decimal(price_text)
        except (ValueError, ArithmeticError) as exc:
            raise ValidationError(f"Cannot parse into Stock object: {text!r}") from exc
        return cls(name, ticker, exchange, num_shares, average_price)


@dataclass(frozen=True)
class Quote:
    """
    One fetch-cycle snapshot of price and change for a Stock - Immutable

    Everything except the three stored fields is derived.
    """
    stock: Stock
    price: Decimal
    change: Decimal

    def __post_init__(self):
        if not isinstance(self.stock, Stock):
            raise ValidationError("Quote requires a Stock")
        if not isinstance(self.price, Decimal) or not self.price.is_finite() or self.price < 0:
            raise ValidationError(f"Quote price must be zero or positive: {self.price!r}")
        if not isinstance(self.change, Decimal) or not self.change.is_finite():
            raise ValidationError(f"Quote change must be a decimal amount: {self.change!r}")

    @property
    def opening_price(self) -> Decimal:
        return self.price - self.change

    @property
    def percent_change(self) -> Decimal:
        # Guarded on the current price, not the opening price.
        if is_zero_money(self.price):
            return ZERO_MONEY
        opening = self.opening_price
        if is_zero_money(opening):
            return ZERO_MONEY
        return percentage(self.change, opening)

    @property
    def current_value(self) -> Decimal:
        return Decimal(self.stock.num_shares) * self.price

    @property
    def profit(self) -> Decimal:
        return self.current_value - self.stock.book_value

    @property
    def percent_profit(self) -> Decimal:
        # Guarded on the current price, not the current value.
        book_value = self.stock.book_value
        if is_zero_money(book_value) or is_zero_money(self.price):
            return ZERO_MONEY
        return percentage(self.profit, book_value)

    def __str__(self) -> str:
        return (
            f"Quote {{\n"
            f"Stock: {self.stock.to_text()}\n"
            f"Opening Price: {self.opening_price}\n"
            f"Current Price: {self.price}\n"
            f"Change: {self.change}\n"
            f"%Change: {self.percent_change}\n"
            f"%Profit: {self.percent_profit}\n"
            f"}}"
        )


def _is_valid_name(name) -> bool:
    return isinstance(name, str) and bool(name.strip())


def _is_valid_ticker(ticker) -> bool:
    if not isinstance(ticker, str):
        return False
    if not 1 <= len(ticker.strip()) <= TICKER_MAX_LENGTH:
        return False
    return all(char.isalpha() or char in TICKER_EXTRA_CHARS for char in ticker)
