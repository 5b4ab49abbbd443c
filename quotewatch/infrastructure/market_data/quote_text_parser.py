"""
Quote service text grammar.

One response line per requested ticker, comma separated:

    "SUNW",4.14,"12/3/2002","4:00pm",-0.15,4.56,4.58,4.12,46700

ticker, last trade, date, time, change, open, high, low, volume.
Only ticker, last trade and change are used.

Prices come in four forms:
    78.625      plain decimal
    78 5/8      dollars and a fraction
    5/8         bare fraction
    .01         leading-dot decimal

Changes are a sign followed by a price; an unsigned change (``0``, ``0.00``,
seen on days without trading) is exactly zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import List

from quotewatch.domain.errors import ParseAnomaly
from quotewatch.domain.models import EXTRA_DECIMALS, MONEY_DECIMALS

FIELD_DELIMITER = ","
QUOTE_MARK = '"'
FRACTION_MARK = "/"
PLUS_SIGN = "+"
MINUS_SIGN = "-"

# Positions within a response line
TICKER_FIELD = 0
PRICE_FIELD = 1
CHANGE_FIELD = 4

_EXTRA_QUANTUM = Decimal(1).scaleb(-EXTRA_DECIMALS)
_MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_DECIMALS)

# Ties in parsed prices round up: "78.625" reads as 78.63.
PRICE_ROUNDING = ROUND_HALF_UP


@dataclass(frozen=True)
class QuoteLine:
    """The consumed fields of one response line"""
    ticker: str
    price: Decimal
    change: Decimal
    change_readable: bool = True


def parse_ticker(token: str) -> str:
    """Strip every quotation mark from ``"JAVA"``"""
    return token.replace(QUOTE_MARK, "").strip()


def parse_price(text: str) -> Decimal:
    """Parse any of the four price forms, rounded to 2 decimals"""
    return _money(_parse_amount(text))


def parse_price_change(text: str) -> Decimal:
    """Parse a signed price change, rounded to 2 decimals"""
    text = text.strip()
    if text.startswith(PLUS_SIGN):
        return _money(_parse_amount(text[1:]))
    if text.startswith(MINUS_SIGN):
        return _money(-_parse_amount(text[1:]))
    return _money(Decimal(0))


def parse_quote_line(line: str) -> QuoteLine:
    """
    Parse the consumed fields of one response line.

    A short line or an unreadable price raises ParseAnomaly. An unreadable
    change keeps the price; the change reads as zero and ``change_readable``
    is False.
    """
    fields = line.split(FIELD_DELIMITER)
    if len(fields) <= CHANGE_FIELD:
        raise ParseAnomaly(f"Expected at least {CHANGE_FIELD + 1} fields, got {len(fields)}: {line!r}")
    ticker = parse_ticker(fields[TICKER_FIELD])
    price = parse_price(fields[PRICE_FIELD])
    try:
        change = parse_price_change(fields[CHANGE_FIELD])
    except ParseAnomaly:
        return QuoteLine(ticker, price, _money(Decimal(0)), change_readable=False)
    return QuoteLine(ticker, price, change)


def _parse_amount(text: str) -> Decimal:
    text = text.strip()
    if FRACTION_MARK not in text:
        return _decimal(text)

    dollars = Decimal(0)
    numerator = Decimal(0)
    denominator = Decimal(0)
    for token in text.split():
        if FRACTION_MARK in token:
            parts: List[str] = token.split(FRACTION_MARK)
            if len(parts) != 2:
                raise ParseAnomaly(f"Malformed fraction: {text!r}")
            numerator = _decimal(parts[0])
            denominator = _decimal(parts[1])
        else:
            dollars = _decimal(token)

    if denominator == 0:
        return dollars
    try:
        cents = (numerator / denominator).quantize(_EXTRA_QUANTUM, rounding=ROUND_HALF_EVEN)
    except InvalidOperation as exc:
        raise ParseAnomaly(f"Fraction out of range: {text!r}") from exc
    return dollars + cents


def _decimal(token: str) -> Decimal:
    try:
        value = Decimal(token)
    except InvalidOperation as exc:
        raise ParseAnomaly(f"Not a number: {token!r}") from exc
    if not value.is_finite():
        raise ParseAnomaly(f"Not a finite number: {token!r}")
    return value


def _money(value: Decimal) -> Decimal:
    try:
        return value.quantize(_MONEY_QUANTUM, rounding=PRICE_ROUNDING)
    except InvalidOperation as exc:
        raise ParseAnomaly(f"Amount out of range: {value}") from exc
