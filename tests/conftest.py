from decimal import Decimal

import pytest

from quotewatch.domain.models import Stock
from quotewatch.services.exchange_registry import ExchangeRegistry


@pytest.fixture(scope="session")
def registry() -> ExchangeRegistry:
    return ExchangeRegistry.load_default()


@pytest.fixture()
def nyse(registry):
    return registry.value_from("NYSE Stock Exchanges")


@pytest.fixture()
def nasdaq(registry):
    return registry.value_from("Nasdaq Stock Exchange")


@pytest.fixture()
def tse(registry):
    return registry.value_from("Toronto Stock Exchange")


@pytest.fixture()
def stocks(nyse, nasdaq, tse):
    """A small portfolio mixing suffixed and unsuffixed exchanges, and indices"""
    return [
        Stock("Sun", "SUNW", nasdaq, 100, Decimal("10.00")),
        Stock("Cdn Tire", "CTR", tse, 100, Decimal("10.00")),
        Stock("Ibm", "IBM", nyse, 100, Decimal("10.00")),
        Stock("S&P 500", "^GSPC", nyse, 0, Decimal("0.00")),
        Stock("Nasdaq", "^IXIC", nasdaq, 0, Decimal("0.00")),
    ]
