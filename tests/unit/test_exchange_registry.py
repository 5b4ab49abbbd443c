import pytest

from quotewatch.domain.errors import UnknownExchangeError, ValidationError
from quotewatch.domain.models import Exchange
from quotewatch.services.exchange_registry import ExchangeRegistry


class TestExchangeRegistry:
    """Loading and looking up the exchange table"""

    def test_value_from_known_names(self, registry):
        for name in ("Nasdaq Stock Exchange", "Toronto Stock Exchange", "NYSE Stock Exchanges"):
            assert registry.value_from(name).name == name

    def test_unknown_name_is_an_error(self, registry):
        with pytest.raises(UnknownExchangeError):
            registry.value_from("Moon Stock Exchange")

    def test_lookup_is_exact(self, registry):
        with pytest.raises(UnknownExchangeError):
            registry.value_from("nasdaq stock exchange")

    def test_suffix(self, nasdaq, tse):
        assert nasdaq.ticker_suffix == ""
        assert tse.ticker_suffix == "TO"

    def test_str_is_full_name(self, nasdaq, tse):
        assert str(nasdaq) == "Nasdaq Stock Exchange"
        assert str(tse) == "Toronto Stock Exchange"

    def test_order_follows_registration(self, nyse, nasdaq, tse):
        assert not nasdaq < nasdaq
        assert nasdaq < tse
        assert nasdaq > nyse
        assert sorted([tse, nasdaq, nyse]) == [nyse, nasdaq, tse]

    def test_values_are_read_only_and_ordered(self, registry):
        values = registry.values
        assert isinstance(values, tuple)
        assert [exchange.order for exchange in values] == list(range(len(registry)))

    def test_from_lines_skips_comments_and_blank_lines(self):
        registry = ExchangeRegistry.from_lines([
            "# comment\n",
            "NYSE Stock Exchanges\tNYS\tN/A\n",
            "\n",
            "London Stock Exchange\tLSE\t.L\n",
        ])
        assert [exchange.name for exchange in registry] == [
            "NYSE Stock Exchanges",
            "London Stock Exchange",
        ]
        assert registry.value_from("London Stock Exchange").ticker_suffix == "L"
        assert "NYSE Stock Exchanges" in registry
        assert "# comment" not in registry

    def test_malformed_line_names_line_number(self):
        with pytest.raises(ValidationError, match="line 2"):
            ExchangeRegistry.from_lines(["# header", "Only A Name"])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            ExchangeRegistry.from_lines(["A\tA\tN/A", "A\tB\t.B"])

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "exchanges.txt"
        path.write_text("# test\nParis Stock Exchange\tPAR\t.PA\n", encoding="utf-8")
        registry = ExchangeRegistry.load(path)
        assert len(registry) == 1
        assert registry.value_from("Paris Stock Exchange") == Exchange("Paris Stock Exchange", "PA")

    def test_exchange_requires_name(self):
        with pytest.raises(ValidationError):
            Exchange("  ", "TO")
