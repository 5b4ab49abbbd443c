import io
from decimal import Decimal

from quotewatch.console.formatters import format_money, format_percent, format_quote_table, format_summary
from quotewatch.console.view import ConsoleQuoteView
from quotewatch.domain.models import Quote
from quotewatch.domain.services.portfolio_summary import PortfolioSummary
from quotewatch.main import main, parse_args


class TestFormatters:

    def test_money_and_percent(self):
        assert format_money(Decimal("1234.5")) == "1,234.50"
        assert format_percent(Decimal("-0.14")) == "-0.14%"
        assert format_percent(Decimal("20")) == "+20.00%"

    def test_quote_table_has_a_row_per_quote(self, stocks):
        quotes = [Quote(stock, Decimal("12.00"), Decimal("-0.75")) for stock in stocks]
        lines = format_quote_table(quotes).splitlines()

        assert lines[0].startswith("Ticker")
        assert set(lines[1]) <= {"-", " "}
        assert len(lines) == 2 + len(stocks)
        assert lines[2].startswith("SUNW")
        assert "Toronto Stock Exchange" in lines[3]

    def test_summary_line(self):
        summary = PortfolioSummary(book_value=Decimal("525.00"), current_value=Decimal("630.00"))
        text = format_summary(summary)
        assert "Book Value: 525.00" in text
        assert "Profit: 105.00" in text
        assert "% Profit: +20.00%" in text


class TestConsoleView:

    def test_status_is_remembered_and_printed(self):
        stream = io.StringIO()
        view = ConsoleQuoteView(stream)
        view.show_status("Done.")

        assert view.last_status == "Done."
        assert stream.getvalue() == "Status: Done.\n"

    def test_default_stream_is_current_stdout(self, capsys):
        view = ConsoleQuoteView()
        view.show_status("Fetching quotes...")

        assert capsys.readouterr().out == "Status: Fetching quotes...\n"


class TestMain:

    def test_parse_args(self):
        args = parse_args(["--stock", "IBM:Ibm:NYSE Stock Exchanges:100:10.00", "--minutes", "5", "--once"])
        assert args.stock == ["IBM:Ibm:NYSE Stock Exchanges:100:10.00"]
        assert args.minutes == 5
        assert args.once is True
        assert args.offline is False

    def test_offline_once(self, capsys):
        code = main(["--offline", "--once", "--stock", "IBM:Ibm:NYSE Stock Exchanges:100:10.00"])
        out = capsys.readouterr().out

        assert code == 0
        assert "Status: Fetching quotes..." in out
        assert "Status: Done." in out
        assert "Current Value: 1,000.00" in out

    def test_invalid_stock_is_rejected(self):
        assert main(["--offline", "--once", "--stock", "IBM:Ibm:Nowhere:100:10.00"]) == 2

    def test_duplicate_stock_is_rejected(self):
        stock = "IBM:Ibm:NYSE Stock Exchanges:100:10.00"
        assert main(["--offline", "--once", "--stock", stock, "--stock", stock]) == 2
