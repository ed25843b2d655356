import io

from portfolio_engine.services.csv_import import parse_holdings_csv


def test_parse_csv_with_loose_headers():
    source = io.StringIO(
        "Ticker, Shares, Avg Buy Price, Name\n"
        "aapl, 10, 150, Apple Inc.\n"
        "MSFT,5,300.5,\n"
    )

    result = parse_holdings_csv(source)

    assert result.errors == []
    assert [(r.line, r.symbol, r.quantity, r.avg_buy_price, r.name) for r in result.rows] == [
        (2, "aapl", "10", "150", "Apple Inc."),
        (3, "MSFT", "5", "300.5", None),
    ]


def test_parse_csv_reports_rows_without_symbol():
    source = io.StringIO("symbol,quantity,avg_buy_price\n,3,10\nGOOGL,2,140\n")

    result = parse_holdings_csv(source)

    assert [r.symbol for r in result.rows] == ["GOOGL"]
    assert result.errors == ["Line 2: missing symbol"]


def test_parse_csv_missing_required_columns():
    result = parse_holdings_csv(io.StringIO("symbol,name\nAAPL,Apple\n"))

    assert result.rows == []
    assert result.errors == ["Missing required columns: quantity, avg_buy_price"]


def test_parse_csv_empty_input():
    result = parse_holdings_csv(io.StringIO(""))

    assert result.rows == []
    assert result.errors and result.errors[0].startswith("Could not read CSV")


def test_parse_csv_keeps_raw_numeric_text_for_validation(tmp_path):
    path = tmp_path / "holdings.csv"
    path.write_text("symbol,qty,price\nAAPL,ten,150\n")

    result = parse_holdings_csv(path)

    assert result.rows[0].quantity == "ten"


def test_parse_csv_missing_file(tmp_path):
    result = parse_holdings_csv(tmp_path / "absent.csv")

    assert result.rows == []
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Could not read CSV")
