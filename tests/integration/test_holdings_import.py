import io

import pytest

from portfolio_engine.domain.models import PriceStatus
from portfolio_engine.services.csv_import import ImportRow

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_import_reports_bad_rows_and_commits_once(store):
    snapshots = []
    store.subscribe(snapshots.append)
    rows = [
        ImportRow(line=2, symbol="aapl", quantity="10", avg_buy_price="150"),
        ImportRow(line=3, symbol="MSFT", quantity="0", avg_buy_price="300"),
        ImportRow(line=4, symbol="GOOGL", quantity="2", avg_buy_price="140", name="Alphabet"),
        ImportRow(line=5, symbol="AAPL", quantity="1", avg_buy_price="1"),
        ImportRow(line=6, symbol="NEWCO", quantity="3", avg_buy_price="12"),
    ]

    report = await store.import_holdings(rows)

    assert report.imported == 3
    assert report.failed == 2
    assert report.errors == (
        "Line 3: Must be greater than 0",
        "Line 5: AAPL is already in the portfolio",
    )
    assert [h.symbol for h in store.holdings] == ["AAPL", "GOOGL", "NEWCO"]
    assert store.holdings[2].price_status == PriceStatus.PENDING
    assert {len(s.holdings) for s in snapshots} == {0, 3}


@pytest.mark.asyncio
async def test_import_merges_duplicates_under_merge_policy(make_store, market):
    store = make_store(duplicate_policy="merge")
    await store.add_holding("AAPL", 10, 150)

    report = await store.import_holdings(
        [ImportRow(line=2, symbol="AAPL", quantity="10", avg_buy_price="170")]
    )

    assert report.imported == 1
    assert store.holdings[0].quantity == 20
    assert store.holdings[0].avg_buy_price == pytest.approx(160.0)
    # already-held symbols are not re-quoted during import
    assert market.quote_calls == ["AAPL"]


@pytest.mark.asyncio
async def test_import_can_replace_existing_holdings(store):
    await store.add_holding("AAPL", 10, 150)

    report = await store.import_holdings(
        [ImportRow(line=2, symbol="MSFT", quantity="5", avg_buy_price="300")],
        clear_existing=True,
    )

    assert report.imported == 1
    assert [h.symbol for h in store.holdings] == ["MSFT"]
    assert store.summary.total_value == pytest.approx(2050.0)


@pytest.mark.asyncio
async def test_import_csv_combines_parse_and_row_errors(store):
    source = io.StringIO(
        "Symbol,Quantity,Avg Buy Price\n"
        "AAPL,10,150\n"
        ",5,10\n"
        "MSFT,abc,300\n"
    )

    report = await store.import_csv(source)

    assert report.imported == 1
    assert report.failed == 2
    assert report.errors == ("Line 3: missing symbol", "Line 4: Invalid number")
    assert store.summary.holdings_count == 1


@pytest.mark.asyncio
async def test_import_csv_from_missing_path_reports_error(store, tmp_path):
    await store.add_holding("AAPL", 10, 150)
    version = store.snapshot.version

    report = await store.import_csv(tmp_path / "missing.csv")

    assert not report.ok
    assert report.imported == 0
    assert report.failed == 1
    assert report.errors[0].startswith("Could not read CSV")
    assert [h.symbol for h in store.holdings] == ["AAPL"]
    assert store.snapshot.version == version
