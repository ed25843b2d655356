import asyncio

import pytest

from portfolio_engine.domain.errors import QuoteFetchError
from portfolio_engine.domain.models import PriceStatus

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_refresh_updates_all_prices_in_one_pass(store, market, quote_factory):
    await store.add_holding("AAPL", 10, 150)
    await store.add_holding("MSFT", 5, 300)
    market.quotes["AAPL"] = quote_factory("AAPL", 170.0, 165.0)
    market.quotes["MSFT"] = quote_factory("MSFT", 420.0, 410.0)
    snapshots = []
    store.subscribe(snapshots.append)

    report = await store.refresh_prices()

    assert report.applied
    assert report.updated == ("AAPL", "MSFT")
    assert report.failed == {}
    assert store.summary.total_value == pytest.approx(10 * 170.0 + 5 * 420.0)
    assert store.snapshot.last_refresh is not None
    assert store.error is None
    # refreshing flag on, then one snapshot with every new price
    assert snapshots[0].is_refreshing is True
    assert snapshots[-1].is_refreshing is False
    assert {h.current_price for h in snapshots[-1].holdings} == {170.0, 420.0}


@pytest.mark.asyncio
async def test_partial_refresh_failure_marks_stale(store, market, quote_factory):
    await store.add_holding("AAPL", 10, 150)
    await store.add_holding("MSFT", 5, 300)
    market.quotes["AAPL"] = quote_factory("AAPL", 170.0, 165.0)
    market.quotes["MSFT"] = QuoteFetchError("MSFT", "timeout", "slow upstream")

    report = await store.refresh_prices()

    by_symbol = {h.symbol: h for h in store.holdings}
    assert report.applied
    assert report.updated == ("AAPL",)
    assert set(report.failed) == {"MSFT"}
    assert by_symbol["AAPL"].price_status == PriceStatus.LIVE
    assert by_symbol["AAPL"].current_price == 170.0
    assert by_symbol["MSFT"].price_status == PriceStatus.STALE
    assert by_symbol["MSFT"].current_price == 410.0
    assert store.error == "Price refresh failed for: MSFT"
    assert store.summary.total_value == pytest.approx(10 * 170.0 + 5 * 410.0)


@pytest.mark.asyncio
async def test_superseded_refresh_is_discarded(store, market, quote_factory, eventually):
    await store.add_holding("AAPL", 10, 150)
    market.quotes["AAPL"] = quote_factory("AAPL", 170.0, 165.0)
    gate = market.hold("AAPL")

    first = asyncio.create_task(store.refresh_prices())
    await eventually(lambda: market.quote_calls.count("AAPL") == 2)
    assert store.is_refreshing

    market.quotes["AAPL"] = quote_factory("AAPL", 180.0, 165.0)
    second = await store.refresh_prices()
    gate.set()
    first_report = await first

    assert second.applied
    assert first_report.applied is False
    assert first_report.epoch < second.epoch
    assert store.holdings[0].current_price == 180.0
    assert store.is_refreshing is False


@pytest.mark.asyncio
async def test_refresh_applies_to_collection_as_it_is_at_apply_time(store, market, eventually):
    aapl = await store.add_holding("AAPL", 10, 150)
    await store.add_holding("MSFT", 5, 300)
    gate = market.hold("MSFT")

    refresh = asyncio.create_task(store.refresh_prices())
    await eventually(lambda: market.quote_calls.count("MSFT") == 2)
    await store.delete_holding(aapl.holding.id)
    await store.add_holding("GOOGL", 1, 100)
    gate.set()
    report = await refresh

    assert report.applied
    assert [h.symbol for h in store.holdings] == ["MSFT", "GOOGL"]
    assert store.summary.holdings_count == 2


@pytest.mark.asyncio
async def test_refresh_with_no_holdings(store, market):
    report = await store.refresh_prices()

    assert report.applied
    assert report.updated == ()
    assert market.quote_calls == []
    assert store.snapshot.last_refresh is not None


@pytest.mark.asyncio
async def test_reset_invalidates_in_flight_refresh(store, market, quote_factory, eventually):
    await store.add_holding("AAPL", 10, 150)
    gate = market.hold("AAPL")

    refresh = asyncio.create_task(store.refresh_prices())
    await eventually(lambda: market.quote_calls.count("AAPL") == 2)
    store.reset()
    gate.set()
    report = await refresh

    assert report.applied is False
    assert store.holdings == ()
    assert store.is_refreshing is False


@pytest.mark.asyncio
async def test_refresh_does_not_overwrite_newer_quote_from_edit(store, market, quote_factory, eventually):
    added = await store.add_holding("AAPL", 10, 150)
    market.quotes["AAPL"] = quote_factory("AAPL", 170.0, 165.0)
    gate = market.hold("AAPL")

    refresh = asyncio.create_task(store.refresh_prices())
    await eventually(lambda: market.quote_calls.count("AAPL") == 2)
    market.quotes["AAPL"] = quote_factory("AAPL", 200.0, 165.0)
    await store.update_holding(added.holding.id, quantity=10, refresh_price=True)
    gate.set()
    report = await refresh

    assert report.applied
    holding = store.holdings[0]
    assert holding.current_price == 200.0
    assert holding.price_status == PriceStatus.LIVE
    assert store.summary.total_value == pytest.approx(2000.0)


@pytest.mark.asyncio
async def test_refresh_does_not_overwrite_re_added_holding(store, market, quote_factory, eventually):
    added = await store.add_holding("AAPL", 10, 150)
    market.quotes["AAPL"] = quote_factory("AAPL", 170.0, 165.0)
    gate = market.hold("AAPL")

    refresh = asyncio.create_task(store.refresh_prices())
    await eventually(lambda: market.quote_calls.count("AAPL") == 2)
    await store.delete_holding(added.holding.id)
    market.quotes["AAPL"] = quote_factory("AAPL", 200.0, 165.0)
    await store.add_holding("AAPL", 1, 100)
    gate.set()
    await refresh

    assert [h.current_price for h in store.holdings] == [200.0]


@pytest.mark.asyncio
async def test_failed_refresh_does_not_mark_newer_quote_stale(store, market, quote_factory, eventually):
    added = await store.add_holding("AAPL", 10, 150)
    market.quotes["AAPL"] = QuoteFetchError("AAPL", "http_status", "HTTP 503", 503)
    gate = market.hold("AAPL")

    refresh = asyncio.create_task(store.refresh_prices())
    await eventually(lambda: market.quote_calls.count("AAPL") == 2)
    market.quotes["AAPL"] = quote_factory("AAPL", 180.0, 165.0)
    await store.update_holding(added.holding.id, quantity=10, refresh_price=True)
    gate.set()
    report = await refresh

    assert set(report.failed) == {"AAPL"}
    assert store.holdings[0].price_status == PriceStatus.LIVE
    assert store.holdings[0].current_price == 180.0


@pytest.mark.asyncio
async def test_refresh_times_out_unresponsive_quote(make_store, market):
    store = make_store(quote_timeout_seconds=0.05)
    await store.add_holding("AAPL", 10, 150)
    await store.add_holding("MSFT", 5, 300)
    market.hold("MSFT")

    report = await store.refresh_prices()

    by_symbol = {h.symbol: h for h in store.holdings}
    assert report.applied
    assert report.updated == ("AAPL",)
    assert set(report.failed) == {"MSFT"}
    assert by_symbol["MSFT"].price_status == PriceStatus.STALE
    assert by_symbol["MSFT"].current_price == 410.0
    assert by_symbol["AAPL"].price_status == PriceStatus.LIVE
    assert store.error == "Price refresh failed for: MSFT"
    assert store.is_refreshing is False
