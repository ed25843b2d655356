import asyncio
from itertools import count
from typing import Dict, List, Union

import pytest

from portfolio_engine.domain.errors import QuoteFetchError
from portfolio_engine.domain.models import Quote, SearchResult
from portfolio_engine.services.holdings_store import HoldingsStore


def build_quote(symbol: str, price: float, previous_close: float = None, name: str = None) -> Quote:
    previous_close = price if previous_close is None else previous_close
    change = price - previous_close
    return Quote(
        symbol=symbol,
        price=price,
        previous_close=previous_close,
        change=change,
        change_percent=change / previous_close * 100.0 if previous_close else 0.0,
        name=name,
    )


class StubMarketData:
    """
    In-memory quote + search provider.

    quotes maps symbol -> Quote or exception instance; unknown symbols fail
    with not_found. hold(symbol) blocks the next fetch of that symbol until
    the returned event is set; the outcome is read when the fetch starts.
    """

    def __init__(self, quotes=None, search_results=None):
        self.quotes: Dict[str, Union[Quote, Exception]] = dict(quotes or {})
        self.search_results: Dict[str, Union[List[SearchResult], Exception]] = dict(search_results or {})
        self.search_delays: Dict[str, float] = {}
        self.quote_calls: List[str] = []
        self.search_calls: List[str] = []
        self._gates: Dict[str, asyncio.Event] = {}
        self.closed = False

    def hold(self, symbol: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[symbol] = gate
        return gate

    async def fetch_quote(self, symbol: str) -> Quote:
        self.quote_calls.append(symbol)
        outcome = self.quotes.get(symbol)
        gate = self._gates.pop(symbol, None)
        if gate is not None:
            await gate.wait()
        if outcome is None:
            raise QuoteFetchError(symbol, "not_found", "unknown symbol")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def search_symbols(self, query: str, limit: int) -> List[SearchResult]:
        self.search_calls.append(query)
        delay = self.search_delays.get(query)
        if delay:
            await asyncio.sleep(delay)
        outcome = self.search_results.get(query, [])
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)[:limit]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def quote_factory():
    return build_quote


@pytest.fixture
def market():
    return StubMarketData(
        quotes={
            "AAPL": build_quote("AAPL", 165.0, 160.0, "Apple Inc."),
            "MSFT": build_quote("MSFT", 410.0, 400.0, "Microsoft Corporation"),
            "GOOGL": build_quote("GOOGL", 140.0, 142.0, "Alphabet Inc."),
        },
        search_results={
            "app": [
                SearchResult(symbol="AAPL", name="Apple Inc.", exchange="NMS"),
                SearchResult(symbol="APP", name="AppLovin Corporation", exchange="NMS"),
            ],
            "micro": [SearchResult(symbol="MSFT", name="Microsoft Corporation", exchange="NMS")],
        },
    )


@pytest.fixture
def make_store(market):
    def _make(**kwargs) -> HoldingsStore:
        ids = count(1)
        kwargs.setdefault("search_debounce_seconds", 0.01)
        kwargs.setdefault("quote_timeout_seconds", 1.0)
        kwargs.setdefault("id_factory", lambda: f"h{next(ids)}")
        return HoldingsStore(market, market, **kwargs)

    return _make


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def eventually():
    """Yield to the loop until predicate() holds."""
    async def _wait(predicate, attempts: int = 500) -> None:
        for _ in range(attempts):
            if predicate():
                return
            await asyncio.sleep(0)
        raise AssertionError("condition was never reached")

    return _wait
