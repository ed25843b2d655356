import pytest

from portfolio_engine.config import Settings
from portfolio_engine.domain.errors import QuoteFetchError, SearchError
from portfolio_engine.domain.models import Quote, SearchResult
from portfolio_engine.infrastructure.market_data.http_provider import HttpMarketDataProvider
from portfolio_engine.infrastructure.market_data.provider_chain import (
    ChainedMarketDataProvider,
    NamedProvider,
)
from portfolio_engine.infrastructure.market_data.provider_factory import (
    _build_provider,
    get_market_data_provider,
)


class FailingProvider:
    def __init__(self):
        self.closed = False

    async def fetch_quote(self, symbol):
        raise QuoteFetchError(symbol, "network", "down")

    async def search_symbols(self, query, limit):
        raise SearchError(query, "network", "down")

    async def aclose(self):
        self.closed = True


class WorkingProvider(FailingProvider):
    async def fetch_quote(self, symbol):
        return Quote(symbol=symbol, price=10.0, previous_close=9.0)

    async def search_symbols(self, query, limit):
        return [SearchResult(symbol="ABC", name="Abc Corp")]


@pytest.mark.asyncio
async def test_chain_falls_back_and_records_source():
    chain = ChainedMarketDataProvider(
        [NamedProvider("http", FailingProvider()), NamedProvider("yfinance", WorkingProvider())]
    )

    quote = await chain.fetch_quote("ABC")
    results = await chain.search_symbols("abc", 5)

    assert quote.price == 10.0
    assert results[0].symbol == "ABC"
    assert chain.get_last_sources() == {"prices": {"ABC": "yfinance"}, "search": "yfinance"}


@pytest.mark.asyncio
async def test_chain_raises_last_error_when_all_fail():
    first, second = FailingProvider(), FailingProvider()
    chain = ChainedMarketDataProvider([NamedProvider("a", first), NamedProvider("b", second)])

    with pytest.raises(QuoteFetchError):
        await chain.fetch_quote("ABC")
    with pytest.raises(SearchError):
        await chain.search_symbols("abc", 5)

    await chain.aclose()
    assert first.closed and second.closed


def test_chain_requires_a_provider():
    with pytest.raises(ValueError):
        ChainedMarketDataProvider([])


def test_factory_builds_primary_and_skips_unknown_fallbacks():
    config = Settings(
        QUOTE_API_BASE_URL="http://quotes.test",
        MARKET_DATA_PROVIDER="http",
        MARKET_DATA_FALLBACK_PROVIDERS="nope, http",
    )

    chain = get_market_data_provider(config)

    assert [p.name for p in chain.providers] == ["http"]
    assert isinstance(chain.providers[0].provider, HttpMarketDataProvider)
    assert chain.providers[0].provider.base_url == "http://quotes.test"


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        _build_provider("bloomberg", Settings())
