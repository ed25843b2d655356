"""
Provider chain - try primary, then fallbacks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from portfolio_engine.domain.errors import QuoteFetchError, SearchError
from portfolio_engine.domain.models import Quote, SearchResult
from portfolio_engine.infrastructure.market_data.types import MarketDataProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedProvider:
    name: str
    provider: MarketDataProvider


class ChainedMarketDataProvider:
    def __init__(self, providers: List[NamedProvider]):
        if not providers:
            raise ValueError("At least one market data provider is required")
        self.providers = providers
        self.last_price_sources: Dict[str, str] = {}
        self.last_search_source: Optional[str] = None

    def get_last_sources(self) -> Dict[str, object]:
        return {
            "prices": dict(self.last_price_sources),
            "search": self.last_search_source,
        }

    async def fetch_quote(self, symbol: str) -> Quote:
        last_error: Optional[QuoteFetchError] = None
        for named in self.providers:
            try:
                quote = await named.provider.fetch_quote(symbol)
            except QuoteFetchError as exc:
                logger.debug("Provider %s could not quote %s: %s", named.name, symbol, exc)
                last_error = exc
                continue
            self.last_price_sources[symbol] = named.name
            return quote
        raise last_error  # type: ignore[misc]

    async def search_symbols(self, query: str, limit: int) -> List[SearchResult]:
        last_error: Optional[SearchError] = None
        for named in self.providers:
            try:
                results = await named.provider.search_symbols(query, limit)
            except SearchError as exc:
                logger.debug("Provider %s search failed for %r: %s", named.name, query, exc)
                last_error = exc
                continue
            self.last_search_source = named.name
            return results
        raise last_error  # type: ignore[misc]

    async def aclose(self) -> None:
        for named in self.providers:
            await named.provider.aclose()
