"""
Market data provider protocols for type hints.
"""

from __future__ import annotations

from typing import List, Protocol

from portfolio_engine.domain.models import Quote, SearchResult


class QuoteProvider(Protocol):
    async def fetch_quote(self, symbol: str) -> Quote:
        """Raises QuoteFetchError."""
        ...


class SymbolSearchProvider(Protocol):
    async def search_symbols(self, query: str, limit: int) -> List[SearchResult]:
        """Raises SearchError. No throttling; callers debounce."""
        ...


class MarketDataProvider(QuoteProvider, SymbolSearchProvider, Protocol):
    async def aclose(self) -> None:
        ...
