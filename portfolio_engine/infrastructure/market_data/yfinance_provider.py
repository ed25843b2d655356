"""
YFinance Market Data Provider
Yahoo Finance fallback for quotes and symbol search.
Async-safe via thread offloading
"""

import asyncio
import logging
import math
from typing import List, Optional

import yfinance as yf

from portfolio_engine.domain.errors import QuoteFetchError, SearchError
from portfolio_engine.domain.models import Quote, SearchResult

logger = logging.getLogger(__name__)


def _positive(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


class YFinanceProvider:
    """
    Yahoo Finance data provider.

    yfinance is blocking, so every call runs in a worker thread bounded by
    timeout_seconds.
    """

    def __init__(self, timeout_seconds: float = 10.0):
        self.timeout_seconds = timeout_seconds

    async def aclose(self) -> None:
        return None

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    @staticmethod
    def _load_quote(symbol: str) -> dict:
        ticker = yf.Ticker(symbol)
        info = ticker.fast_info
        return {
            "price": info.last_price,
            "previous_close": info.previous_close,
            "market_cap": info.market_cap,
        }

    @staticmethod
    def _load_search(query: str, limit: int) -> list:
        return list(yf.Search(query, max_results=limit).quotes)

    async def _offload(self, func, *args):
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args),
            timeout=self.timeout_seconds,
        )

    # ------------------------------------------------------------------
    # QUOTES
    # ------------------------------------------------------------------

    async def fetch_quote(self, symbol: str) -> Quote:
        try:
            raw = await self._offload(self._load_quote, symbol)
        except asyncio.TimeoutError as exc:
            raise QuoteFetchError(symbol, "timeout", f"timed out after {self.timeout_seconds}s") from exc
        except Exception as exc:
            logger.debug("yfinance quote failed for %s: %s", symbol, exc)
            raise QuoteFetchError(symbol, "network", str(exc) or type(exc).__name__) from exc

        price = _positive(raw.get("price"))
        if price is None:
            raise QuoteFetchError(symbol, "not_found", "no last price")
        previous_close = _positive(raw.get("previous_close")) or price
        change = price - previous_close

        return Quote(
            symbol=symbol.upper(),
            price=price,
            previous_close=previous_close,
            change=change,
            change_percent=change / previous_close * 100.0,
            market_cap=_positive(raw.get("market_cap")),
        )

    # ------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------

    async def search_symbols(self, query: str, limit: int) -> List[SearchResult]:
        try:
            quotes = await self._offload(self._load_search, query, limit)
        except asyncio.TimeoutError as exc:
            raise SearchError(query, "timeout", "Search timed out") from exc
        except Exception as exc:
            logger.debug("yfinance search failed for %r: %s", query, exc)
            raise SearchError(query, "network", "Search is unavailable right now") from exc

        results: List[SearchResult] = []
        for item in quotes:
            symbol = item.get("symbol")
            if not symbol:
                continue
            results.append(
                SearchResult(
                    symbol=symbol,
                    name=item.get("longname") or item.get("shortname") or symbol,
                    exchange=item.get("exchange"),
                )
            )
        return results[:limit]
