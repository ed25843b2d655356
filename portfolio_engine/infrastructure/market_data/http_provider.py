"""
HTTP Market Data Provider
Quote and symbol search against the stock API endpoints
"""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote as url_quote

import httpx
from pydantic import ValidationError as PayloadValidationError

from portfolio_engine.domain.errors import QuoteFetchError, SearchError
from portfolio_engine.domain.models import Quote, SearchResult
from portfolio_engine.domain.schemas.market_data import QuoteEnvelope, SearchEnvelope

logger = logging.getLogger(__name__)


class _TransportFailure(Exception):
    def __init__(self, reason: str, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.reason = reason
        self.detail = detail
        self.status_code = status_code


class HttpMarketDataProvider:
    """
    Client for:
        GET {base}/api/stock/{symbol}/quote
        GET {base}/api/stocks/search?q={query}&limit={n}

    Every failure is reported as a typed error carrying the symbol/query.
    """

    HEADERS = {
        "Accept": "application/json",
    }

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self.HEADERS,
                timeout=self.timeout_seconds,
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request_json(self, path: str, params: Optional[dict] = None) -> dict:
        client = self._get_client()
        url = f"{self.base_url}{path}"
        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise _TransportFailure("timeout", f"timed out after {self.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise _TransportFailure("network", str(exc) or type(exc).__name__) from exc

        if response.status_code == 404:
            raise _TransportFailure("not_found", "HTTP 404", status_code=404)
        if response.status_code < 200 or response.status_code >= 300:
            raise _TransportFailure(
                "http_status",
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise _TransportFailure("invalid_payload", "response is not JSON") from exc
        if not isinstance(payload, dict):
            raise _TransportFailure("invalid_payload", "response is not a JSON object")
        return payload

    # ------------------------------------------------------------------
    # QUOTES
    # ------------------------------------------------------------------

    async def fetch_quote(self, symbol: str) -> Quote:
        try:
            payload = await self._request_json(f"/api/stock/{url_quote(symbol, safe='')}/quote")
        except _TransportFailure as exc:
            logger.debug("Quote request failed for %s: %s", symbol, exc.detail)
            raise QuoteFetchError(symbol, exc.reason, exc.detail, exc.status_code) from exc

        try:
            envelope = QuoteEnvelope.model_validate(payload)
        except PayloadValidationError as exc:
            raise QuoteFetchError(symbol, "invalid_payload", "malformed quote data") from exc

        if not envelope.success or envelope.data is None:
            raise QuoteFetchError(symbol, "not_found", envelope.error or "no quote data")

        data = envelope.data
        price = data.regularMarketPrice
        previous_close = data.regularMarketPreviousClose or price
        change = data.regularMarketChange
        if change is None:
            change = price - previous_close
        change_percent = data.regularMarketChangePercent
        if change_percent is None:
            change_percent = (change / previous_close * 100.0) if previous_close else 0.0

        return Quote(
            symbol=(data.symbol or symbol).upper(),
            price=price,
            previous_close=previous_close,
            change=change,
            change_percent=change_percent,
            name=data.shortName or data.longName,
            market_cap=data.marketCap,
            pe=data.trailingPE,
        )

    # ------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------

    async def search_symbols(self, query: str, limit: int) -> List[SearchResult]:
        try:
            payload = await self._request_json(
                "/api/stocks/search",
                params={"q": query, "limit": limit},
            )
        except _TransportFailure as exc:
            logger.debug("Search request failed for %r: %s", query, exc.detail)
            raise SearchError(query, exc.reason, "Search is unavailable right now") from exc

        try:
            envelope = SearchEnvelope.model_validate(payload)
        except PayloadValidationError as exc:
            raise SearchError(query, "invalid_payload", "Search returned unexpected data") from exc

        if not envelope.success:
            raise SearchError(query, "provider_error", envelope.error or "Search failed")

        return [
            SearchResult(symbol=item.symbol, name=item.display_name, exchange=item.exchange)
            for item in envelope.data[:limit]
        ]
