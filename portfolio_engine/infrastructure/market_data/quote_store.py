"""
In-memory last-known quote store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Optional

from portfolio_engine.domain.models import Quote
from portfolio_engine.utils.time import age_seconds, to_utc, utc_now


class QuoteStore:
    """
    Remembers the last good quote per symbol so a failed lookup can fall
    back to a known price instead of nothing.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._last_quotes: Dict[str, Quote] = {}
        self._clock = clock or utc_now

    def record(self, quote: Quote) -> None:
        if not quote.symbol or quote.price <= 0:
            return
        self._last_quotes[quote.symbol.upper()] = quote

    def get_last_quote(self, symbol: str) -> Optional[Quote]:
        return self._last_quotes.get(symbol.upper())

    def clear(self) -> None:
        self._last_quotes.clear()

    def get_status(self) -> Dict[str, object]:
        now = self._clock()
        status = {}
        for symbol, quote in self._last_quotes.items():
            status[symbol] = {
                "price": quote.price,
                "ts": to_utc(quote.ts).isoformat(),
                "age_seconds": age_seconds(quote.ts, now),
            }
        return status
