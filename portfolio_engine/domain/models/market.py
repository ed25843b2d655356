"""
Market data values handed from the quote/search adapters to the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from portfolio_engine.utils.time import utc_now


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: float
    previous_close: float
    change: float = 0.0
    change_percent: float = 0.0
    name: Optional[str] = None
    market_cap: Optional[float] = None
    pe: Optional[float] = None
    ts: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class SearchResult:
    symbol: str
    name: str
    exchange: Optional[str] = None


@dataclass(frozen=True)
class SearchState:
    """
    Latest applied symbol search. generation identifies the request whose
    outcome is shown.
    """
    query: str = ""
    results: Tuple[SearchResult, ...] = ()
    is_searching: bool = False
    error: Optional[str] = None
    generation: int = 0
