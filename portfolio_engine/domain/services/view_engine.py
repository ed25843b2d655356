"""
Sort / filter helpers over a holdings collection.

Pure functions: input sequences are never modified.
"""

from typing import Callable, Dict, Iterable, List, Optional

from portfolio_engine.domain.models import (
    Holding,
    SortDirection,
    SortField,
    ViewSettings,
)

_SORT_KEYS: Dict[SortField, Callable[[Holding], object]] = {
    SortField.SYMBOL: lambda h: h.symbol,
    SortField.VALUE: lambda h: h.total_value,
    SortField.GAIN_LOSS: lambda h: h.gain_loss,
    SortField.GAIN_LOSS_PERCENT: lambda h: h.gain_loss_percent,
    SortField.DAY_GAIN_LOSS: lambda h: h.day_gain_loss,
}


def sort_holdings(
    holdings: Iterable[Holding],
    field: SortField,
    direction: SortDirection = SortDirection.DESC,
) -> List[Holding]:
    """
    Sort by one field. Equal keys keep symbol-ascending order in both
    directions (sorted() is stable, including with reverse=True).
    """
    key = _SORT_KEYS[SortField(field)]
    by_symbol = sorted(holdings, key=lambda h: h.symbol)
    return sorted(
        by_symbol,
        key=key,
        reverse=SortDirection(direction) == SortDirection.DESC,
    )


def filter_holdings(holdings: Iterable[Holding], term: Optional[str]) -> List[Holding]:
    """Case-insensitive substring match over symbol and name."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(holdings)
    return [h for h in holdings if needle in f"{h.symbol} {h.name}".lower()]


def apply_view(
    holdings: Iterable[Holding],
    settings: ViewSettings,
    term: Optional[str] = None,
) -> List[Holding]:
    return sort_holdings(
        filter_holdings(holdings, term),
        settings.sort_by,
        settings.sort_direction,
    )
