"""
ALLOCATION ENGINE
Holdings → percentage share of total market value, for charting

RULES:
✅ Sorted by percentage descending, ties by symbol ascending
✅ Colour is a pure function of the symbol (stable across processes)
✅ Empty or zero-valued portfolio → empty list, never NaN slices
"""

from typing import Iterable, List

from portfolio_engine.domain.models import AllocationEntry, Holding

PALETTE = (
    "#06b6d4",  # cyan
    "#8b5cf6",  # violet
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#ec4899",  # pink
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#84cc16",  # lime
)


def _string_hash(text: str) -> int:
    """
    32-bit signed rolling hash (h * 31 + ch).

    The builtin hash() is salted per process, so it cannot be used here.
    """
    value = 0
    for ch in text:
        value = (value * 31 + ord(ch)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def color_for_symbol(symbol: str) -> str:
    return PALETTE[abs(_string_hash(symbol)) % len(PALETTE)]


class AllocationEngine:
    """
    Allocation Engine
    Derives each holding's weight in the portfolio
    """

    @staticmethod
    def compute_allocation(holdings: Iterable[Holding]) -> List[AllocationEntry]:
        holdings = list(holdings)
        total_value = sum(h.total_value for h in holdings)
        if total_value <= 0:
            return []

        entries = [
            AllocationEntry(
                symbol=h.symbol,
                name=h.name,
                value=h.total_value,
                percentage=h.total_value / total_value * 100.0,
                color=color_for_symbol(h.symbol),
            )
            for h in holdings
        ]
        entries.sort(key=lambda e: (-e.percentage, e.symbol))
        return entries
