"""
Domain Models Package
Export all domain values
"""

from .allocation import AllocationEntry
from .holding import (
    PERCENT_SENTINEL,
    DerivedFields,
    Holding,
    PriceStatus,
    derive_fields,
    safe_percent,
)
from .interaction import CLOSED_MODALS, AddPrefill, ModalState
from .market import Quote, SearchResult, SearchState
from .snapshot import MutationState, PortfolioSnapshot
from .summary import EMPTY_SUMMARY, PortfolioMover, PortfolioSummary
from .view import SortDirection, SortField, ViewMode, ViewSettings

__all__ = [
    # Enums
    "MutationState",
    "PriceStatus",
    "SortDirection",
    "SortField",
    "ViewMode",

    # Values
    "AddPrefill",
    "AllocationEntry",
    "DerivedFields",
    "Holding",
    "ModalState",
    "PortfolioMover",
    "PortfolioSnapshot",
    "PortfolioSummary",
    "Quote",
    "SearchResult",
    "SearchState",
    "ViewSettings",

    # Constants / functions
    "CLOSED_MODALS",
    "EMPTY_SUMMARY",
    "PERCENT_SENTINEL",
    "derive_fields",
    "safe_percent",
]
