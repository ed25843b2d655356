"""
DOMAIN MODELS — PORTFOLIO SNAPSHOT

What the store publishes after every change. Built once, never mutated;
consumers diff successive snapshots.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .allocation import AllocationEntry
from .holding import Holding
from .interaction import ModalState
from .market import SearchState
from .summary import PortfolioSummary
from .view import ViewSettings


class MutationState(str, Enum):
    """Position of the store's mutation state machine"""
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    RESOLVING_QUOTE = "RESOLVING_QUOTE"
    COMMITTING = "COMMITTING"
    FAILED = "FAILED"


@dataclass(frozen=True)
class PortfolioSnapshot:
    version: int
    holdings: Tuple[Holding, ...]
    sorted_holdings: Tuple[Holding, ...]
    summary: PortfolioSummary
    allocation: Tuple[AllocationEntry, ...]
    settings: ViewSettings
    modal: ModalState
    search: SearchState
    is_loading: bool = False
    is_refreshing: bool = False
    error: Optional[str] = None
    mutation_state: MutationState = MutationState.IDLE
    last_refresh: Optional[datetime] = None

    def get_holding(self, holding_id: str) -> Optional[Holding]:
        for holding in self.holdings:
            if holding.id == holding_id:
                return holding
        return None

    @property
    def editing_holding(self) -> Optional[Holding]:
        if not self.modal.editing_holding_id:
            return None
        return self.get_holding(self.modal.editing_holding_id)
