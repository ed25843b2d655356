"""
VALUATION ENGINE
Holdings → per-holding figures + portfolio summary

RESPONSIBILITIES:
- Re-derive every holding from its owned fields
- Fold holdings into the PortfolioSummary
- Identify top gainer / top loser

RULES:
❌ No I/O, no awaiting
❌ No hidden state
✅ Deterministic and idempotent (same input, identical output)
✅ The only place the summary formulas live
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from portfolio_engine.domain.models import (
    EMPTY_SUMMARY,
    Holding,
    PortfolioMover,
    PortfolioSummary,
    PriceStatus,
    safe_percent,
)


@dataclass(frozen=True)
class ValuationResult:
    holdings: Tuple[Holding, ...]
    summary: PortfolioSummary


class ValuationEngine:
    """
    Valuation Engine
    Recomputes holdings and the portfolio summary as one unit
    """

    @staticmethod
    def recompute(holdings: Iterable[Holding]) -> ValuationResult:
        # replace() with no changes re-runs derivation from the owned fields
        revalued = tuple(replace(h) for h in holdings)
        return ValuationResult(
            holdings=revalued,
            summary=ValuationEngine.summarize(revalued),
        )

    @staticmethod
    def summarize(holdings: Tuple[Holding, ...]) -> PortfolioSummary:
        if not holdings:
            return EMPTY_SUMMARY

        total_value = sum(h.total_value for h in holdings)
        total_cost = sum(h.total_cost for h in holdings)
        total_gain_loss = total_value - total_cost
        day_gain_loss = sum(h.day_gain_loss for h in holdings)

        return PortfolioSummary(
            total_value=total_value,
            total_cost=total_cost,
            total_gain_loss=total_gain_loss,
            total_gain_loss_percent=safe_percent(total_gain_loss, total_cost),
            day_gain_loss=day_gain_loss,
            # value at previous close
            day_gain_loss_percent=safe_percent(day_gain_loss, total_value - day_gain_loss),
            holdings_count=len(holdings),
            pending_count=sum(1 for h in holdings if h.price_status != PriceStatus.LIVE),
            top_gainer=ValuationEngine._top_mover(holdings, best=True),
            top_loser=ValuationEngine._top_mover(holdings, best=False),
        )

    @staticmethod
    def _top_mover(holdings: Tuple[Holding, ...], best: bool) -> Optional[PortfolioMover]:
        """
        Highest (or lowest) gain percent; ties go to the alphabetically
        first symbol so the answer is stable.
        """
        if best:
            chosen = min(holdings, key=lambda h: (-h.gain_loss_percent, h.symbol))
        else:
            chosen = min(holdings, key=lambda h: (h.gain_loss_percent, h.symbol))
        return PortfolioMover(symbol=chosen.symbol, gain_loss_percent=chosen.gain_loss_percent)
