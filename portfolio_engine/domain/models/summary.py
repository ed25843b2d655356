from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PortfolioMover:
    """
    Best or worst performer by unrealized gain percent.
    """
    symbol: str
    gain_loss_percent: float


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Portfolio-level aggregate. Always produced by the valuation engine as a
    fold over the current holdings, never edited.
    """
    total_value: float = 0.0
    total_cost: float = 0.0
    total_gain_loss: float = 0.0
    total_gain_loss_percent: float = 0.0
    day_gain_loss: float = 0.0
    day_gain_loss_percent: float = 0.0
    holdings_count: int = 0
    pending_count: int = 0
    top_gainer: Optional[PortfolioMover] = None
    top_loser: Optional[PortfolioMover] = None

    def to_dict(self) -> dict:
        return {
            "totalValue": self.total_value,
            "totalCost": self.total_cost,
            "totalGainLoss": self.total_gain_loss,
            "totalGainLossPercent": self.total_gain_loss_percent,
            "dayGainLoss": self.day_gain_loss,
            "dayGainLossPercent": self.day_gain_loss_percent,
            "holdingsCount": self.holdings_count,
            "pendingCount": self.pending_count,
            "topGainer": (
                {"symbol": self.top_gainer.symbol, "gainPercent": self.top_gainer.gain_loss_percent}
                if self.top_gainer else None
            ),
            "topLoser": (
                {"symbol": self.top_loser.symbol, "lossPercent": self.top_loser.gain_loss_percent}
                if self.top_loser else None
            ),
        }


EMPTY_SUMMARY = PortfolioSummary()
