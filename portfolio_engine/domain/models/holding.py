"""
DOMAIN MODELS — HOLDING

One open position and the formulas for its derived figures.
No market data fetching. No store access.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

# Returned wherever a percentage has a zero (or non-finite) denominator
PERCENT_SENTINEL = 0.0


class PriceStatus(str, Enum):
    """Freshness of a holding's market fields"""
    LIVE = "LIVE"
    STALE = "STALE"
    PENDING = "PENDING"


def safe_percent(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return PERCENT_SENTINEL
    value = numerator / denominator * 100.0
    if not math.isfinite(value):
        return PERCENT_SENTINEL
    return value


@dataclass(frozen=True)
class DerivedFields:
    total_cost: float
    total_value: float
    gain_loss: float
    gain_loss_percent: float
    day_gain_loss: float
    day_gain_loss_percent: float


def derive_fields(
    quantity: float,
    avg_buy_price: float,
    current_price: float,
    previous_close: float,
) -> DerivedFields:
    """
    Compute every derived figure of a position from its four owned inputs.

    Pure and total: never raises, and percentage divisions by zero resolve
    to PERCENT_SENTINEL instead of NaN/inf.
    """
    total_cost = quantity * avg_buy_price
    total_value = quantity * current_price
    gain_loss = total_value - total_cost
    day_move = current_price - previous_close

    return DerivedFields(
        total_cost=total_cost,
        total_value=total_value,
        gain_loss=gain_loss,
        gain_loss_percent=safe_percent(gain_loss, total_cost),
        day_gain_loss=quantity * day_move,
        day_gain_loss_percent=safe_percent(day_move, previous_close),
    )


@dataclass(frozen=True)
class Holding:
    """
    Immutable position record.

    Derived figures are computed once at construction from the owned fields
    and cannot be passed in; use with_position / with_quote to get an
    updated copy.
    """
    id: str
    symbol: str
    quantity: float
    avg_buy_price: float
    name: str = ""
    current_price: float = 0.0
    previous_close: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    price_status: PriceStatus = PriceStatus.PENDING
    market_cap: Optional[float] = None
    pe: Optional[float] = None
    last_updated: Optional[datetime] = None
    derived: DerivedFields = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.symbol:
            raise ValueError("Holding symbol cannot be empty")
        if not self.name:
            object.__setattr__(self, "name", self.symbol)
        object.__setattr__(
            self,
            "derived",
            derive_fields(
                self.quantity,
                self.avg_buy_price,
                self.current_price,
                self.previous_close,
            ),
        )

    @property
    def total_cost(self) -> float:
        return self.derived.total_cost

    @property
    def total_value(self) -> float:
        return self.derived.total_value

    @property
    def gain_loss(self) -> float:
        return self.derived.gain_loss

    @property
    def gain_loss_percent(self) -> float:
        return self.derived.gain_loss_percent

    @property
    def day_gain_loss(self) -> float:
        return self.derived.day_gain_loss

    @property
    def day_gain_loss_percent(self) -> float:
        return self.derived.day_gain_loss_percent

    @property
    def is_live(self) -> bool:
        return self.price_status == PriceStatus.LIVE

    def with_position(self, quantity: float, avg_buy_price: float) -> "Holding":
        """Copy with new user-owned fields; market fields untouched."""
        return replace(self, quantity=quantity, avg_buy_price=avg_buy_price)

    def with_market_data(
        self,
        current_price: float,
        previous_close: float,
        change: float,
        change_percent: float,
        price_status: PriceStatus,
        last_updated: Optional[datetime],
        name: Optional[str] = None,
        market_cap: Optional[float] = None,
        pe: Optional[float] = None,
    ) -> "Holding":
        """Copy with new market-owned fields; user fields untouched."""
        return replace(
            self,
            current_price=current_price,
            previous_close=previous_close,
            change=change,
            change_percent=change_percent,
            price_status=price_status,
            last_updated=last_updated,
            name=name or self.name,
            market_cap=market_cap if market_cap is not None else self.market_cap,
            pe=pe if pe is not None else self.pe,
        )

    def marked_stale(self) -> "Holding":
        if self.price_status != PriceStatus.LIVE:
            return self
        return replace(self, price_status=PriceStatus.STALE)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "quantity": self.quantity,
            "avgBuyPrice": self.avg_buy_price,
            "currentPrice": self.current_price,
            "previousClose": self.previous_close,
            "change": self.change,
            "changePercent": self.change_percent,
            "totalValue": self.total_value,
            "totalCost": self.total_cost,
            "gainLoss": self.gain_loss,
            "gainLossPercent": self.gain_loss_percent,
            "dayGainLoss": self.day_gain_loss,
            "dayGainLossPercent": self.day_gain_loss_percent,
            "marketCap": self.market_cap,
            "pe": self.pe,
            "priceStatus": self.price_status.value,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }
