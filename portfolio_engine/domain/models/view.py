"""
View preferences. Presentation only; never touches holdings data.
"""

from dataclasses import dataclass, replace
from enum import Enum


class SortField(str, Enum):
    SYMBOL = "symbol"
    VALUE = "value"
    GAIN_LOSS = "gainLoss"
    GAIN_LOSS_PERCENT = "gainLossPercent"
    DAY_GAIN_LOSS = "dayGainLoss"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ViewMode(str, Enum):
    TABLE = "table"
    CARD = "card"


@dataclass(frozen=True)
class ViewSettings:
    sort_by: SortField = SortField.VALUE
    sort_direction: SortDirection = SortDirection.DESC
    view_mode: ViewMode = ViewMode.TABLE
    refresh_interval: int = 10  # seconds
    show_day_change: bool = True
    show_percent: bool = True

    def __post_init__(self):
        # Accept raw strings from callers ("gainLoss", "asc", ...)
        object.__setattr__(self, "sort_by", SortField(self.sort_by))
        object.__setattr__(self, "sort_direction", SortDirection(self.sort_direction))
        object.__setattr__(self, "view_mode", ViewMode(self.view_mode))
        if self.refresh_interval < 1:
            raise ValueError("Refresh interval must be at least 1 second")

    def updated(self, **changes) -> "ViewSettings":
        return replace(self, **changes)
