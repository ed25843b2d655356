"""
Wire envelopes of the quote and symbol-search endpoints.

GET /api/stock/{symbol}/quote      -> {success, data: {regularMarketPrice, ...}}
GET /api/stocks/search?q=&limit=   -> {success, data: [{symbol, shortName?, longName?, exchange?}]}
"""

import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class QuotePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: Optional[str] = None
    regularMarketPrice: float
    regularMarketPreviousClose: Optional[float] = None
    regularMarketChange: Optional[float] = None
    regularMarketChangePercent: Optional[float] = None
    shortName: Optional[str] = None
    longName: Optional[str] = None
    marketCap: Optional[float] = None
    trailingPE: Optional[float] = None

    @field_validator("regularMarketPrice")
    @classmethod
    def price_must_be_positive(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError("regularMarketPrice must be a positive number")
        return value

    @field_validator("regularMarketPreviousClose")
    @classmethod
    def previous_close_must_be_positive(cls, value: Optional[float]) -> Optional[float]:
        # 0 / NaN previous close means "unknown"
        if value is None or not math.isfinite(value) or value <= 0:
            return None
        return value


class QuoteEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: Optional[QuotePayload] = None
    error: Optional[str] = None


class SearchItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: str
    shortName: Optional[str] = None
    longName: Optional[str] = None
    exchange: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.longName or self.shortName or self.symbol


class SearchEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: List[SearchItem] = []
    error: Optional[str] = None
