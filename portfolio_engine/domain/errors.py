"""
Domain Errors
Typed failures surfaced by the holdings store and market data adapters
"""

from typing import Dict, Optional


class PortfolioError(Exception):
    """Base class for every engine failure"""

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(PortfolioError):
    """Invalid user input, reported per field. Raised before any I/O."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        detail = "; ".join(f"{field}: {msg}" for field, msg in self.field_errors.items())
        super().__init__(f"Invalid holding: {detail}")


class DuplicateSymbolError(PortfolioError):
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"{symbol} is already in the portfolio")


class NotFoundError(PortfolioError):
    def __init__(self, holding_id: str):
        self.holding_id = holding_id
        super().__init__(f"Holding {holding_id} not found")


class StoreBusyError(PortfolioError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Another portfolio update is in progress ({operation} rejected)")


class QuoteFetchError(PortfolioError):
    """
    Price lookup failed for one symbol.

    reason is one of: timeout, http_status, network, invalid_payload, not_found
    """

    def __init__(
        self,
        symbol: str,
        reason: str,
        detail: str = "",
        status_code: Optional[int] = None,
    ):
        self.symbol = symbol
        self.reason = reason
        self.detail = detail
        self.status_code = status_code
        text = f"Quote for {symbol} failed ({reason})"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)


class SearchError(PortfolioError):
    def __init__(self, query: str, reason: str, detail: str = ""):
        self.query = query
        self.reason = reason
        self.detail = detail
        super().__init__(detail or f"Symbol search failed ({reason})")
