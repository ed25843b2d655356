"""
Holding input validation.

Runs before any I/O and never touches store state. Messages are per field
so the add/edit forms can show them next to the offending input.
"""

import math
from typing import Dict, Optional, Tuple, Union

from portfolio_engine.domain.errors import ValidationError

NumericInput = Union[str, int, float, None]

# Upper bound for quantity and price; keeps every product finite
MAX_INPUT_VALUE = 1e12

QUANTITY_MESSAGES = {
    "missing": "Enter number of shares",
    "invalid": "Invalid number",
    "non_positive": "Must be greater than 0",
    "too_large": "Value is too large",
}

PRICE_MESSAGES = {
    "missing": "Enter average buy price",
    "invalid": "Invalid price",
    "non_positive": "Must be greater than 0",
    "too_large": "Value is too large",
}

SYMBOL_MISSING = "Select a stock symbol"
SYMBOL_INVALID = "Invalid stock symbol"


def _check_positive(value: NumericInput, messages: Dict[str, str]) -> Tuple[Optional[float], Optional[str]]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, messages["missing"]
    if isinstance(value, bool):
        return None, messages["invalid"]
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None, messages["invalid"]
    if not math.isfinite(number):
        return None, messages["invalid"]
    if number <= 0:
        return None, messages["non_positive"]
    if number > MAX_INPUT_VALUE:
        return None, messages["too_large"]
    return number, None


def normalize_symbol(symbol: Optional[str]) -> str:
    cleaned = (symbol or "").strip().upper()
    if not cleaned:
        raise ValidationError({"symbol": SYMBOL_MISSING})
    if any(ch.isspace() for ch in cleaned):
        raise ValidationError({"symbol": SYMBOL_INVALID})
    return cleaned


def validate_position(
    quantity: NumericInput,
    avg_buy_price: NumericInput,
    partial: bool = False,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Validate quantity and average buy price together.

    With partial=True a None value means "leave unchanged" and is returned
    as None instead of being reported missing.

    Raises:
        ValidationError with every failing field
    """
    errors: Dict[str, str] = {}
    parsed_quantity: Optional[float] = None
    parsed_price: Optional[float] = None

    if not (partial and quantity is None):
        parsed_quantity, message = _check_positive(quantity, QUANTITY_MESSAGES)
        if message:
            errors["quantity"] = message

    if not (partial and avg_buy_price is None):
        parsed_price, message = _check_positive(avg_buy_price, PRICE_MESSAGES)
        if message:
            errors["avg_buy_price"] = message

    if errors:
        raise ValidationError(errors)
    return parsed_quantity, parsed_price
