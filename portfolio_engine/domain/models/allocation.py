from dataclasses import dataclass


@dataclass(frozen=True)
class AllocationEntry:
    """
    Represents one holding's slice of total portfolio market value.
    """
    symbol: str
    name: str
    value: float
    percentage: float
    color: str
