"""
CSV HOLDINGS IMPORT

Parses a broker/spreadsheet export into rows for HoldingsStore.import_holdings.
Numeric validation is left to the store so CSV rows and form input share
the same rules and messages.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Dict, List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

COLUMN_ALIASES: Dict[str, str] = {
    "symbol": "symbol",
    "ticker": "symbol",
    "quantity": "quantity",
    "shares": "quantity",
    "qty": "quantity",
    "units": "quantity",
    "avgbuyprice": "avg_buy_price",
    "avgprice": "avg_buy_price",
    "averageprice": "avg_buy_price",
    "averagebuyprice": "avg_buy_price",
    "costbasis": "avg_buy_price",
    "price": "avg_buy_price",
    "name": "name",
}

REQUIRED_COLUMNS = ("symbol", "quantity", "avg_buy_price")


@dataclass(frozen=True)
class ImportRow:
    line: int
    symbol: str
    quantity: str
    avg_buy_price: str
    name: Optional[str] = None


@dataclass
class CsvParseResult:
    rows: List[ImportRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _normalize_header(header: str) -> str:
    return re.sub(r"[^a-z]", "", str(header).lower())


def parse_holdings_csv(source: Union[str, Path, IO]) -> CsvParseResult:
    """
    Read holdings from a CSV path or file-like object.

    Header names are matched loosely ("Avg Buy Price", "avg_buy_price",
    "Cost Basis" all map to avg_buy_price). A file without the required
    columns yields no rows and a single error. So does a source that cannot be
    read at all.
    """
    result = CsvParseResult()
    try:
        df = pd.read_csv(source, dtype=str, keep_default_na=False, skipinitialspace=True)
    except (OSError, ValueError) as exc:
        # unreadable source or malformed CSV
        result.errors.append(f"Could not read CSV: {exc}")
        return result

    renamed: Dict[str, str] = {}
    for column in df.columns:
        target = COLUMN_ALIASES.get(_normalize_header(column))
        if target and target not in renamed.values():
            renamed[column] = target
    df = df.rename(columns=renamed)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        result.errors.append(f"Missing required columns: {', '.join(missing)}")
        return result

    for index, record in enumerate(df.to_dict(orient="records")):
        line = index + 2  # header is line 1
        symbol = (record.get("symbol") or "").strip()
        if not symbol:
            result.errors.append(f"Line {line}: missing symbol")
            continue
        result.rows.append(
            ImportRow(
                line=line,
                symbol=symbol,
                quantity=(record.get("quantity") or "").strip(),
                avg_buy_price=(record.get("avg_buy_price") or "").strip(),
                name=(record.get("name") or "").strip() or None,
            )
        )

    logger.info("Parsed holdings CSV | rows=%d errors=%d", len(result.rows), len(result.errors))
    return result
