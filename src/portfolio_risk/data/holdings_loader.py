import logging
import re
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import PortfolioHistory

logger = logging.getLogger(__name__)

NAME_FIELDS = ["name", "asset", "ticker", "symbol"]
QUANTITY_FIELDS = ["quantity", "shares", "qty", "units"]
CURRENT_PRICE_FIELDS = ["current price", "current_price", "price", "price per unit"]
PURCHASE_PRICE_FIELDS = [
    "purchase price",
    "purchase_price",
    "cost",
    "avg cost",
    "purchase price per unit",
]
INITIAL_FIELDS = ["initial investment", "initial_investment", "cost basis"]
RETURN_FIELDS = ["return", "returns", "daily return"]
MARKET_FIELDS = ["market", "benchmark", "market return", "benchmark return"]


def load_holdings(path: Path) -> list[Holding]:
    """Read holdings from a CSV file, skipping rows that cannot be parsed."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    header = [str(c).strip().lower() for c in df.columns]

    holdings: list[Holding] = []
    for i, row in enumerate(df.itertuples(index=False), start=2):
        data = {header[j]: str(v).strip() for j, v in enumerate(row)}
        try:
            h = _parse_row(data)
        except ValidationError:
            h = None
        if h is None:
            logger.debug("Skipping messy row %d", i)
            continue
        holdings.append(h)

    logger.info("Loaded %d holdings from %s", len(holdings), path)
    return holdings


def load_returns(path: Path) -> list[float]:
    """Read a return series from the first matching (or first) CSV column."""
    return load_history(path).returns


def load_history(path: Path, start_value: float = 1.0) -> PortfolioHistory:
    """Read portfolio returns, and benchmark returns when a column has them.

    The value series is rebuilt by compounding the returns from
    ``start_value``. Rows missing either return are dropped.
    """
    df = pd.read_csv(path)
    if df.empty:
        return PortfolioHistory()
    columns = {str(c).strip().lower(): c for c in df.columns}
    market_column = next((columns[k] for k in MARKET_FIELDS if k in columns), None)
    candidates = [c for c in df.columns if c != market_column]
    if not candidates:
        return PortfolioHistory()
    return_column = next(
        (columns[k] for k in RETURN_FIELDS if k in columns),
        candidates[0],
    )

    frame = pd.DataFrame(
        {"returns": pd.to_numeric(df[return_column], errors="coerce")}
    )
    if market_column is not None:
        frame["market"] = pd.to_numeric(df[market_column], errors="coerce")
    frame = frame.dropna()
    if frame.empty:
        return PortfolioHistory()

    values = start_value * (1 + frame["returns"]).cumprod()
    return PortfolioHistory(
        returns=[float(v) for v in frame["returns"]],
        values=[float(start_value)] + [float(v) for v in values],
        market_returns=(
            [float(v) for v in frame["market"]] if market_column is not None else []
        ),
    )


def _parse_row(data: dict[str, str]) -> Holding | None:
    name = _find_field(data, NAME_FIELDS)
    if not name:
        return None

    quantity = _parse_number(_find_field(data, QUANTITY_FIELDS))
    current = _parse_number(_find_field(data, CURRENT_PRICE_FIELDS))
    purchase = _parse_number(_find_field(data, PURCHASE_PRICE_FIELDS))
    if quantity is None or current is None or purchase is None:
        return None

    return Holding(
        name=name,
        quantity=quantity,
        current_price=current,
        purchase_price=purchase,
        initial_investment=_parse_number(_find_field(data, INITIAL_FIELDS)),
    )


def _find_field(data: dict[str, str], candidates: list[str]) -> str | None:
    for key in candidates:
        if key in data and data[key]:
            return data[key]
    return None


def _parse_number(val: str | None) -> float | None:
    if not val:
        return None
    cleaned = re.sub(r"[,$\s]", "", val)
    try:
        return float(cleaned)
    except ValueError:
        return None
