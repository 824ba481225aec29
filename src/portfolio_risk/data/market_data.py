import logging
import math
import threading
from collections.abc import Callable, Sequence

import numpy as np
import pandas as pd

from portfolio_risk.config import TRADING_DAYS_PER_YEAR, RiskConfig
from portfolio_risk.data.yfinance_client import YFinanceClient
from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import PortfolioHistory

logger = logging.getLogger(__name__)

MIN_OBSERVATIONS = 10


class MarketHistoryProvider:
    """Price-history backed returns provider and volatility estimator.

    Holding names are used as ticker symbols. Names yfinance cannot resolve
    simply produce no data; callers then fall back to heuristics.
    """

    def __init__(
        self,
        config: RiskConfig | None = None,
        client_factory: Callable[[str], YFinanceClient] = YFinanceClient,
    ) -> None:
        self.config = config or RiskConfig()
        self._client_factory = client_factory
        self._closes: dict[str, pd.Series] = {}
        self._lock = threading.Lock()

    def closes(self, name: str) -> pd.Series:
        """Cached close prices, fetched at most once per symbol across threads."""
        key = name.upper()
        with self._lock:
            if key not in self._closes:
                client = self._client_factory(key)
                self._closes[key] = client.get_closes(
                    period=self.config.history_period,
                    interval=self.config.history_interval,
                )
            return self._closes[key]

    def get_returns(self, name: str, window: int) -> list[float]:
        closes = self.closes(name)
        if len(closes) <= MIN_OBSERVATIONS:
            return []
        returns = closes.pct_change().dropna()
        return [float(r) for r in returns.iloc[-window:]]

    def estimate_volatility(self, name: str, window: int) -> float | None:
        returns = self.get_returns(name, window)
        if len(returns) < 2:
            return None
        daily = float(np.std(returns))
        if daily == 0 or math.isnan(daily):
            return None
        return daily * math.sqrt(TRADING_DAYS_PER_YEAR)

    def get_history(self, holdings: Sequence[Holding]) -> PortfolioHistory:
        """Portfolio value and return series over dates every holding traded."""
        if not holdings:
            return PortfolioHistory()

        frames: dict[str, pd.Series] = {}
        for h in holdings:
            closes = self.closes(h.name)
            if len(closes) <= MIN_OBSERVATIONS:
                logger.info("No usable price history for %s", h.name)
                return PortfolioHistory()
            frames[h.name] = frames.get(h.name, 0) + closes * h.quantity

        aligned = pd.concat(frames, axis=1, join="inner").dropna()
        if len(aligned) <= MIN_OBSERVATIONS:
            return PortfolioHistory()

        values = aligned.sum(axis=1)
        returns = values.pct_change().dropna()
        window = self.config.volatility_window
        returns = returns.iloc[-window:]

        market_returns: list[float] = []
        bench = self.closes(self.config.benchmark)
        if len(bench) > MIN_OBSERVATIONS:
            joined = pd.concat(
                [returns.rename("portfolio"), bench.pct_change().rename("market")],
                axis=1,
                join="inner",
            ).dropna()
            returns = joined["portfolio"]
            market_returns = [float(r) for r in joined["market"]]

        return PortfolioHistory(
            returns=[float(r) for r in returns],
            values=[float(v) for v in values],
            market_returns=market_returns,
        )
