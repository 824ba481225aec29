import logging

import pandas as pd
import yfinance as yf

logger = logging.getLogger(__name__)


class YFinanceClient:
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol.upper()
        self._ticker: yf.Ticker | None = None

    @property
    def ticker(self) -> yf.Ticker:
        if self._ticker is None:
            self._ticker = yf.Ticker(self.symbol)
        return self._ticker

    def get_history(
        self,
        period: str = "1y",
        interval: str = "1d",
    ) -> pd.DataFrame:
        try:
            df = self.ticker.history(period=period, interval=interval)
            if df.empty:
                logger.warning("Empty history for %s", self.symbol)
            return df
        except Exception:
            logger.warning("Failed to fetch history for %s", self.symbol)
            return pd.DataFrame()

    def get_closes(self, period: str = "1y", interval: str = "1d") -> pd.Series:
        df = self.get_history(period=period, interval=interval)
        if df.empty or "Close" not in df.columns:
            return pd.Series(dtype=float)
        return df["Close"].dropna()
