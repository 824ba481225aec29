from collections.abc import Sequence
from typing import Protocol

from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import PortfolioHistory


class VolatilityEstimator(Protocol):
    def estimate_volatility(self, name: str, window: int) -> float | None:
        """Annualised volatility over the last ``window`` samples, or None."""
        ...


class HistoryProvider(Protocol):
    def get_returns(self, name: str, window: int) -> list[float]: ...

    def get_history(self, holdings: Sequence[Holding]) -> PortfolioHistory: ...
