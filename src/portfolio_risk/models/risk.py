from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MetricsPath(StrEnum):
    HISTORICAL = "historical"
    HEURISTIC = "heuristic"


class PortfolioHistory(BaseModel):
    model_config = ConfigDict(frozen=True)

    returns: list[float] = []
    values: list[float] = []
    asset_returns: list[float] = []
    market_returns: list[float] = []

    @model_validator(mode="after")
    def _default_asset_returns(self) -> "PortfolioHistory":
        if not self.asset_returns and self.returns:
            object.__setattr__(self, "asset_returns", list(self.returns))
        return self

    @property
    def is_empty(self) -> bool:
        return not (self.returns or self.values or self.market_returns)

    @property
    def is_complete(self) -> bool:
        """Returns, values and benchmark returns are all present."""
        return bool(self.returns and self.values and self.market_returns)


class HeuristicProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    volatility: float
    beta: float
    max_drawdown: float
    sharpe_ratio: float


class RiskMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    volatility: float = 0.0
    max_drawdown: float = 0.0
    beta: float = 1.0
    diversification_score: float = 0.0
    roi: float = 0.0
    sharpe_ratio: float = 1.0
    path: MetricsPath | None = None
    is_default: bool = False


class VaRResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    portfolio_value: float
    confidence_level: float = Field(gt=0.0, lt=1.0)
    time_horizon_days: int = Field(ge=1)

    historical_var: float
    parametric_var: float
    monte_carlo_var: float
    conditional_var: float

    volatility: float
    skewness: float
    kurtosis: float
    expected_return: float
    asset_weights: dict[str, float] = {}

    def _pct(self, amount: float) -> float:
        if self.portfolio_value == 0:
            return 0.0
        return amount / self.portfolio_value * 100

    @property
    def var_percentage(self) -> float:
        return self._pct(self.historical_var)

    @property
    def risk_level(self) -> str:
        pct = self.var_percentage
        if pct > 10:
            return "HIGH"
        if pct > 5:
            return "MEDIUM"
        return "LOW"

    def summary(self) -> dict:
        return {
            "portfolio_value": self.portfolio_value,
            "confidence_level": self.confidence_level,
            "time_horizon_days": self.time_horizon_days,
            "risk_level": self.risk_level,
            "var_results": {
                "historical_var": self.historical_var,
                "parametric_var": self.parametric_var,
                "monte_carlo_var": self.monte_carlo_var,
                "conditional_var": self.conditional_var,
                "historical_var_pct": self._pct(self.historical_var),
                "parametric_var_pct": self._pct(self.parametric_var),
                "monte_carlo_var_pct": self._pct(self.monte_carlo_var),
            },
            "risk_metrics": {
                "volatility": self.volatility,
                "skewness": self.skewness,
                "kurtosis": self.kurtosis,
                "expected_return": self.expected_return,
            },
        }
