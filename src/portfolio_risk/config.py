import os
from enum import StrEnum

from pydantic import BaseModel, Field

ENV_PREFIX = "PORTFOLIO_RISK_"

TRADING_DAYS_PER_YEAR = 252


class PathSelection(StrEnum):
    AUTO = "auto"
    HISTORICAL = "historical"
    HEURISTIC = "heuristic"


class DiversificationScale(StrEnum):
    PERCENT = "percent"  # 0-100
    DECILE = "decile"  # 0-10


class SharpeConvention(StrEnum):
    FRACTIONAL = "fractional"  # return fractions against risk_free_rate
    PERCENT = "percent"  # ROI percent against risk_free_rate_percent


class RiskConfig(BaseModel):
    # Fractional convention (0.04 == 4%) used by the historical Sharpe ratio.
    risk_free_rate: float = 0.04
    # Percentage-point convention (2.0 == 2%) used with ROI expressed in percent.
    risk_free_rate_percent: float = 2.0

    confidence_level: float = Field(default=0.95, gt=0.0, lt=1.0)
    time_horizon_days: int = Field(default=1, ge=1)
    volatility_window: int = Field(default=TRADING_DAYS_PER_YEAR, ge=2)
    seed: int | None = None

    metrics_path: PathSelection = PathSelection.AUTO
    diversification_scale: DiversificationScale = DiversificationScale.PERCENT
    sharpe_convention: SharpeConvention = SharpeConvention.FRACTIONAL

    max_workers: int = Field(default=4, ge=1)

    benchmark: str = "SPY"
    history_period: str = "1y"
    history_interval: str = "1d"

    @classmethod
    def from_env(cls, **overrides: object) -> "RiskConfig":
        """Build a config from ``PORTFOLIO_RISK_*`` variables (and ``.env``).

        Explicit keyword overrides win over the environment. Values that are
        ``None`` are ignored so CLI flags left unset fall through.
        """
        from dotenv import load_dotenv

        load_dotenv()

        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
