from portfolio_risk.models.portfolio import (
    AssetMetrics,
    Holding,
    PortfolioSummary,
)
from portfolio_risk.models.risk import (
    HeuristicProfile,
    MetricsPath,
    PortfolioHistory,
    RiskMetrics,
    VaRResult,
)

__all__ = [
    "AssetMetrics",
    "HeuristicProfile",
    "Holding",
    "MetricsPath",
    "PortfolioHistory",
    "PortfolioSummary",
    "RiskMetrics",
    "VaRResult",
]
