import logging
import math
from collections.abc import Sequence

from portfolio_risk.analysis import statistics as stats
from portfolio_risk.analysis.heuristics import weighted_profile
from portfolio_risk.analysis.portfolio import roi, roi_percent
from portfolio_risk.config import (
    DiversificationScale,
    PathSelection,
    RiskConfig,
    SharpeConvention,
)
from portfolio_risk.errors import (
    DegenerateInputError,
    InsufficientDataError,
    RiskAnalysisError,
    SizeMismatchError,
)
from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import MetricsPath, PortfolioHistory, RiskMetrics

logger = logging.getLogger(__name__)

NEUTRAL_METRICS = RiskMetrics(
    volatility=0.0,
    max_drawdown=0.0,
    beta=1.0,
    diversification_score=0.0,
    roi=0.0,
    sharpe_ratio=1.0,
    is_default=True,
)


def volatility(returns: Sequence[float]) -> float:
    if len(returns) == 0:
        raise InsufficientDataError("No historical return data for volatility")
    return stats.standard_deviation(returns)


def sharpe_ratio_fractional(
    returns: Sequence[float], risk_free_rate: float = 0.04
) -> float:
    """Sharpe ratio with returns and risk-free rate as fractions (0.04 == 4%)."""
    if len(returns) == 0:
        raise InsufficientDataError("No historical return data for Sharpe ratio")
    std = stats.standard_deviation(returns)
    if std == 0:
        raise DegenerateInputError("Standard deviation is zero, Sharpe ratio undefined")
    return (stats.mean(returns) - risk_free_rate) / std


def sharpe_ratio_percent(
    roi_percent: float, volatility: float, risk_free_rate: float = 2.0
) -> float:
    """Sharpe ratio with ROI and risk-free rate in percentage points (2.0 == 2%)."""
    if volatility == 0:
        raise DegenerateInputError("Volatility is zero, Sharpe ratio undefined")
    return (roi_percent - risk_free_rate) / volatility


def max_drawdown(values: Sequence[float]) -> float:
    if len(values) == 0:
        raise InsufficientDataError("No portfolio value history for max drawdown")
    peak = values[0]
    worst = 0.0
    for value in values:
        if value > peak:
            peak = value
        if peak == 0:
            raise DegenerateInputError("Portfolio value peak is zero")
        drawdown = (peak - value) / peak
        if drawdown > worst:
            worst = drawdown
    return worst


def beta(asset_returns: Sequence[float], market_returns: Sequence[float]) -> float:
    if len(asset_returns) == 0 or len(market_returns) == 0:
        raise InsufficientDataError("No historical data for beta")
    if len(asset_returns) != len(market_returns):
        raise SizeMismatchError(
            f"Asset and market return sizes differ "
            f"({len(asset_returns)} != {len(market_returns)})"
        )
    variance = stats.covariance(market_returns, market_returns)
    if variance == 0:
        raise DegenerateInputError("Market variance is zero")
    return stats.covariance(asset_returns, market_returns) / variance


def _unique_ratio(holdings: Sequence[Holding]) -> float:
    if not holdings:
        return 0.0
    unique = {h.name.lower() for h in holdings}
    return len(unique) / len(holdings)


def _round_half_up(x: float) -> float:
    return float(math.floor(x + 0.5))


def diversification_score_decile(holdings: Sequence[Holding]) -> float:
    """Unique-name ratio on a 0-10 scale."""
    return _round_half_up(_unique_ratio(holdings) * 10)


def diversification_score_percent(holdings: Sequence[Holding]) -> float:
    """Unique-name ratio on a 0-100 scale."""
    return _round_half_up(_unique_ratio(holdings) * 100)


class RiskMetricsEngine:
    def __init__(self, config: RiskConfig | None = None) -> None:
        self.config = config or RiskConfig()

    def resolve_path(
        self,
        history: PortfolioHistory | None,
        path: MetricsPath | None = None,
    ) -> MetricsPath:
        if path is not None:
            return path
        selection = self.config.metrics_path
        if selection == PathSelection.HISTORICAL:
            return MetricsPath.HISTORICAL
        if selection == PathSelection.HEURISTIC:
            return MetricsPath.HEURISTIC
        if history is not None and history.is_complete:
            return MetricsPath.HISTORICAL
        if history is not None and not history.is_empty:
            logger.info("History lacks values or benchmark returns, using heuristics")
        return MetricsPath.HEURISTIC

    def diversification(self, holdings: Sequence[Holding]) -> float:
        if self.config.diversification_scale == DiversificationScale.DECILE:
            return diversification_score_decile(holdings)
        return diversification_score_percent(holdings)

    def compute(
        self,
        holdings: Sequence[Holding],
        history: PortfolioHistory | None = None,
        path: MetricsPath | None = None,
    ) -> RiskMetrics:
        """Compute risk metrics, propagating any formula error."""
        chosen = self.resolve_path(history, path)
        if chosen == MetricsPath.HISTORICAL:
            return self._historical(holdings, history or PortfolioHistory())
        return self._heuristic(holdings)

    def comprehensive(
        self,
        holdings: Sequence[Holding],
        history: PortfolioHistory | None = None,
        path: MetricsPath | None = None,
    ) -> RiskMetrics:
        """Like :meth:`compute` but substitutes neutral metrics on failure."""
        try:
            return self.compute(holdings, history, path)
        except RiskAnalysisError as e:
            logger.warning("Risk metrics unavailable, using defaults: %s", e)
            return NEUTRAL_METRICS

    def _historical(
        self, holdings: Sequence[Holding], history: PortfolioHistory
    ) -> RiskMetrics:
        return RiskMetrics(
            volatility=volatility(history.returns),
            max_drawdown=max_drawdown(history.values),
            beta=beta(history.asset_returns, history.market_returns),
            diversification_score=self.diversification(holdings),
            roi=roi(holdings),
            sharpe_ratio=self._historical_sharpe(history.returns),
            path=MetricsPath.HISTORICAL,
        )

    def _heuristic(self, holdings: Sequence[Holding]) -> RiskMetrics:
        profile = weighted_profile(holdings)
        return RiskMetrics(
            volatility=profile.volatility,
            max_drawdown=profile.max_drawdown,
            beta=profile.beta,
            diversification_score=self.diversification(holdings),
            roi=roi(holdings),
            sharpe_ratio=self._heuristic_sharpe(
                holdings, profile.volatility, profile.sharpe_ratio
            ),
            path=MetricsPath.HEURISTIC,
        )

    def _historical_sharpe(self, returns: Sequence[float]) -> float:
        if self.config.sharpe_convention == SharpeConvention.PERCENT:
            if len(returns) == 0:
                raise InsufficientDataError("No historical return data for Sharpe ratio")
            return sharpe_ratio_percent(
                stats.mean(returns) * 100,
                stats.standard_deviation(returns) * 100,
                self.config.risk_free_rate_percent,
            )
        return sharpe_ratio_fractional(returns, self.config.risk_free_rate)

    def _heuristic_sharpe(
        self, holdings: Sequence[Holding], vol: float, estimate: float
    ) -> float:
        # Fractional keeps the asset-class table estimate.
        if self.config.sharpe_convention == SharpeConvention.PERCENT:
            return sharpe_ratio_percent(
                roi_percent(holdings), vol * 100, self.config.risk_free_rate_percent
            )
        return estimate
