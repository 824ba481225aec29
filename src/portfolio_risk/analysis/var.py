import logging
import math
from collections.abc import Sequence
from concurrent.futures import Executor

import numpy as np

from portfolio_risk.analysis import statistics as stats
from portfolio_risk.analysis.heuristics import profile_for
from portfolio_risk.analysis.portfolio import asset_weights, holding_weights, total_value
from portfolio_risk.config import RiskConfig
from portfolio_risk.data.providers import VolatilityEstimator
from portfolio_risk.errors import InsufficientDataError
from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import VaRResult

logger = logging.getLogger(__name__)

MONTE_CARLO_SIMULATIONS = 10_000
MIN_HISTORY = 30
DEFAULT_VAR_FRACTION = 0.05
DEFAULT_CVAR_FRACTION = 0.07

Z_SCORES: dict[float, float] = {
    0.99: 2.326,
    0.975: 1.96,
    0.95: 1.645,
    0.90: 1.282,
    0.85: 1.036,
    0.80: 0.842,
}
DEFAULT_Z_SCORE = 1.645


def z_score(confidence_level: float) -> float:
    # Exact lookup, no interpolation.
    return Z_SCORES.get(confidence_level, DEFAULT_Z_SCORE)


def historical_var(
    returns: Sequence[float],
    portfolio_value: float,
    confidence_level: float,
    time_horizon_days: int = 1,
) -> float:
    if len(returns) < MIN_HISTORY:
        return portfolio_value * DEFAULT_VAR_FRACTION
    tail = stats.percentile_value(sorted(returns), confidence_level)
    return abs(portfolio_value * tail * math.sqrt(time_horizon_days))


def parametric_var(
    portfolio_value: float,
    volatility: float,
    confidence_level: float,
    time_horizon_days: int = 1,
) -> float:
    return abs(
        z_score(confidence_level)
        * volatility
        * math.sqrt(time_horizon_days)
        * portfolio_value
    )


def conditional_var(
    returns: Sequence[float],
    portfolio_value: float,
    confidence_level: float,
    time_horizon_days: int = 1,
) -> float:
    """Expected shortfall: mean of the tail up to and including the VaR cutoff."""
    if len(returns) < MIN_HISTORY:
        return portfolio_value * DEFAULT_CVAR_FRACTION
    ordered = sorted(returns)
    cutoff = stats.percentile_index(len(ordered), confidence_level)
    tail_mean = stats.mean(ordered[: cutoff + 1])
    return abs(portfolio_value * tail_mean * math.sqrt(time_horizon_days))


def asset_volatilities(
    holdings: Sequence[Holding],
    estimator: VolatilityEstimator | None = None,
    window: int = 252,
) -> list[float]:
    """Per-holding volatility, preferring a positive estimate from ``estimator``."""
    vols: list[float] = []
    for h in holdings:
        vol = None
        if estimator is not None:
            try:
                vol = estimator.estimate_volatility(h.name, window)
            except Exception:
                logger.warning("Volatility estimate failed for %s, using fallback", h.name)
                vol = None
        if vol is None or not vol > 0:
            vol = profile_for(h.name).volatility
        vols.append(vol)
    return vols


def simulate_portfolio_returns(
    weights: Sequence[float],
    volatilities: Sequence[float],
    rng: np.random.Generator,
    simulations: int = MONTE_CARLO_SIMULATIONS,
) -> np.ndarray:
    """One weighted Gaussian portfolio return per simulation."""
    draws = rng.standard_normal((simulations, len(weights)))
    scale = np.asarray(weights, dtype=float) * np.asarray(volatilities, dtype=float)
    return draws @ scale


def monte_carlo_var(
    holdings: Sequence[Holding],
    portfolio_value: float,
    confidence_level: float,
    time_horizon_days: int = 1,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    estimator: VolatilityEstimator | None = None,
    window: int = 252,
    simulations: int = MONTE_CARLO_SIMULATIONS,
) -> float:
    if not holdings:
        return portfolio_value * DEFAULT_VAR_FRACTION
    if rng is None:
        rng = np.random.default_rng(seed)

    weights = holding_weights(holdings, portfolio_value)
    vols = asset_volatilities(holdings, estimator, window)
    simulated = np.sort(simulate_portfolio_returns(weights, vols, rng, simulations))
    tail = stats.percentile_value(simulated, confidence_level)
    return abs(portfolio_value * tail * math.sqrt(time_horizon_days))


class VaREngine:
    def __init__(
        self,
        config: RiskConfig | None = None,
        estimator: VolatilityEstimator | None = None,
    ) -> None:
        self.config = config or RiskConfig()
        self.estimator = estimator

    def calculate(
        self,
        holdings: Sequence[Holding],
        returns: Sequence[float] = (),
        confidence_level: float | None = None,
        time_horizon_days: int | None = None,
        seed: int | None = None,
        executor: Executor | None = None,
    ) -> VaRResult:
        if not holdings:
            raise InsufficientDataError("No holdings to calculate VaR for")

        c = confidence_level if confidence_level is not None else self.config.confidence_level
        t = time_horizon_days if time_horizon_days is not None else self.config.time_horizon_days
        if t < 1:
            raise ValueError(f"time_horizon_days must be >= 1, got {t}")
        if seed is None:
            seed = self.config.seed

        snapshot = tuple(holdings)
        series = tuple(returns)
        value = total_value(snapshot)
        vol = stats.standard_deviation(series)

        def mc() -> float:
            return monte_carlo_var(
                snapshot,
                value,
                c,
                t,
                seed=seed,
                estimator=self.estimator,
                window=self.config.volatility_window,
            )

        tasks = {
            "historical": lambda: historical_var(series, value, c, t),
            "parametric": lambda: parametric_var(value, vol, c, t),
            "monte_carlo": mc,
            "conditional": lambda: conditional_var(series, value, c, t),
        }
        if executor is not None:
            futures = {k: executor.submit(fn) for k, fn in tasks.items()}
            results = {k: f.result() for k, f in futures.items()}
        else:
            results = {k: fn() for k, fn in tasks.items()}

        logger.debug("VaR for %d holdings worth %.2f: %s", len(snapshot), value, results)

        return VaRResult(
            portfolio_value=value,
            confidence_level=c,
            time_horizon_days=t,
            historical_var=results["historical"],
            parametric_var=results["parametric"],
            monte_carlo_var=results["monte_carlo"],
            conditional_var=results["conditional"],
            volatility=vol,
            skewness=stats.skewness(series),
            kurtosis=stats.kurtosis(series),
            expected_return=stats.expected_return(series),
            asset_weights=asset_weights(snapshot, value),
        )
