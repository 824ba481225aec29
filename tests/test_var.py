import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from portfolio_risk.analysis import var as var_module
from portfolio_risk.analysis.var import (
    MONTE_CARLO_SIMULATIONS,
    VaREngine,
    asset_volatilities,
    conditional_var,
    historical_var,
    monte_carlo_var,
    parametric_var,
    simulate_portfolio_returns,
    z_score,
)
from portfolio_risk.config import RiskConfig
from portfolio_risk.errors import InsufficientDataError
from portfolio_risk.models.portfolio import Holding


def holdings() -> list[Holding]:
    return [
        Holding(name="Bitcoin", quantity=1, purchase_price=20_000, current_price=30_000),
        Holding(name="Bond Fund", quantity=100, purchase_price=100, current_price=100),
    ]


def make_returns(n: int = 250, seed: int = 11) -> list[float]:
    rng = np.random.default_rng(seed)
    return rng.normal(0.0005, 0.02, n).tolist()


class FixedEstimator:
    def __init__(self, vols: dict[str, float | None]) -> None:
        self.vols = vols
        self.calls: list[tuple[str, int]] = []

    def estimate_volatility(self, name: str, window: int) -> float | None:
        self.calls.append((name, window))
        vol = self.vols.get(name)
        if isinstance(vol, Exception):
            raise vol
        return vol


class TestZScore:
    def test_table(self):
        assert z_score(0.99) == 2.326
        assert z_score(0.975) == 1.96
        assert z_score(0.95) == 1.645
        assert z_score(0.90) == 1.282
        assert z_score(0.85) == 1.036
        assert z_score(0.80) == 0.842

    def test_default(self):
        assert z_score(0.5) == 1.645
        assert z_score(0.951) == 1.645


class TestHistoricalVaR:
    def test_short_history_default(self):
        assert historical_var([0.01] * 29, 50_000.0, 0.95) == 50_000.0 * 0.05

    def test_percentile(self):
        returns = [i / 100 for i in range(-20, 20)]  # 40 points
        ordered = sorted(returns)
        idx = math.ceil((1 - 0.95) * 40) - 1
        expected = abs(10_000 * ordered[idx])
        assert historical_var(returns, 10_000, 0.95) == pytest.approx(expected)

    def test_time_horizon_scaling(self):
        returns = make_returns()
        one = historical_var(returns, 10_000, 0.99, 1)
        ten = historical_var(returns, 10_000, 0.99, 10)
        assert ten == pytest.approx(one * math.sqrt(10))

    def test_order_independent(self):
        returns = make_returns()
        assert historical_var(returns, 1_000, 0.95) == historical_var(
            list(reversed(returns)), 1_000, 0.95
        )


class TestParametricVaR:
    def test_zero_volatility(self):
        assert parametric_var(1_000_000, 0.0, 0.95) == 0.0

    def test_formula(self):
        assert parametric_var(10_000, 0.2, 0.99, 4) == pytest.approx(
            2.326 * 0.2 * 2 * 10_000
        )


class TestConditionalVaR:
    def test_short_history_default(self):
        assert conditional_var([0.01] * 10, 50_000.0, 0.95) == 50_000.0 * 0.07

    def test_tail_average(self):
        returns = [i / 100 for i in range(-20, 20)]
        ordered = sorted(returns)
        idx = math.ceil((1 - 0.95) * 40) - 1
        expected = abs(10_000 * sum(ordered[: idx + 1]) / (idx + 1))
        assert conditional_var(returns, 10_000, 0.95) == pytest.approx(expected)

    def test_at_least_var(self):
        returns = make_returns()
        assert conditional_var(returns, 1_000, 0.95) >= historical_var(
            returns, 1_000, 0.95
        )


class TestMonteCarloVaR:
    def test_exact_simulation_count(self):
        rng = np.random.default_rng(0)
        sims = simulate_portfolio_returns([0.5, 0.5], [0.8, 0.05], rng)
        assert MONTE_CARLO_SIMULATIONS == 10_000
        assert sims.shape == (10_000,)

    def test_deterministic_with_seed(self):
        a = monte_carlo_var(holdings(), 40_000, 0.95, seed=42)
        b = monte_carlo_var(holdings(), 40_000, 0.95, seed=42)
        assert a == b

    def test_injected_generator(self):
        a = monte_carlo_var(holdings(), 40_000, 0.95, rng=np.random.default_rng(5))
        b = monte_carlo_var(holdings(), 40_000, 0.95, rng=np.random.default_rng(5))
        assert a == b

    def test_empty_holdings_default(self):
        assert monte_carlo_var([], 10_000.0, 0.95) == 10_000.0 * 0.05

    def test_close_to_normal_quantile(self):
        h = [Holding(name="Equity Fund", quantity=1, purchase_price=1, current_price=100)]
        var = monte_carlo_var(h, 100.0, 0.95, seed=1)
        # single asset, vol 0.20: expect about 1.645 * 0.20 * 100
        assert var == pytest.approx(32.9, rel=0.05)

    def test_estimator_preferred(self):
        est = FixedEstimator({"Bitcoin": 0.4, "Bond Fund": None})
        vols = asset_volatilities(holdings(), est, 252)
        assert vols == [0.4, 0.05]
        assert est.calls == [("Bitcoin", 252), ("Bond Fund", 252)]

    def test_estimator_failure_falls_back(self):
        est = FixedEstimator({"Bitcoin": RuntimeError("down"), "Bond Fund": 0.0})
        assert asset_volatilities(holdings(), est) == [0.80, 0.05]


class TestVaREngine:
    def test_full_result(self):
        engine = VaREngine(RiskConfig(seed=9))
        returns = make_returns()
        r = engine.calculate(holdings(), returns, 0.95, 1)
        assert r.portfolio_value == 40_000.0
        assert r.historical_var == pytest.approx(historical_var(returns, 40_000, 0.95))
        assert r.conditional_var == pytest.approx(conditional_var(returns, 40_000, 0.95))
        assert r.parametric_var == pytest.approx(
            1.645 * float(np.std(returns)) * 40_000
        )
        assert r.monte_carlo_var == monte_carlo_var(holdings(), 40_000, 0.95, seed=9)
        assert sum(r.asset_weights.values()) == pytest.approx(1.0)
        assert r.asset_weights["Bitcoin"] == pytest.approx(0.75)

    def test_defaults_without_history(self):
        r = VaREngine().calculate(holdings(), [], seed=1)
        assert r.historical_var == pytest.approx(2_000.0)
        assert r.conditional_var == pytest.approx(2_800.0)
        assert r.volatility == 0.20
        assert r.skewness == 0.0
        assert r.kurtosis == 3.0
        assert r.expected_return == 0.08
        assert r.confidence_level == 0.95
        assert r.time_horizon_days == 1

    def test_empty_portfolio_raises(self):
        with pytest.raises(InsufficientDataError):
            VaREngine().calculate([], [0.01] * 40)

    def test_invalid_horizon(self):
        with pytest.raises(ValueError):
            VaREngine().calculate(holdings(), [], time_horizon_days=0)

    def test_executor_matches_serial(self):
        returns = make_returns()
        engine = VaREngine()
        serial = engine.calculate(holdings(), returns, seed=3)
        with ThreadPoolExecutor(max_workers=4) as ex:
            parallel = engine.calculate(holdings(), returns, seed=3, executor=ex)
        assert serial == parallel

    def test_simulation_count_ignores_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PORTFOLIO_RISK_MONTE_CARLO_SIMULATIONS", "50")
        seen: list[int] = []
        real = var_module.simulate_portfolio_returns

        def recording(weights, vols, rng, simulations=MONTE_CARLO_SIMULATIONS):
            seen.append(simulations)
            return real(weights, vols, rng, simulations)

        monkeypatch.setattr(var_module, "simulate_portfolio_returns", recording)
        VaREngine(RiskConfig.from_env()).calculate(holdings(), [], seed=1)
        assert seen == [10_000]
