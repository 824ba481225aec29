import pytest

from portfolio_risk.analysis.heuristics import (
    EMPTY_PORTFOLIO_PROFILE,
    UNKNOWN_PROFILE,
    profile_for,
    weighted_profile,
)
from portfolio_risk.models.portfolio import Holding


class TestProfileFor:
    def test_bitcoin(self):
        p = profile_for("Bitcoin Fund")
        assert (p.volatility, p.beta, p.max_drawdown, p.sharpe_ratio) == (
            0.80,
            0.3,
            0.60,
            1.2,
        )

    def test_case_insensitive(self):
        assert profile_for("GRAYSCALE CRYPTO").volatility == 0.80

    def test_ethereum(self):
        assert profile_for("Ethereum").beta == 0.4

    def test_bond(self):
        assert profile_for("US Treasury 10Y").volatility == 0.05

    def test_gold_negative_beta(self):
        assert profile_for("Gold ETF").beta == -0.1

    def test_stock(self):
        assert profile_for("Global Equity Index").max_drawdown == 0.30

    def test_first_match_wins(self):
        # contains both "btc" and "stock"; crypto row is checked first
        assert profile_for("BTC Stock Trust").volatility == 0.80

    def test_unknown(self):
        assert profile_for("AAPL") == UNKNOWN_PROFILE


class TestWeightedProfile:
    def test_single_holding(self):
        h = Holding(name="Bitcoin Fund", quantity=2, purchase_price=1, current_price=3)
        p = weighted_profile([h])
        assert p.volatility == pytest.approx(0.80)
        assert p.beta == pytest.approx(0.3)
        assert p.max_drawdown == pytest.approx(0.60)
        assert p.sharpe_ratio == pytest.approx(1.2)

    def test_value_weighted(self):
        holdings = [
            Holding(name="Bitcoin", quantity=1, purchase_price=1, current_price=300),
            Holding(name="Bond Fund", quantity=1, purchase_price=1, current_price=100),
        ]
        p = weighted_profile(holdings)
        assert p.volatility == pytest.approx(0.75 * 0.80 + 0.25 * 0.05)
        assert p.beta == pytest.approx(0.75 * 0.3 + 0.25 * 0.1)

    def test_zero_value_defaults(self):
        h = Holding(name="Bitcoin", quantity=0, purchase_price=1, current_price=1)
        assert weighted_profile([h]) == EMPTY_PORTFOLIO_PROFILE

    def test_empty_defaults(self):
        p = weighted_profile([])
        assert (p.volatility, p.beta, p.max_drawdown, p.sharpe_ratio) == (
            0.15,
            1.0,
            0.20,
            1.0,
        )
