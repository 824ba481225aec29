"""Asset-class estimates used when no price history is available.

The asset class is guessed from the holding name by case-insensitive
substring match, first matching row wins.
"""

from collections.abc import Sequence

from portfolio_risk.analysis.portfolio import holding_weights, total_value
from portfolio_risk.models.portfolio import Holding
from portfolio_risk.models.risk import HeuristicProfile

ASSET_CLASS_PROFILES: list[tuple[tuple[str, ...], HeuristicProfile]] = [
    (
        ("bitcoin", "btc", "crypto"),
        HeuristicProfile(volatility=0.80, beta=0.3, max_drawdown=0.60, sharpe_ratio=1.2),
    ),
    (
        ("ethereum", "eth"),
        HeuristicProfile(volatility=0.75, beta=0.4, max_drawdown=0.55, sharpe_ratio=1.1),
    ),
    (
        ("stock", "equity"),
        HeuristicProfile(volatility=0.20, beta=1.0, max_drawdown=0.30, sharpe_ratio=0.8),
    ),
    (
        ("bond", "treasury"),
        HeuristicProfile(volatility=0.05, beta=0.1, max_drawdown=0.05, sharpe_ratio=0.5),
    ),
    (
        ("gold", "commodity"),
        HeuristicProfile(volatility=0.15, beta=-0.1, max_drawdown=0.20, sharpe_ratio=0.3),
    ),
]

UNKNOWN_PROFILE = HeuristicProfile(
    volatility=0.25, beta=0.8, max_drawdown=0.25, sharpe_ratio=0.7
)

# Used when the portfolio has no value to weight by.
EMPTY_PORTFOLIO_PROFILE = HeuristicProfile(
    volatility=0.15, beta=1.0, max_drawdown=0.20, sharpe_ratio=1.0
)


def profile_for(name: str) -> HeuristicProfile:
    lowered = name.lower()
    for keywords, profile in ASSET_CLASS_PROFILES:
        if any(k in lowered for k in keywords):
            return profile
    return UNKNOWN_PROFILE


def weighted_profile(holdings: Sequence[Holding]) -> HeuristicProfile:
    total = total_value(holdings)
    if total == 0:
        return EMPTY_PORTFOLIO_PROFILE

    vol = beta = drawdown = sharpe = 0.0
    for h, w in zip(holdings, holding_weights(holdings, total)):
        p = profile_for(h.name)
        vol += w * p.volatility
        beta += w * p.beta
        drawdown += w * p.max_drawdown
        sharpe += w * p.sharpe_ratio

    return HeuristicProfile(
        volatility=vol,
        beta=beta,
        max_drawdown=drawdown,
        sharpe_ratio=sharpe,
    )
