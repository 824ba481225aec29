import logging
import math
from collections.abc import Sequence

from portfolio_risk.errors import InsufficientDataError
from portfolio_risk.models.portfolio import AssetMetrics, Holding, PortfolioSummary

logger = logging.getLogger(__name__)


def total_value(holdings: Sequence[Holding]) -> float:
    return float(sum(h.current_value for h in holdings))


def asset_weights(
    holdings: Sequence[Holding], total: float | None = None
) -> dict[str, float]:
    """Value weight per asset name.

    Holdings sharing a name are pooled. With a zero total every asset gets
    0.0 instead of a division by zero.
    """
    if total is None:
        total = total_value(holdings)

    weights: dict[str, float] = {}
    if total == 0:
        if holdings:
            logger.debug("Zero portfolio value, weights set to 0.0")
        for h in holdings:
            weights[h.name] = 0.0
        return weights

    for h in holdings:
        weights[h.name] = weights.get(h.name, 0.0) + h.current_value / total
    return weights


def holding_weights(holdings: Sequence[Holding], total: float | None = None) -> list[float]:
    """Per-holding value weights, in input order."""
    if total is None:
        total = total_value(holdings)
    if total == 0:
        return [0.0 for _ in holdings]
    return [h.current_value / total for h in holdings]


def _invested(holdings: Sequence[Holding]) -> tuple[float, float]:
    valid = [h for h in holdings if h.initial_investment and h.initial_investment > 0]
    if not valid:
        raise InsufficientDataError("No holdings with a valid initial investment")
    initial = sum(h.initial_investment for h in valid)
    current = sum(h.current_value for h in valid)
    return current, initial


def roi(holdings: Sequence[Holding]) -> float:
    """Fractional return on investment (0.0667 == 6.67%)."""
    current, initial = _invested(holdings)
    return (current - initial) / initial


def roi_percent(holdings: Sequence[Holding]) -> float:
    return roi(holdings) * 100


def asset_metrics(holding: Holding) -> AssetMetrics:
    initial = holding.initial_value
    roi_pct = None
    if initial != 0:
        roi_pct = (holding.current_value - initial) / initial * 100
    return AssetMetrics(
        name=holding.name,
        current_value=holding.current_value,
        roi_percent=roi_pct,
    )


def summarize_metrics(metrics: Sequence[AssetMetrics]) -> PortfolioSummary:
    rois = [
        m.roi_percent
        for m in metrics
        if m.roi_percent is not None and math.isfinite(m.roi_percent)
    ]
    return PortfolioSummary(
        total_value=sum(m.current_value for m in metrics),
        average_roi_percent=sum(rois) / len(rois) if rois else 0.0,
        asset_count=len(metrics),
        assets=list(metrics),
    )


def summarize(holdings: Sequence[Holding]) -> PortfolioSummary:
    return summarize_metrics([asset_metrics(h) for h in holdings])
