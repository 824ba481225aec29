"""Descriptive statistics over flat return series.

All moments are population moments (divide by N). Short inputs return
documented defaults rather than raising; see each function.
"""

import math
from collections.abc import Sequence

import numpy as np

from portfolio_risk.errors import InsufficientDataError

DEFAULT_VOLATILITY = 0.20
NORMAL_KURTOSIS = 3.0
DEFAULT_EXPECTED_RETURN = 0.08


def mean(xs: Sequence[float]) -> float:
    if len(xs) == 0:
        return 0.0
    return float(np.mean(np.asarray(xs, dtype=float)))


def standard_deviation(xs: Sequence[float]) -> float:
    """Population standard deviation; 0.20 when fewer than two points."""
    if len(xs) < 2:
        return DEFAULT_VOLATILITY
    arr = np.asarray(xs, dtype=float)
    return float(np.sqrt(np.mean((arr - arr.mean()) ** 2)))


def _standardized_moment(xs: Sequence[float], order: int) -> float | None:
    arr = np.asarray(xs, dtype=float)
    std = standard_deviation(xs)
    if std == 0:
        return None
    return float(np.mean(((arr - arr.mean()) / std) ** order))


def skewness(xs: Sequence[float]) -> float:
    if len(xs) < 3:
        return 0.0
    m = _standardized_moment(xs, 3)
    return 0.0 if m is None else m


def kurtosis(xs: Sequence[float]) -> float:
    """Raw fourth standardized moment (3.0 for a normal distribution)."""
    if len(xs) < 4:
        return NORMAL_KURTOSIS
    m = _standardized_moment(xs, 4)
    return NORMAL_KURTOSIS if m is None else m


def expected_return(xs: Sequence[float]) -> float:
    if len(xs) == 0:
        return DEFAULT_EXPECTED_RETURN
    return mean(xs)


def covariance(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Sum of co-deviations (not divided by N)."""
    a = np.asarray(xs, dtype=float)
    b = np.asarray(ys, dtype=float)
    return float(np.sum((a - a.mean()) * (b - b.mean())))


def percentile_index(n: int, confidence_level: float) -> int:
    # Evaluated in doubles exactly as written; (1 - 0.95) * 100 lands on index 5.
    index = math.ceil((1 - confidence_level) * n) - 1
    return max(0, min(index, n - 1))


def percentile_value(sorted_ascending: Sequence[float], confidence_level: float) -> float:
    """Tail value at ``1 - confidence_level`` from an ascending series."""
    if len(sorted_ascending) == 0:
        raise InsufficientDataError("Percentile of an empty series")
    return float(
        sorted_ascending[percentile_index(len(sorted_ascending), confidence_level)]
    )
