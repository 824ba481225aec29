"""
Error classes for portfolio_risk.

Formula-level functions raise these; fallback defaults (flat VaR
percentages, heuristic profiles) are return values, not errors.
"""


class RiskAnalysisError(Exception):
    """Base error for risk analytics."""


class InsufficientDataError(RiskAnalysisError):
    """Empty or too-small input where no fallback applies."""


class DegenerateInputError(RiskAnalysisError):
    """Zero variance, zero investment or zero value where a ratio is requested."""


class SizeMismatchError(RiskAnalysisError):
    """Paired series of different lengths."""
