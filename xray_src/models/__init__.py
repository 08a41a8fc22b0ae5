"""
Pydantic models for the exposure engine.

Usage:
    from xray_src.models import Security, Dimension, AggregateResult
"""

from .security import Breakdown, Dimension, RawRow, Security, STORED_DIMENSIONS
from .portfolio import NormalizedPortfolio, PortfolioEntry, PortfolioMode
from .exposure import AggregateResult, HoldingView, ResolvedExposure

__all__ = [
    # Securities
    "Breakdown",
    "Dimension",
    "RawRow",
    "Security",
    "STORED_DIMENSIONS",
    # Portfolio
    "NormalizedPortfolio",
    "PortfolioEntry",
    "PortfolioMode",
    # Exposure
    "AggregateResult",
    "HoldingView",
    "ResolvedExposure",
]
