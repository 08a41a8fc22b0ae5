"""
Portfolio models.

A portfolio table is homogeneously either monetary amounts or percentage
weights; the mode is decided once per table from its header.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class PortfolioMode(str, Enum):
    AMOUNT = "amount"
    WEIGHT = "weight"


class PortfolioEntry(BaseModel):
    """One portfolio row: an ISIN and its amount or weight."""

    isin: str = Field(..., min_length=1)
    value: float
    row_index: Optional[int] = None


class NormalizedPortfolio(BaseModel):
    """
    Portfolio weights normalized to sum to 1.

    Attributes:
        mode: How the source table expressed positions
        weights: ISIN -> share of the portfolio, in first-seen order
        amounts: ISIN -> original amount (amount mode only)
        total_amount: Sum of amounts (amount mode only)
    """

    mode: PortfolioMode
    weights: Dict[str, float] = Field(default_factory=dict)
    amounts: Optional[Dict[str, float]] = None
    total_amount: Optional[float] = None

    @property
    def has_amounts(self) -> bool:
        return self.mode == PortfolioMode.AMOUNT and self.total_amount is not None
