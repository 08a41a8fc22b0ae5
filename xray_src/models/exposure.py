"""
Exposure models.

ResolvedExposure is one security after fund look-through; AggregateResult is
the portfolio-wide total per classification dimension.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, Field

from .security import Breakdown, Dimension


class HoldingView(str, Enum):
    """How the holding dimension is reported."""

    LEAVES = "leaves"  # fund references fully flattened into leaf holdings
    TOP_LEVEL = "top-level"  # each security's own holding rows, funds unexpanded


class ResolvedExposure(BaseModel):
    """
    Flattened exposure of one security.

    Weights are relative to the security and are not renormalized; a fund
    that is 90% classified stays at 90%.
    """

    isin: str
    holdings: Breakdown = Field(default_factory=dict)
    sectors: Breakdown = Field(default_factory=dict)
    countries: Breakdown = Field(default_factory=dict)
    regions: Breakdown = Field(default_factory=dict)

    def breakdown(self, dimension: Dimension) -> Breakdown:
        if dimension == Dimension.HOLDING:
            return self.holdings
        if dimension == Dimension.SECTOR:
            return self.sectors
        if dimension == Dimension.COUNTRY:
            return self.countries
        if dimension == Dimension.REGION:
            return self.regions
        raise ValueError(f"{dimension} is derived from countries at aggregation time")


class AggregateResult(BaseModel):
    """
    Portfolio-wide exposure per dimension.

    Attributes:
        totals: Dimension -> {category: weight}, first-seen order, no zeros
        total_amount: Portfolio value when the portfolio was given in amounts
        ter: Portfolio-weighted total expense ratio, in percent
        holding_view: Which holding view produced totals[HOLDING]
    """

    totals: Dict[Dimension, Dict[str, float]] = Field(default_factory=dict)
    total_amount: Optional[float] = None
    ter: float = 0.0
    holding_view: HoldingView = HoldingView.LEAVES

    def get(self, dimension: Dimension) -> Dict[str, float]:
        return self.totals.get(dimension, {})

    def dimension_total(self, dimension: Dimension) -> float:
        return sum(self.get(dimension).values())

    def unclassified(self, dimension: Dimension) -> float:
        """Share of the portfolio with no category in this dimension."""
        return max(0.0, 1.0 - self.dimension_total(dimension))

    def value_of(self, dimension: Dimension, category: str) -> Optional[float]:
        """Absolute amount for a category; None when only weights were given."""
        if self.total_amount is None:
            return None
        return self.get(dimension).get(category, 0.0) * self.total_amount

    def sorted_items(
        self, dimension: Dimension, limit: Optional[int] = None
    ) -> List[Tuple[str, float]]:
        """Categories by descending weight, for presentation."""
        items = sorted(self.get(dimension).items(), key=lambda kv: kv[1], reverse=True)
        if limit is not None:
            items = items[:limit]
        return items

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert to a long-format DataFrame.

        Returns:
            DataFrame with columns [dimension, category, weight, percentage, value]
        """
        rows = []
        for dimension in Dimension:
            for category, weight in self.get(dimension).items():
                rows.append(
                    {
                        "dimension": dimension.value,
                        "category": category,
                        "weight": weight,
                        "percentage": weight * 100,
                        "value": self.value_of(dimension, category),
                    }
                )

        if not rows:
            return pd.DataFrame(
                columns=["dimension", "category", "weight", "percentage", "value"]
            )
        return pd.DataFrame(rows)

    def to_csv(self, filepath: str) -> None:
        self.to_dataframe().to_csv(filepath, index=False)
