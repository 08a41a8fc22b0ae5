# core/services/aggregator.py
"""
ExposureAggregator - Weights each security's resolved exposure by its
portfolio share and sums per classification dimension.

Pure computation: inputs are never modified.
"""

from typing import Dict, Mapping, Optional

from xray_src.core.contracts import DataQuality, validate_dimension_totals
from xray_src.core.errors import UnknownCountry
from xray_src.data.classification import ClassificationTable
from xray_src.models import (
    AggregateResult,
    Breakdown,
    Dimension,
    HoldingView,
    NormalizedPortfolio,
    ResolvedExposure,
    Security,
)
from xray_src.xray_utils.isin_validator import normalize_isin
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)


def country_source(isin: str, country: str, securities: Mapping[str, Security]) -> str:
    """
    Find the security, `isin` or one it holds, whose own breakdown lists `country`.

    Walks fund references breadth-first; falls back to `isin`.
    """
    queue = [isin]
    seen = set()
    while queue:
        current = queue.pop(0)
        if current in seen or current not in securities:
            continue
        seen.add(current)
        security = securities[current]
        if country in security.countries:
            return current
        queue.extend(
            label if label in securities else normalize_isin(label)
            for label in security.holdings
        )
    return isin


class ExposureAggregator:
    """Aggregates resolved exposures into portfolio-wide totals. UI-agnostic."""

    def __init__(
        self,
        classification: ClassificationTable,
        holding_view: HoldingView = HoldingView.LEAVES,
    ):
        self.classification = classification
        self.holding_view = holding_view
        self.quality = DataQuality()

    def markets_of(
        self,
        exposure: ResolvedExposure,
        isin: str,
        securities: Optional[Mapping[str, Security]] = None,
    ) -> Breakdown:
        """
        Derive a market breakdown from a resolved country breakdown.

        With the registry given, an unmapped country is reported against the
        looked-through security that lists it, with `isin` as the holder.
        """
        markets: Breakdown = {}
        for country, weight in exposure.countries.items():
            try:
                market = self.classification.market_of(country, isin)
            except UnknownCountry:
                if securities is None:
                    raise
                source = country_source(isin, country, securities)
                raise UnknownCountry(
                    country, source, lookup="market", via=isin if source != isin else ""
                )
            markets[market] = markets.get(market, 0.0) + weight
        return markets

    def aggregate(
        self,
        portfolio: NormalizedPortfolio,
        resolved: Mapping[str, ResolvedExposure],
        securities: Mapping[str, Security],
        top_level_holdings: Optional[Mapping[str, Breakdown]] = None,
    ) -> AggregateResult:
        """
        Aggregate exposures across the portfolio.

        Args:
            portfolio: Normalized portfolio weights
            resolved: ISIN -> ResolvedExposure for every portfolio ISIN
            securities: Registry, for TER
            top_level_holdings: ISIN -> direct holding entries, required for
                the TOP_LEVEL holding view

        Returns:
            AggregateResult with one category mapping per dimension
        """
        if self.holding_view == HoldingView.TOP_LEVEL and top_level_holdings is None:
            raise ValueError("top_level_holdings is required for the top-level holding view")

        totals: Dict[Dimension, Breakdown] = {d: {} for d in Dimension}
        ter = 0.0

        for isin, weight in portfolio.weights.items():
            exposure = resolved[isin]
            per_dimension: Dict[Dimension, Mapping[str, float]] = {
                Dimension.SECTOR: exposure.sectors,
                Dimension.COUNTRY: exposure.countries,
                Dimension.REGION: exposure.regions,
                Dimension.MARKET: self.markets_of(exposure, isin, securities),
            }
            if self.holding_view == HoldingView.TOP_LEVEL:
                per_dimension[Dimension.HOLDING] = top_level_holdings[isin]
            else:
                per_dimension[Dimension.HOLDING] = exposure.holdings

            for dimension, breakdown in per_dimension.items():
                target = totals[dimension]
                for category, share in breakdown.items():
                    target[category] = target.get(category, 0.0) + weight * share

            ter += weight * securities[isin].ter
            logger.debug(f"Added {isin} at weight {weight:.4f}")

        ordered = {
            d: {c: w for c, w in totals[d].items() if w > 0} for d in Dimension
        }

        for issue in validate_dimension_totals(ordered):
            logger.warning(issue.message)
            self.quality.add_issue(issue)

        logger.info(f"Calculated portfolio TER: {ter:.3f}%")
        logger.info(
            "Aggregation complete: "
            + ", ".join(f"{len(ordered[d])} {d.value.lower()}" for d in Dimension)
        )

        return AggregateResult(
            totals=ordered,
            total_amount=portfolio.total_amount,
            ter=ter,
            holding_view=self.holding_view,
        )
