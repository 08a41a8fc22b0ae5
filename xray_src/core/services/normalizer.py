# core/services/normalizer.py
"""PortfolioNormalizer - Turns portfolio amounts or weights into shares summing to 1."""

import math
from typing import Dict, Iterable, Mapping

from xray_src.core.contracts import (
    DataQuality,
    IssueCategory,
    IssueSeverity,
    ValidationIssue,
    validate_portfolio_weights,
)
from xray_src.core.errors import (
    EmptyPortfolio,
    NegativeValue,
    NonFiniteValue,
    UnknownSecurity,
)
from xray_src.models import NormalizedPortfolio, PortfolioEntry, PortfolioMode, Security
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)


class PortfolioNormalizer:
    """Normalizes a portfolio table against the security registry."""

    def __init__(self, securities: Mapping[str, Security]):
        self.securities = securities
        self.quality = DataQuality()

    def normalize(
        self, entries: Iterable[PortfolioEntry], mode: PortfolioMode
    ) -> NormalizedPortfolio:
        """
        Normalize portfolio entries.

        Args:
            entries: Portfolio rows (one currency, or percentage weights)
            mode: Whether values are amounts or weights

        Returns:
            NormalizedPortfolio whose weights sum to 1

        Raises:
            NonFiniteValue, NegativeValue, UnknownSecurity, EmptyPortfolio
        """
        raw: Dict[str, float] = {}
        for entry in entries:
            if not math.isfinite(entry.value):
                raise NonFiniteValue(entry.isin, entry.value, entry.row_index)
            if entry.value < 0:
                raise NegativeValue(entry.isin, entry.value, entry.row_index)
            if entry.isin not in self.securities:
                raise UnknownSecurity(entry.isin, entry.row_index)

            if entry.isin in raw:
                issue = ValidationIssue(
                    severity=IssueSeverity.MEDIUM,
                    category=IssueCategory.PORTFOLIO,
                    code="DUPLICATE_POSITION",
                    message=f"Portfolio ISIN {entry.isin} listed more than once, adding the rows up",
                    fix_hint="Combine the rows into one position",
                    item=entry.isin,
                    phase="NORMALIZATION",
                )
                logger.warning(issue.message)
                self.quality.add_issue(issue)
            raw[entry.isin] = raw.get(entry.isin, 0.0) + entry.value

        if not raw:
            raise EmptyPortfolio()

        total = sum(raw.values())
        if not math.isfinite(total):
            raise NonFiniteValue("(portfolio total)", total)
        if total <= 0:
            raise EmptyPortfolio("all values are zero")

        if mode == PortfolioMode.WEIGHT:
            for issue in validate_portfolio_weights(raw):
                logger.warning(issue.message)
                self.quality.add_issue(issue)

        weights = {isin: value / total for isin, value in raw.items()}
        logger.info(f"Parsed {len(weights)} securities into portfolio")

        if mode == PortfolioMode.AMOUNT:
            logger.info(f"Portfolio total value {total:.2f}")
            return NormalizedPortfolio(
                mode=mode, weights=weights, amounts=dict(raw), total_amount=total
            )
        return NormalizedPortfolio(mode=mode, weights=weights)
