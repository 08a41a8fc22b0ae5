"""Validation Functions - Check data at phase boundaries and return issues without raising exceptions."""

from __future__ import annotations

from typing import Dict, List, Mapping

from xray_src.config import BREAKDOWN_TOLERANCE, WEIGHT_TOLERANCE
from xray_src.models import Dimension, Security, STORED_DIMENSIONS

from .quality import IssueCategory, IssueSeverity, ValidationIssue


def validate_breakdown_sums(
    security: Security,
    tolerance: float = BREAKDOWN_TOLERANCE,
    phase: str = "MERGE",
) -> List[ValidationIssue]:
    """Flag breakdowns of one security that add up to more than 100%."""
    issues: List[ValidationIssue] = []

    for dimension in STORED_DIMENSIONS:
        breakdown = security.breakdown(dimension)
        total = sum(breakdown.values())
        if total > 1.0 + tolerance:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.HIGH,
                    category=IssueCategory.WEIGHT,
                    code="BREAKDOWN_SUM_HIGH",
                    message=(
                        f"{security.isin} {dimension.value.lower()} breakdown "
                        f"sums to {total * 100:.2f}%"
                    ),
                    fix_hint="Check for duplicated or mistyped weights in the securities file",
                    item=security.isin,
                    phase=phase,
                    expected="<= 100%",
                    actual=f"{total * 100:.2f}%",
                )
            )

    return issues


def validate_dimension_totals(
    totals: Mapping[Dimension, Dict[str, float]],
    tolerance: float = WEIGHT_TOLERANCE,
    phase: str = "AGGREGATION",
) -> List[ValidationIssue]:
    """Flag dimensions whose portfolio-wide total exceeds 100%."""
    issues: List[ValidationIssue] = []

    for dimension, categories in totals.items():
        total = sum(categories.values())
        if total > 1.0 + tolerance:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.CRITICAL,
                    category=IssueCategory.WEIGHT,
                    code="DIMENSION_TOTAL_HIGH",
                    message=f"{dimension.value} exposure adds up to {total * 100:.4f}%",
                    fix_hint="A security breakdown above 100% is inflating this dimension",
                    item=dimension.value,
                    phase=phase,
                    expected="<= 100%",
                    actual=f"{total * 100:.4f}%",
                )
            )

    return issues


def validate_portfolio_weights(
    weights: Mapping[str, float],
    phase: str = "NORMALIZATION",
) -> List[ValidationIssue]:
    """Check raw percentage weights before they are normalized."""
    issues: List[ValidationIssue] = []

    for isin, weight in weights.items():
        if weight > 100.0:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.HIGH,
                    category=IssueCategory.PORTFOLIO,
                    code="WEIGHT_ABOVE_100",
                    message=f"Portfolio ISIN {isin} weight {weight:g}% > 100%",
                    fix_hint="Weights are percentages of the portfolio (0-100)",
                    item=isin,
                    phase=phase,
                    expected="<= 100",
                    actual=f"{weight:g}",
                )
            )

    total = sum(weights.values())
    if weights and abs(total - 100.0) > 100.0 * BREAKDOWN_TOLERANCE:
        issues.append(
            ValidationIssue(
                severity=IssueSeverity.LOW,
                category=IssueCategory.PORTFOLIO,
                code="WEIGHT_TOTAL_NOT_100",
                message=f"Portfolio weights add up to {total:g}%, rescaling to 100%",
                fix_hint="Weights were rescaled proportionally",
                item="portfolio",
                phase=phase,
                expected="100",
                actual=f"{total:g}",
            )
        )

    return issues
