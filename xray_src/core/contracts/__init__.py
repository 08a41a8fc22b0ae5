"""Pipeline Contracts - Data quality tracking at phase boundaries."""

from .quality import (
    DataQuality,
    IssueCategory,
    IssueSeverity,
    ValidationIssue,
)
from .validation import (
    validate_breakdown_sums,
    validate_dimension_totals,
    validate_portfolio_weights,
)

__all__ = [
    "DataQuality",
    "IssueCategory",
    "IssueSeverity",
    "ValidationIssue",
    "validate_breakdown_sums",
    "validate_dimension_totals",
    "validate_portfolio_weights",
]
