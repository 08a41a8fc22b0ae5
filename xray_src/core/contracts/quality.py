"""
Data Quality Tracking - Collects non-fatal data issues through the pipeline.

Fatal problems raise XRayError. Everything else (breakdowns summing above
100%, duplicate portfolio rows, dimension totals above 100%) is recorded here
so the run can finish while the operator still sees what to fix.

Design:
- Score starts at 1.0 (perfect)
- Each issue applies a penalty based on severity
- Score never goes below 0.0
- is_trustworthy = score >= 0.95
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional


class IssueSeverity(str, Enum):
    """Severity levels for data quality issues."""

    CRITICAL = "critical"  # Figures ARE wrong
    HIGH = "high"  # Figures MAY be wrong
    MEDIUM = "medium"  # Data is incomplete
    LOW = "low"  # Cosmetic issue


class IssueCategory(str, Enum):
    """Categories for grouping issues."""

    SCHEMA = "schema"
    WEIGHT = "weight"
    CLASSIFICATION = "classification"
    PORTFOLIO = "portfolio"


@dataclass
class ValidationIssue:
    """A single data issue detected during processing.

    Attributes:
        severity: How serious the issue is (CRITICAL, HIGH, MEDIUM, LOW)
        category: What type of issue (WEIGHT, PORTFOLIO, etc.)
        code: Machine-readable code (e.g., "BREAKDOWN_SUM_HIGH")
        message: Human-readable description
        fix_hint: What the operator can do about it
        item: ISIN or identifier
        phase: Pipeline phase where detected
        expected: What was expected (optional)
        actual: What was found (optional)
    """

    severity: IssueSeverity
    category: IssueCategory
    code: str
    message: str
    fix_hint: str
    item: str
    phase: str
    expected: Optional[str] = None
    actual: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary with all fields."""
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "code": self.code,
            "message": self.message,
            "fix_hint": self.fix_hint,
            "item": self.item,
            "phase": self.phase,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass
class DataQuality:
    """Tracks data quality score and issues through the pipeline.

    Attributes:
        score: Current quality score (0.0 to 1.0)
        issues: List of validation issues encountered
    """

    score: float = 1.0
    issues: List[ValidationIssue] = field(default_factory=list)

    PENALTIES: ClassVar[Dict[IssueSeverity, float]] = {
        IssueSeverity.CRITICAL: 0.25,
        IssueSeverity.HIGH: 0.10,
        IssueSeverity.MEDIUM: 0.03,
        IssueSeverity.LOW: 0.01,
    }

    def add_issue(self, issue: ValidationIssue) -> None:
        """Add an issue and degrade the score by the appropriate penalty."""
        self.issues.append(issue)
        penalty = self.PENALTIES.get(issue.severity, 0.0)
        self.score = max(0.0, self.score - penalty)

    def extend(self, issues: List[ValidationIssue]) -> None:
        for issue in issues:
            self.add_issue(issue)

    @property
    def is_trustworthy(self) -> bool:
        """A score >= 0.95 is considered trustworthy."""
        return self.score >= 0.95

    @property
    def has_critical_issues(self) -> bool:
        return any(issue.severity == IssueSeverity.CRITICAL for issue in self.issues)

    @property
    def issue_count_by_severity(self) -> Dict[str, int]:
        counts: Dict[str, int] = {s.value: 0 for s in IssueSeverity}
        for issue in self.issues:
            counts[issue.severity.value] += 1
        return counts

    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    def merge(self, other: DataQuality) -> None:
        """Merge another DataQuality's issues into this one and recalculate score."""
        self.issues.extend(other.issues)
        self.score = 1.0
        for issue in self.issues:
            penalty = self.PENALTIES.get(issue.severity, 0.0)
            self.score = max(0.0, self.score - penalty)

    def to_summary(self) -> Dict[str, Any]:
        """Convert to JSON-serializable summary."""
        return {
            "quality_score": round(self.score, 4),
            "is_trustworthy": self.is_trustworthy,
            "has_critical_issues": self.has_critical_issues,
            "total_issues": len(self.issues),
            "by_severity": self.issue_count_by_severity,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def to_user_message(self) -> str:
        """Generate a human-friendly status message."""
        if self.has_critical_issues:
            critical_count = self.issue_count_by_severity.get("critical", 0)
            return (
                f"Warning: {critical_count} critical issue(s) detected. "
                f"Results may be inaccurate. Quality score: {self.score:.0%}"
            )

        if not self.is_trustworthy:
            return f"Some data quality issues detected. Quality score: {self.score:.0%}"

        if len(self.issues) > 0:
            return (
                f"Data quality is good with {len(self.issues)} minor issue(s). "
                f"Quality score: {self.score:.0%}"
            )

        return f"Excellent data quality. Score: {self.score:.0%}"
