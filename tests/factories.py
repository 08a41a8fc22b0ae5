"""Test Fixture Factories - Factory functions create valid objects with sensible defaults."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from xray_src.data.classification import ClassificationTable
from xray_src.models import (
    NormalizedPortfolio,
    PortfolioEntry,
    PortfolioMode,
    RawRow,
    ResolvedExposure,
    Security,
)

SECURITIES_HEADER = (
    "ISIN,Name,Ticker,TER,Holding,HoldingWeight,Sector,SectorWeight,"
    "Country,CountryWeight,Region,RegionWeight"
)


def make_row(row_index: int = 1, **overrides: Any) -> RawRow:
    """Create a RawRow; every cell defaults to blank."""
    return RawRow(row_index=row_index, **overrides)


def make_rows(cell_sets: Sequence[Dict[str, Any]]) -> List[RawRow]:
    """Create numbered RawRows from a list of cell dicts."""
    return [make_row(row_index=i, **cells) for i, cells in enumerate(cell_sets, start=1)]


def make_security(**overrides: Any) -> Security:
    """Create a valid Security with sensible defaults."""
    defaults: Dict[str, Any] = {
        "isin": "US0378331005",
        "name": "Apple Inc",
        "ticker": "AAPL",
        "ter": 0.0,
        "countries": {"United States": 1.0},
        "sectors": {"Technology": 1.0},
    }
    defaults.update(overrides)
    return Security(**defaults)


def make_registry(*securities: Security) -> Dict[str, Security]:
    return {s.isin: s for s in securities}


def make_entries(values: Sequence[Tuple[str, float]]) -> List[PortfolioEntry]:
    return [
        PortfolioEntry(isin=isin, value=value, row_index=i)
        for i, (isin, value) in enumerate(values, start=1)
    ]


def make_portfolio(
    weights: Dict[str, float], total_amount: Optional[float] = None
) -> NormalizedPortfolio:
    """Create a NormalizedPortfolio; passing total_amount switches to amount mode."""
    if total_amount is None:
        return NormalizedPortfolio(mode=PortfolioMode.WEIGHT, weights=weights)
    return NormalizedPortfolio(
        mode=PortfolioMode.AMOUNT,
        weights=weights,
        amounts={isin: w * total_amount for isin, w in weights.items()},
        total_amount=total_amount,
    )


def make_exposure(isin: str, **overrides: Any) -> ResolvedExposure:
    return ResolvedExposure(isin=isin, **overrides)


def make_classification(**overrides: Any) -> ClassificationTable:
    """Create a small ClassificationTable covering the countries used in tests."""
    defaults: Dict[str, Any] = {
        "regions": {
            "United States": "North America",
            "Canada": "North America",
            "Germany": "Europe",
            "Estonia": "Europe",
            "France": "Europe",
            "Japan": "Asia Pacific",
            "China": "Asia Pacific",
        },
        "markets": {
            "United States": "Developed",
            "Canada": "Developed",
            "Germany": "Developed",
            "Estonia": "Developed",
            "France": "Developed",
            "Japan": "Developed",
            "China": "Emerging",
        },
        "sectors": ["Technology", "Financials", "Health Care", "Energy"],
        "sector_synonyms": {"Information Technology": "Technology", "Finance": "Financials"},
        "country_aliases": {"USA": "United States", "US": "United States"},
    }
    defaults.update(overrides)
    return ClassificationTable(**defaults)


def write_csv(path, header: str, lines: Sequence[str]) -> str:
    """Write a CSV file and return its path as a string."""
    path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
    return str(path)


def make_validation_issue(**overrides: Any):
    """Create a ValidationIssue with sensible defaults."""
    from xray_src.core.contracts import IssueCategory, IssueSeverity, ValidationIssue

    defaults: Dict[str, Any] = {
        "severity": IssueSeverity.MEDIUM,
        "category": IssueCategory.SCHEMA,
        "code": "TEST_ISSUE",
        "message": "Test issue message",
        "fix_hint": "Test fix hint",
        "item": "TEST",
        "phase": "TEST",
    }
    defaults.update(overrides)
    return ValidationIssue(**defaults)
