# core/errors.py
"""
Structured error types for the exposure engine.

Every failure is fatal to the current run: the engine never emits partial
exposure figures. Each error names the phase it came from and the offending
item (ISIN, row, country) so the operator can fix the input or extend the
classification table.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ErrorPhase(Enum):
    """Phase where error occurred."""
    DATA_LOADING = "DATA_LOADING"
    MERGE = "MERGE"
    INFERENCE = "INFERENCE"
    RESOLUTION = "RESOLUTION"
    NORMALIZATION = "NORMALIZATION"
    AGGREGATION = "AGGREGATION"
    REPORTING = "REPORTING"


class XRayError(Exception):
    """Base class for all engine failures."""

    phase: ErrorPhase = ErrorPhase.DATA_LOADING

    def __init__(
        self,
        message: str,
        item: str = "",
        fix_hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.item = item  # ISIN or identifier
        self.fix_hint = fix_hint

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "phase": self.phase.value,
            "error_type": type(self).__name__,
            "item": self.item,
            "message": self.message,
            "fix_hint": self.fix_hint,
        }


class TableFormatError(XRayError):
    """Input file is missing, unreadable or has the wrong header."""

    phase = ErrorPhase.DATA_LOADING

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(
            f"{path}: {detail}",
            item=path,
            fix_hint="Check the CSV header against the documented layout",
        )


class MalformedRow(XRayError):
    """A row has a category without weight, weight without category, or a bad number."""

    phase = ErrorPhase.MERGE

    def __init__(
        self,
        row_index: int,
        field: str,
        detail: str,
        isin: str = "",
    ):
        self.row_index = row_index
        self.field = field
        self.isin = isin
        where = f"row {row_index}"
        if isin:
            where += f" ({isin})"
        super().__init__(
            f"Malformed {where}, field {field}: {detail}",
            item=isin or f"row {row_index}",
            fix_hint=f"Fix {field} on row {row_index} of the input file",
        )


class DuplicateCategory(XRayError):
    """The same category was given twice, with different weights, for one security."""

    phase = ErrorPhase.MERGE

    def __init__(
        self,
        isin: str,
        dimension: str,
        category: str,
        weights: Sequence[float],
        row_index: Optional[int] = None,
    ):
        self.isin = isin
        self.dimension = dimension
        self.category = category
        self.weights = list(weights)
        self.row_index = row_index
        shown = ", ".join(f"{w * 100:g}%" for w in self.weights)
        super().__init__(
            f"{isin}: {dimension} '{category}' listed with conflicting weights ({shown})",
            item=isin,
            fix_hint="Keep one row per category or run with --lenient (last value wins)",
        )


class UnknownCountry(XRayError):
    """A country has no entry in the region/market lookup table."""

    phase = ErrorPhase.INFERENCE

    def __init__(
        self, country: str, isin: str = "", lookup: str = "region", via: str = ""
    ):
        self.country = country
        self.isin = isin
        self.lookup = lookup
        self.via = via
        owner = isin or "unknown security"
        if via:
            owner += f" (held via {via})"
        super().__init__(
            f"Country '{country}' of {owner} has no {lookup} mapping",
            item=isin or country,
            fix_hint=f"Add '{country}' to the classification table (XRAY_CLASSIFICATION_PATH)",
        )


class UnknownSector(XRayError):
    """A sector is neither a canonical sector nor a known synonym."""

    phase = ErrorPhase.MERGE

    def __init__(self, sector: str, isin: str = "", row_index: Optional[int] = None):
        self.sector = sector
        self.isin = isin
        self.row_index = row_index
        where = f" on row {row_index}" if row_index is not None else ""
        super().__init__(
            f"Unknown sector '{sector}' for {isin or 'unknown security'}{where}",
            item=isin or sector,
            fix_hint="Use a canonical sector name or add a synonym to the classification table",
        )


class CyclicFundReference(XRayError):
    """Fund look-through revisits a security already on the resolution path."""

    phase = ErrorPhase.RESOLUTION

    def __init__(self, path: List[str]):
        self.path = list(path)
        cycle = " -> ".join(self.path)
        super().__init__(
            f"Cyclic fund reference: {cycle}",
            item=self.path[0] if self.path else "",
            fix_hint="Remove one of the Holding references forming the cycle",
        )


class MissingReferencedSecurity(XRayError):
    """A Holding column names an ISIN that is not defined in the securities table."""

    phase = ErrorPhase.RESOLUTION

    def __init__(self, ref: str, referrer: str):
        self.ref = ref
        self.referrer = referrer
        super().__init__(
            f"{referrer} holds {ref}, which is not defined in the securities table",
            item=referrer,
            fix_hint=f"Add rows for {ref} to the securities file",
        )


class EmptyPortfolio(XRayError):
    """Portfolio has no entries, or every value is zero."""

    phase = ErrorPhase.NORMALIZATION

    def __init__(self, detail: str = "portfolio has no entries"):
        super().__init__(
            f"Empty portfolio: {detail}",
            item="portfolio",
            fix_hint="Add at least one position with a positive amount or weight",
        )


class UnknownSecurity(XRayError):
    """A portfolio ISIN has no definition in the securities table."""

    phase = ErrorPhase.NORMALIZATION

    def __init__(self, isin: str, row_index: Optional[int] = None):
        self.isin = isin
        self.row_index = row_index
        super().__init__(
            f"Portfolio ISIN {isin} not found in securities",
            item=isin,
            fix_hint=f"Add rows for {isin} to the securities file",
        )


class NegativeValue(XRayError):
    """A portfolio amount or weight is negative."""

    phase = ErrorPhase.NORMALIZATION

    def __init__(self, isin: str, value: float, row_index: Optional[int] = None):
        self.isin = isin
        self.value = value
        self.row_index = row_index
        super().__init__(
            f"Portfolio ISIN {isin} has negative value {value}",
            item=isin,
            fix_hint="Short positions are not supported; remove or correct the row",
        )


class NonFiniteValue(XRayError):
    """A portfolio value, or the portfolio total, is NaN or infinite."""

    phase = ErrorPhase.NORMALIZATION

    def __init__(self, isin: str, value: float, row_index: Optional[int] = None):
        self.isin = isin
        self.value = value
        self.row_index = row_index
        super().__init__(
            f"Portfolio ISIN {isin} has non-finite value {value}",
            item=isin,
            fix_hint="Use a finite number for every portfolio row",
        )


class ReportWriteError(XRayError):
    """A chart, image or CSV export could not be written."""

    phase = ErrorPhase.REPORTING

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(
            f"Could not write {path}: {detail}",
            item=path,
            fix_hint="Check that the output folder exists and is writable",
        )
