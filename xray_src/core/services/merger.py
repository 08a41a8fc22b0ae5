# core/services/merger.py
"""
SecurityMerger - Folds multi-row security definitions into one Security per ISIN.

A row with a blank ISIN continues the last ISIN seen ("continuation row").
Every row may add one entry to each breakdown; name, ticker and TER come
from the first row that supplies them.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from xray_src.core.contracts import DataQuality, IssueCategory, IssueSeverity, ValidationIssue
from xray_src.core.contracts.validation import validate_breakdown_sums
from xray_src.core.errors import DuplicateCategory, MalformedRow
from xray_src.data.classification import ClassificationTable
from xray_src.models import Dimension, RawRow, Security, STORED_DIMENSIONS
from xray_src.xray_utils.isin_validator import is_placeholder_isin, normalize_isin
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)

WEIGHT_FIELDS = {
    Dimension.HOLDING: "HoldingWeight",
    Dimension.SECTOR: "SectorWeight",
    Dimension.COUNTRY: "CountryWeight",
    Dimension.REGION: "RegionWeight",
}


@dataclass
class _Accumulator:
    """Partial state for one ISIN. Never leaves this module."""

    isin: str
    name: Optional[str] = None
    ticker: Optional[str] = None
    ter: Optional[float] = None
    breakdowns: Dict[Dimension, Dict[str, float]] = field(
        default_factory=lambda: {d: {} for d in STORED_DIMENSIONS}
    )

    def freeze(self) -> Security:
        return Security(
            isin=self.isin,
            name=self.name or "",
            ticker=self.ticker,
            ter=self.ter or 0.0,
            holdings=dict(self.breakdowns[Dimension.HOLDING]),
            sectors=dict(self.breakdowns[Dimension.SECTOR]),
            countries=dict(self.breakdowns[Dimension.COUNTRY]),
            regions=dict(self.breakdowns[Dimension.REGION]),
        )


def parse_percentage(raw: str, row: RawRow, field_name: str, isin: str) -> float:
    """Parse a non-negative percentage cell into a fraction."""
    try:
        value = float(raw.replace("%", "").strip())
    except ValueError:
        raise MalformedRow(row.row_index, field_name, f"'{raw}' is not a number", isin)
    if not math.isfinite(value):
        raise MalformedRow(row.row_index, field_name, f"'{raw}' is not a finite number", isin)
    if value < 0:
        raise MalformedRow(row.row_index, field_name, f"negative weight {raw}", isin)
    return value / 100.0


class SecurityMerger:
    """Builds the Security registry from raw CSV rows."""

    def __init__(
        self,
        classification: Optional[ClassificationTable] = None,
        strict: bool = True,
    ):
        """
        Args:
            classification: When it has a sector vocabulary, sector names are
                canonicalised through it
            strict: Conflicting duplicate categories raise DuplicateCategory;
                when False the last value wins and a warning is recorded
        """
        self.classification = classification
        self.strict = strict
        self.quality = DataQuality()

    def merge(self, rows: Iterable[RawRow]) -> Dict[str, Security]:
        """
        Group rows by ISIN and fold each group into a Security.

        Returns:
            Registry mapping ISIN -> Security, in first-seen order
        """
        groups: Dict[str, _Accumulator] = {}
        current: Optional[str] = None
        row_count = 0

        for row in rows:
            row_count += 1
            isin = normalize_isin(row.isin)
            if isin and is_placeholder_isin(isin):
                raise MalformedRow(
                    row.row_index, "ISIN", f"placeholder '{row.isin}' instead of an ISIN"
                )
            if isin:
                current = isin
            elif current is None:
                raise MalformedRow(
                    row.row_index, "ISIN", "continuation row before any ISIN"
                )

            acc = groups.get(current)
            if acc is None:
                acc = groups[current] = _Accumulator(isin=current)
            self._fold_row(acc, row)

        securities = {isin: acc.freeze() for isin, acc in groups.items()}

        for security in securities.values():
            for issue in validate_breakdown_sums(security):
                logger.warning(issue.message)
                self.quality.add_issue(issue)

        logger.info(
            f"Merged {row_count} rows into {len(securities)} securities"
        )
        return securities

    def _fold_row(self, acc: _Accumulator, row: RawRow) -> None:
        if acc.name is None and row.name:
            acc.name = row.name
        if acc.ticker is None and row.ticker:
            acc.ticker = row.ticker
        if row.ter:
            ter = self._parse_ter(row, acc.isin)
            if acc.ter is None:
                acc.ter = ter

        for dimension in STORED_DIMENSIONS:
            pair = self._read_pair(row, dimension, acc.isin)
            if pair is None:
                continue
            category, weight = pair
            if weight == 0:
                continue
            self._add(acc, dimension, category, weight, row)

    def _parse_ter(self, row: RawRow, isin: str) -> float:
        try:
            ter = float(row.ter.replace("%", "").strip())
        except ValueError:
            raise MalformedRow(row.row_index, "TER", f"'{row.ter}' is not a number", isin)
        if ter < 0 or not math.isfinite(ter):
            raise MalformedRow(row.row_index, "TER", f"invalid TER {row.ter}", isin)
        return ter

    def _read_pair(
        self, row: RawRow, dimension: Dimension, isin: str
    ) -> Optional[Tuple[str, float]]:
        category, raw_weight = row.pair(dimension)
        weight_field = WEIGHT_FIELDS[dimension]

        if category is None and raw_weight is None:
            return None
        if category is None:
            raise MalformedRow(
                row.row_index, dimension.value, f"{weight_field} given without {dimension.value}", isin
            )
        if raw_weight is None:
            raise MalformedRow(
                row.row_index, weight_field, f"{dimension.value} '{category}' has no weight", isin
            )

        weight = parse_percentage(raw_weight, row, weight_field, isin)

        if (
            dimension == Dimension.SECTOR
            and self.classification is not None
            and self.classification.has_sector_vocabulary
        ):
            category = self.classification.canonical_sector(category, isin, row.row_index)

        return category, weight

    def _add(
        self,
        acc: _Accumulator,
        dimension: Dimension,
        category: str,
        weight: float,
        row: RawRow,
    ) -> None:
        breakdown = acc.breakdowns[dimension]
        previous = breakdown.get(category)
        if previous is not None and abs(previous - weight) > 1e-12:
            if self.strict:
                raise DuplicateCategory(
                    acc.isin, dimension.value, category, [previous, weight], row.row_index
                )
            issue = ValidationIssue(
                severity=IssueSeverity.HIGH,
                category=IssueCategory.CLASSIFICATION,
                code="DUPLICATE_CATEGORY",
                message=(
                    f"{acc.isin}: {dimension.value} '{category}' listed twice "
                    f"({previous * 100:g}% then {weight * 100:g}%), keeping the last"
                ),
                fix_hint="Keep one row per category",
                item=acc.isin,
                phase="MERGE",
                expected=f"{previous * 100:g}%",
                actual=f"{weight * 100:g}%",
            )
            logger.warning(issue.message)
            self.quality.add_issue(issue)
        breakdown[category] = weight
