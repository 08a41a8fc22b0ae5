# core/services/resolver.py
"""
FundResolver - Look-through of funds that hold other securities.

A Holding entry whose label is an ISIN in the registry is a fund reference:
it is replaced by the referenced security's own resolved breakdowns, scaled
by the holding weight. Expansion is depth-first with a per-resolver cache,
and the ISINs on the active path are tracked so that cycles fail instead of
recursing forever.
"""

from typing import Dict, List, Mapping, Optional, Tuple

from xray_src.core.errors import CyclicFundReference, MissingReferencedSecurity
from xray_src.models import Breakdown, Dimension, ResolvedExposure, Security
from xray_src.xray_utils.isin_validator import is_valid_isin, normalize_isin
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)

LOOKTHROUGH_DIMENSIONS = (Dimension.SECTOR, Dimension.COUNTRY, Dimension.REGION)


def _add_scaled(target: Breakdown, source: Mapping[str, float], scale: float) -> None:
    for category, weight in source.items():
        target[category] = target.get(category, 0.0) + weight * scale


class FundResolver:
    """Resolves every security in a registry into leaf-level exposure. UI-agnostic."""

    def __init__(
        self,
        securities: Mapping[str, Security],
        strict_references: bool = True,
    ):
        """
        Args:
            securities: Read-only registry keyed by ISIN
            strict_references: A holding label that is a well-formed ISIN but
                absent from the registry raises MissingReferencedSecurity;
                when False it is kept as a leaf label
        """
        self.securities = securities
        self.strict_references = strict_references
        self._cache: Dict[str, ResolvedExposure] = {}

    def reference_of(self, label: str, referrer: str) -> Optional[str]:
        """
        Return the registry ISIN a holding label points to, or None for a leaf.

        Raises:
            MissingReferencedSecurity: label is an ISIN not in the registry
        """
        if label in self.securities:
            return label
        candidate = normalize_isin(label)
        if candidate in self.securities:
            return candidate
        if self.strict_references and is_valid_isin(candidate):
            raise MissingReferencedSecurity(candidate, referrer)
        return None

    def split_holdings(self, security: Security) -> Tuple[Breakdown, List[Tuple[str, float]]]:
        """Separate a security's holding entries into leaf labels and fund references."""
        leaves: Breakdown = {}
        references: List[Tuple[str, float]] = []
        for label, weight in security.holdings.items():
            ref = self.reference_of(label, security.isin)
            if ref is None:
                leaves[label] = leaves.get(label, 0.0) + weight
            else:
                references.append((ref, weight))
        return leaves, references

    def resolve(self, isin: str) -> ResolvedExposure:
        """
        Resolve one security.

        Raises:
            KeyError: isin is not in the registry
            CyclicFundReference: look-through revisits a security on the path
            MissingReferencedSecurity: a holding names an undefined ISIN
        """
        if isin not in self.securities:
            raise KeyError(f"ISIN {isin} not found in securities")
        return self._resolve(isin, [])

    def _resolve(self, isin: str, path: List[str]) -> ResolvedExposure:
        cached = self._cache.get(isin)
        if cached is not None:
            return cached

        if isin in path:
            cycle = path[path.index(isin):] + [isin]
            raise CyclicFundReference(cycle)

        security = self.securities[isin]
        path.append(isin)
        try:
            leaves, references = self.split_holdings(security)

            resolved: Dict[Dimension, Breakdown] = {
                d: dict(security.breakdown(d)) for d in LOOKTHROUGH_DIMENSIONS
            }

            if security.holdings:
                holdings: Breakdown = dict(leaves)
            else:
                # A security with no holding rows is its own single holding
                holdings = {security.label: 1.0}

            for ref, weight in references:
                logger.debug(f"Recursing for holding {ref} of {isin}, weight {weight}")
                child = self._resolve(ref, path)
                for dimension in LOOKTHROUGH_DIMENSIONS:
                    _add_scaled(resolved[dimension], child.breakdown(dimension), weight)
                _add_scaled(holdings, child.holdings, weight)
        finally:
            path.pop()

        exposure = ResolvedExposure(
            isin=isin,
            holdings=holdings,
            sectors=resolved[Dimension.SECTOR],
            countries=resolved[Dimension.COUNTRY],
            regions=resolved[Dimension.REGION],
        )
        self._cache[isin] = exposure
        return exposure

    def resolve_all(self) -> Dict[str, ResolvedExposure]:
        """Resolve every security in the registry."""
        results = {isin: self._resolve(isin, []) for isin in self.securities}
        funds = sum(1 for s in self.securities.values() if self.split_holdings(s)[1])
        logger.info(f"Resolved {len(results)} securities ({funds} with fund look-through)")
        return results

    def resolve_many(self, isins: List[str]) -> Dict[str, ResolvedExposure]:
        """Resolve only the given securities (and whatever they reference)."""
        return {isin: self.resolve(isin) for isin in isins}

    def top_level_holdings(self, isin: str) -> Breakdown:
        """
        Holding entries of one security without look-through.

        Fund references are labelled with the referenced fund's name, so the
        intermediate funds show up as holdings in their own right.
        """
        security = self.securities[isin]
        if not security.holdings:
            return {security.label: 1.0}

        holdings: Breakdown = {}
        for label, weight in security.holdings.items():
            ref = self.reference_of(label, isin)
            key = self.securities[ref].label if ref is not None else label
            holdings[key] = holdings.get(key, 0.0) + weight
        return holdings
