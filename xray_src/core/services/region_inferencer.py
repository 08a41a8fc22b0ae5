# core/services/region_inferencer.py
"""RegionInferencer - Fills missing region breakdowns from country breakdowns."""

from typing import Dict, Mapping

from xray_src.data.classification import ClassificationTable
from xray_src.models import Security
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)


class RegionInferencer:
    """Derives regions from countries for securities that list no regions."""

    def __init__(self, classification: ClassificationTable):
        self.classification = classification

    def infer_one(self, security: Security) -> Security:
        """
        Return the security with regions derived from its countries.

        Securities that already list regions, or list no countries, are
        returned unchanged.
        """
        if security.regions or not security.countries:
            return security

        regions: Dict[str, float] = {}
        for country, weight in security.countries.items():
            region = self.classification.region_of(country, security.isin)
            regions[region] = regions.get(region, 0.0) + weight

        logger.debug(
            f"Calculated regions for {security.isin} [{security.label}]: {regions}"
        )
        return security.model_copy(update={"regions": regions})

    def infer(self, securities: Mapping[str, Security]) -> Dict[str, Security]:
        """
        Apply inference to every security in the registry.

        Returns:
            New registry; the input mapping is not modified
        """
        result: Dict[str, Security] = {}
        inferred = 0
        for isin, security in securities.items():
            updated = self.infer_one(security)
            if updated is not security:
                inferred += 1
            result[isin] = updated

        logger.info(f"Inferred regions for {inferred} of {len(result)} securities")
        return result
