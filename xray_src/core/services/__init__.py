# core/services/__init__.py
"""
Services package for the exposure engine.

Services are UI-agnostic: they take models in and return models out, and
leave file I/O and presentation to the pipeline and reporting layers.
"""

from .merger import SecurityMerger
from .region_inferencer import RegionInferencer
from .resolver import FundResolver
from .normalizer import PortfolioNormalizer
from .aggregator import ExposureAggregator

__all__ = [
    "SecurityMerger",
    "RegionInferencer",
    "FundResolver",
    "PortfolioNormalizer",
    "ExposureAggregator",
]
