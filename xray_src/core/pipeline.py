# core/pipeline.py
"""
Exposure Pipeline Orchestrator.

Thin coordinator that:
- Calls services in order
- Emits progress via callback
- Collects data quality warnings from every service
- Times each phase

Contains NO business logic; that lives in the services. Every XRayError
raised by a service propagates unchanged; there are no partial results.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

from xray_src.core.contracts import DataQuality
from xray_src.core.services import (
    ExposureAggregator,
    FundResolver,
    PortfolioNormalizer,
    RegionInferencer,
    SecurityMerger,
)
from xray_src.data.classification import ClassificationTable, load_classification_table
from xray_src.data.ingestion import read_portfolio, read_securities
from xray_src.models import (
    AggregateResult,
    HoldingView,
    NormalizedPortfolio,
    PortfolioEntry,
    PortfolioMode,
    RawRow,
    Security,
)
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[str, float], None]


class PipelineMonitor:
    """Tracks how long each phase took."""

    def __init__(self):
        self.start_time = time.time()
        self.phase_times: Dict[str, float] = {}

    def record_phase(self, phase: str, duration: float):
        self.phase_times[phase] = round(duration, 3)

    def get_metrics(self) -> Dict[str, object]:
        return {
            "execution_time_seconds": round(time.time() - self.start_time, 3),
            "phase_durations": self.phase_times,
        }


@dataclass
class ExposureReport:
    """Everything one run produced."""

    securities: Dict[str, Security]
    portfolio: NormalizedPortfolio
    result: AggregateResult
    quality: DataQuality = field(default_factory=DataQuality)
    metrics: Dict[str, object] = field(default_factory=dict)


class ExposurePipeline:
    """
    Thin orchestrator that coordinates services.

    Contains NO business logic, only:
    - Calls services in order
    - Emits progress via callback
    - Collects warnings
    """

    def __init__(
        self,
        classification: Optional[ClassificationTable] = None,
        holding_view: HoldingView = HoldingView.LEAVES,
        strict: bool = True,
        strict_references: bool = True,
    ):
        """
        Args:
            classification: Lookup table; the bundled one when omitted
            holding_view: Flattened leaves or each security's own holdings
            strict: Conflicting duplicate categories fail the run
            strict_references: Undefined ISIN holdings fail the run
        """
        self.classification = classification or load_classification_table()
        self.holding_view = holding_view
        self.strict = strict
        self.strict_references = strict_references

    def run_files(
        self,
        securities_path: Union[str, Path],
        portfolio_path: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExposureReport:
        """Read both CSV files and run the engine on them."""
        logger.info(f"Reading securities from {securities_path}")
        rows = read_securities(securities_path)
        logger.info(f"Reading portfolio from {portfolio_path}")
        mode, entries = read_portfolio(portfolio_path)
        return self.run(rows, entries, mode, progress_callback)

    def run(
        self,
        rows: Iterable[RawRow],
        entries: Iterable[PortfolioEntry],
        mode: PortfolioMode,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExposureReport:
        """
        Run the full exposure pipeline.

        Args:
            rows: Raw securities rows, in file order
            entries: Portfolio rows
            mode: Whether portfolio values are amounts or weights
            progress_callback: Function to call with (status_text, progress_0_to_1)

        Returns:
            ExposureReport with the aggregate result and collected warnings

        Raises:
            XRayError: on any fatal input problem
        """
        if progress_callback is None:
            progress_callback = lambda msg, pct: logger.debug(
                f"[{pct * 100:.0f}%] {msg}"
            )

        monitor = PipelineMonitor()
        quality = DataQuality()

        # Phase 1: Merge rows into securities
        start = time.time()
        progress_callback("Merging security definitions...", 0.1)
        merger = SecurityMerger(self.classification, strict=self.strict)
        securities = merger.merge(rows)
        quality.merge(merger.quality)
        monitor.record_phase("merge", time.time() - start)

        # Phase 2: Infer regions
        start = time.time()
        progress_callback("Inferring regions...", 0.3)
        securities = RegionInferencer(self.classification).infer(securities)
        monitor.record_phase("inference", time.time() - start)

        # Phase 3: Normalize the portfolio
        start = time.time()
        progress_callback("Normalizing portfolio...", 0.45)
        normalizer = PortfolioNormalizer(securities)
        portfolio = normalizer.normalize(entries, mode)
        quality.merge(normalizer.quality)
        monitor.record_phase("normalization", time.time() - start)

        # Phase 4: Look through funds
        start = time.time()
        progress_callback("Resolving fund holdings...", 0.6)
        resolver = FundResolver(securities, strict_references=self.strict_references)
        resolved = resolver.resolve_all()
        top_level = None
        if self.holding_view == HoldingView.TOP_LEVEL:
            top_level = {
                isin: resolver.top_level_holdings(isin) for isin in portfolio.weights
            }
        monitor.record_phase("resolution", time.time() - start)

        # Phase 5: Aggregate
        start = time.time()
        progress_callback("Calculating exposures...", 0.8)
        aggregator = ExposureAggregator(self.classification, self.holding_view)
        result = aggregator.aggregate(portfolio, resolved, securities, top_level)
        quality.merge(aggregator.quality)
        monitor.record_phase("aggregation", time.time() - start)

        progress_callback("Complete!", 1.0)

        if quality.issues:
            logger.warning(quality.to_user_message())

        return ExposureReport(
            securities=securities,
            portfolio=portfolio,
            result=result,
            quality=quality,
            metrics=monitor.get_metrics(),
        )
