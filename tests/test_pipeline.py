#!/usr/bin/env python3
"""
End-to-end tests for ExposurePipeline, from CSV files to AggregateResult.
Run with: pytest tests/test_pipeline.py -v
"""

import pytest

from xray_src.core.errors import CyclicFundReference, UnknownCountry, UnknownSecurity
from xray_src.core.pipeline import ExposurePipeline, ExposureReport
from xray_src.data.classification import load_classification_table
from xray_src.models import Dimension, HoldingView, PortfolioMode

from tests.factories import SECURITIES_HEADER, make_entries, make_rows, write_csv

APPLE = "US0378331005"
WORLD = "IE00B4L5Y983"
SAP = "DE0007164600"

SECURITIES = [
    f"{APPLE},Apple,AAPL,,,,Technology,100,USA,100,,",
    f"{WORLD},World ETF,IWDA,0.20,{SAP},100,,,,,,",
    f"{SAP},SAP,SAP,,,,Technology,100,Germany,100,,",
]


@pytest.fixture
def files(tmp_path):
    securities = write_csv(tmp_path / "securities.csv", SECURITIES_HEADER, SECURITIES)
    portfolio = write_csv(
        tmp_path / "portfolio.csv", "ISIN,Amount", [f"{APPLE},60", f"{WORLD},40"]
    )
    return securities, portfolio


class TestEndToEnd:
    def test_amount_portfolio_with_fund_look_through(self, files):
        pipeline = ExposurePipeline(load_classification_table())

        report = pipeline.run_files(*files)

        assert isinstance(report, ExposureReport)
        result = report.result
        assert result.get(Dimension.COUNTRY) == pytest.approx({"USA": 0.6, "Germany": 0.4})
        assert result.get(Dimension.REGION) == pytest.approx(
            {"North America": 0.6, "Europe": 0.4}
        )
        assert result.get(Dimension.MARKET) == pytest.approx({"Developed": 1.0})
        assert result.get(Dimension.SECTOR) == pytest.approx({"Technology": 1.0})
        assert result.get(Dimension.HOLDING) == pytest.approx({"Apple": 0.6, "SAP": 0.4})
        assert result.total_amount == pytest.approx(100.0)
        assert result.ter == pytest.approx(0.08)
        assert report.quality.issues == []

    def test_top_level_view_shows_fund(self, files):
        pipeline = ExposurePipeline(
            load_classification_table(), holding_view=HoldingView.TOP_LEVEL
        )

        report = pipeline.run_files(*files)

        assert report.result.get(Dimension.HOLDING) == pytest.approx({"Apple": 0.6, "SAP": 0.4})
        assert report.result.holding_view == HoldingView.TOP_LEVEL

    def test_weight_portfolio(self, tmp_path, files):
        securities, _ = files
        portfolio = write_csv(
            tmp_path / "weights.csv",
            "ISIN,Weight",
            ["# long-term allocation", f"{APPLE},25", f"{WORLD},75"],
        )

        report = ExposurePipeline(load_classification_table()).run_files(securities, portfolio)

        assert report.portfolio.mode == PortfolioMode.WEIGHT
        assert report.result.total_amount is None
        assert report.result.get(Dimension.COUNTRY) == pytest.approx(
            {"USA": 0.25, "Germany": 0.75}
        )

    def test_progress_callback_reaches_completion(self, files):
        calls = []

        ExposurePipeline(load_classification_table()).run_files(
            *files, progress_callback=lambda msg, pct: calls.append(pct)
        )

        assert calls[-1] == 1.0
        assert calls == sorted(calls)


class TestInMemory:
    def test_region_inferred_for_shared_region(self, classification):
        rows = make_rows(
            [
                {"isin": "EE0000000001", "name": "Baltic", "country": "Estonia", "country_weight": "50"},
                {"country": "Germany", "country_weight": "50"},
            ]
        )

        report = ExposurePipeline(classification).run(
            rows, make_entries([("EE0000000001", 1.0)]), PortfolioMode.AMOUNT
        )

        assert report.securities["EE0000000001"].regions == pytest.approx({"Europe": 1.0})
        assert report.result.get(Dimension.REGION) == pytest.approx({"Europe": 1.0})

    def test_unknown_country_fails_the_run(self, classification):
        rows = make_rows([{"isin": "A", "country": "Atlantis", "country_weight": "100"}])

        with pytest.raises(UnknownCountry) as exc:
            ExposurePipeline(classification).run(
                rows, make_entries([("A", 1.0)]), PortfolioMode.AMOUNT
            )

        assert exc.value.country == "Atlantis"
        assert exc.value.isin == "A"

    def test_cycle_fails_the_run(self, classification):
        rows = make_rows(
            [
                {"isin": "A", "holding": "B", "holding_weight": "50"},
                {"isin": "B", "holding": "A", "holding_weight": "50"},
            ]
        )

        with pytest.raises(CyclicFundReference):
            ExposurePipeline(classification).run(
                rows, make_entries([("A", 1.0)]), PortfolioMode.AMOUNT
            )

    def test_unknown_portfolio_isin_fails_the_run(self, classification):
        rows = make_rows([{"isin": "A", "country": "Japan", "country_weight": "100"}])

        with pytest.raises(UnknownSecurity):
            ExposurePipeline(classification).run(
                rows, make_entries([("B", 1.0)]), PortfolioMode.AMOUNT
            )

    def test_warnings_are_collected(self, classification):
        rows = make_rows(
            [
                {"isin": "A", "country": "Japan", "country_weight": "80"},
                {"country": "China", "country_weight": "40"},
            ]
        )

        report = ExposurePipeline(classification).run(
            rows, make_entries([("A", 10.0), ("A", 5.0)]), PortfolioMode.AMOUNT
        )

        codes = report.quality.codes()
        assert "BREAKDOWN_SUM_HIGH" in codes
        assert "DUPLICATE_POSITION" in codes
        assert "DIMENSION_TOTAL_HIGH" in codes
        assert not report.quality.is_trustworthy
