"""Tests for the xray command line entry point."""

from unittest.mock import patch

import plotly.graph_objects as go
import pytest

from xray_src.cli import build_parser, main

from tests.factories import SECURITIES_HEADER, write_csv

APPLE = "US0378331005"
SAP = "DE0007164600"


@pytest.fixture
def inputs(tmp_path):
    securities = write_csv(
        tmp_path / "securities.csv",
        SECURITIES_HEADER,
        [
            f"{APPLE},Apple,AAPL,0.10,,,Technology,100,United States,100,,",
            f"{SAP},SAP,SAP,,,,Technology,100,Germany,100,,",
        ],
    )
    portfolio = write_csv(tmp_path / "my_portfolio.csv", "ISIN,Amount", [f"{APPLE},75", f"{SAP},25"])
    return securities, portfolio


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["s.csv", "p.csv"])

        assert args.limit == 25
        assert args.image_format == "png"
        assert args.image_scale == 1.0
        assert args.currency is None
        assert args.holding_view == "leaves"
        assert not args.save_image and not args.display and not args.lenient

    @pytest.mark.parametrize(
        "flags,currency",
        [(["--eur"], "€"), (["--usd"], "$"), (["--set-currency", "CHF"], "CHF")],
    )
    def test_currency_flags(self, flags, currency):
        args = build_parser().parse_args(["s.csv", "p.csv", *flags])

        assert args.currency == currency

    def test_currency_flags_are_exclusive(self):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["s.csv", "p.csv", "--eur", "--usd"])

        assert exc.value.code == 2

    @pytest.mark.parametrize("flags", [["-l", "0"], ["-s", "-1"], ["-f", "bmp"]])
    def test_invalid_values_exit_2(self, flags):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["s.csv", "p.csv", *flags])

        assert exc.value.code == 2


class TestMain:
    def test_success_writes_reports_next_to_portfolio(self, inputs, tmp_path):
        securities, portfolio = inputs

        code = main([securities, portfolio, "--log-level", "WARNING"])

        assert code == 0
        assert (tmp_path / "my_portfolio.html").exists()
        assert (tmp_path / "my_portfolio_exposure.csv").exists()

    def test_output_folder_and_image(self, inputs, tmp_path):
        securities, portfolio = inputs
        out = tmp_path / "out"
        out.mkdir()

        with patch.object(go.Figure, "write_image") as write_image:
            code = main([securities, portfolio, "-o", str(out), "-i", "-f", "pdf", "--usd"])

        assert code == 0
        assert (out / "my_portfolio.html").exists()
        assert write_image.call_args.args[0] == str(out / "my_portfolio.pdf")

    def test_currency_defaults_to_configured_setting(self, inputs):
        with patch("xray_src.cli.CURRENCY", "CHF"), patch(
            "xray_src.cli.print_summary"
        ) as summary, patch("xray_src.cli.write_outputs") as write:
            code = main([*inputs])

        assert code == 0
        assert summary.call_args.args[3] == "CHF"
        assert write.call_args.args[1].currency == "CHF"

    def test_currency_flag_overrides_setting(self, inputs):
        with patch("xray_src.cli.CURRENCY", "CHF"), patch(
            "xray_src.cli.print_summary"
        ) as summary, patch("xray_src.cli.write_outputs"):
            main([*inputs, "--usd"])

        assert summary.call_args.args[3] == "$"

    def test_engine_error_exits_1(self, inputs, tmp_path):
        securities, _ = inputs
        portfolio = write_csv(tmp_path / "bad.csv", "ISIN,Amount", ["XX0000000000,10"])

        assert main([securities, portfolio]) == 1

    def test_missing_file_exits_1(self, tmp_path):
        assert main([str(tmp_path / "a.csv"), str(tmp_path / "b.csv")]) == 1

    def test_bad_log_level_exits_2(self, inputs):
        with pytest.raises(SystemExit) as exc:
            main([*inputs, "--log-level", "chatty"])

        assert exc.value.code == 2
