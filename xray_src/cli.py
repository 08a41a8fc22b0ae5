#!/usr/bin/env python3
"""Portfolio X-Ray - Command line entry point.

Reads a securities file and a portfolio file, prints the exposure summary and
writes the chart next to the portfolio (or into --output-folder).

Usage:
    xray securities.csv portfolio.csv
    xray securities.csv portfolio.csv -i -f svg --usd --holding-view top-level
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from xray_src.config import CHART_LIMIT, CURRENCY, IMAGE_FORMATS, LOG_LEVEL, OUTPUT_DIR
from xray_src.core.errors import XRayError
from xray_src.core.pipeline import ExposurePipeline
from xray_src.core.reporter import print_summary
from xray_src.core.reporting import RenderConfig, write_outputs
from xray_src.data.classification import load_classification_table
from xray_src.models import HoldingView
from xray_src.xray_utils.logging_config import configure_root_logger, get_logger

logger = get_logger("xray")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive number")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xray",
        description="Portfolio X-Ray: exposure by holding, sector, country, region and market",
    )
    parser.add_argument("securities", type=Path, help="Securities definition CSV")
    parser.add_argument("portfolio", type=Path, help="Portfolio CSV (ISIN plus Amount or Weight)")
    parser.add_argument(
        "-i", "--save-image", action="store_true", help="Also save the chart as an image"
    )
    parser.add_argument(
        "-f",
        "--image-format",
        choices=IMAGE_FORMATS,
        default="png",
        help="Image format for --save-image",
    )
    parser.add_argument(
        "-s", "--image-scale", type=_positive_float, default=1.0, help="Image scale factor"
    )
    parser.add_argument(
        "-o",
        "--output-folder",
        type=Path,
        default=None,
        help="Where to write reports (default: the portfolio's folder)",
    )
    parser.add_argument(
        "-d", "--display", action="store_true", help="Open the chart in a browser"
    )

    currency = parser.add_mutually_exclusive_group()
    currency.add_argument(
        "--eur", action="store_const", dest="currency", const="€", help="Show amounts in € (default)"
    )
    currency.add_argument(
        "--usd", action="store_const", dest="currency", const="$", help="Show amounts in $"
    )
    currency.add_argument(
        "--set-currency", dest="currency", metavar="SYMBOL", help="Custom currency label"
    )

    parser.add_argument(
        "-l",
        "--limit",
        type=_positive_int,
        default=CHART_LIMIT,
        help="Categories shown per chart",
    )
    parser.add_argument(
        "--holding-view",
        choices=[v.value for v in HoldingView],
        default=HoldingView.LEAVES.value,
        help="leaves: look through funds; top-level: each security's own holdings",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Warn instead of failing on conflicting duplicate categories",
    )
    parser.add_argument(
        "--log-level", default=LOG_LEVEL, help="DEBUG, INFO, WARNING or ERROR"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_root_logger(args.log_level)
    except ValueError as e:
        parser.error(str(e))

    currency = args.currency or CURRENCY
    output_folder = args.output_folder or OUTPUT_DIR or args.portfolio.parent

    try:
        pipeline = ExposurePipeline(
            classification=load_classification_table(),
            holding_view=HoldingView(args.holding_view),
            strict=not args.lenient,
        )
        report = pipeline.run_files(args.securities, args.portfolio)

        print_summary(report.result, report.quality, args.limit, currency)

        config = RenderConfig(
            output_name=args.portfolio.stem,
            output_folder=output_folder,
            limit=args.limit,
            currency=currency,
            save_image=args.save_image,
            image_format=args.image_format,
            image_scale=args.image_scale,
            display=args.display,
        )
        write_outputs(report.result, config)
    except XRayError as e:
        logger.error(e.message)
        if e.fix_hint:
            logger.error(f"Hint: {e.fix_hint}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
