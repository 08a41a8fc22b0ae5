"""
Chart and file output for an exposure run.

Builds one bar chart per classification dimension on a shared
plotly figure, then writes it as HTML and, on request, as a static image.
Reporting only reads the AggregateResult; it never changes it.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import plotly.graph_objects as go
from plotly.subplots import make_subplots
from pydantic import BaseModel, Field, field_validator

from xray_src.config import (
    CHART_HEIGHT,
    CHART_LIMIT,
    CURRENCY,
    IMAGE_FORMATS,
    IMAGE_HEIGHT,
    IMAGE_WIDTH,
    UNKNOWN_LABEL,
)
from xray_src.core.errors import ReportWriteError
from xray_src.models import AggregateResult, Dimension
from xray_src.xray_utils.logging_config import get_logger

logger = get_logger(__name__)

Y_AXIS_TITLE = "Exposure %"
UNKNOWN_COLOR = "gray"
BAR_COLOR = "#636efa"


class RenderConfig(BaseModel):
    """Presentation choices for one run, filled from the command line."""

    output_name: str
    output_folder: Path = Path(".")
    limit: int = Field(default=CHART_LIMIT, ge=1)
    currency: str = CURRENCY
    save_image: bool = False
    image_format: str = "png"
    image_scale: float = Field(default=1.0, gt=0)
    display: bool = False
    export_csv: bool = True

    @field_validator("image_format")
    @classmethod
    def known_format(cls, v: str) -> str:
        v = v.lower()
        if v not in IMAGE_FORMATS:
            raise ValueError(f"image format must be one of {', '.join(IMAGE_FORMATS)}")
        return v

    @property
    def html_path(self) -> Path:
        return self.output_folder / f"{self.output_name}.html"

    @property
    def image_path(self) -> Path:
        return self.output_folder / f"{self.output_name}.{self.image_format}"

    @property
    def csv_path(self) -> Path:
        return self.output_folder / f"{self.output_name}_exposure.csv"


def chart_rows(
    result: AggregateResult, dimension: Dimension, limit: Optional[int] = None
) -> List[Tuple[str, float]]:
    """
    Categories of one dimension as (label, percent), largest first.

    The top `limit` categories are kept and the unclassified remainder is
    appended as "Unknown" so every chart accounts for 100% of the portfolio.
    """
    rows = [(c, w * 100) for c, w in result.sorted_items(dimension, limit)]
    remainder = result.unclassified(dimension)
    if remainder > 1e-9:
        rows.append((UNKNOWN_LABEL, remainder * 100))
    return rows


def chart_title(result: AggregateResult, name: str) -> str:
    return f"Asset exposure for {name} portfolio, TER {result.ter:.3f}%"


def build_figure(result: AggregateResult, config: RenderConfig) -> go.Figure:
    """Create the subplot grid: one bar chart per dimension, in Dimension order."""
    dimensions = list(Dimension)
    fig = make_subplots(rows=len(dimensions), cols=1)

    for idx, dimension in enumerate(dimensions, start=1):
        rows = chart_rows(result, dimension, config.limit)
        labels = [label for label, _ in rows]
        values = [value for _, value in rows]
        colors = [UNKNOWN_COLOR if label == UNKNOWN_LABEL else BAR_COLOR for label in labels]

        bar = go.Bar(
            x=labels,
            y=values,
            name="",
            text=[f"{v:.2f}%" for v in values],
            marker=dict(color=colors),
            hoverinfo="skip",
        )
        if result.total_amount is not None:
            bar.update(
                hovertext=[
                    f"{v * result.total_amount / 100:.0f} {config.currency}" for v in values
                ],
                hoverinfo="text",
            )
        fig.add_trace(bar, row=idx, col=1)
        fig.update_xaxes(title_text=dimension.value, row=idx, col=1)
        fig.update_yaxes(title_text=Y_AXIS_TITLE, row=idx, col=1)

    fig.update_layout(
        title=chart_title(result, config.output_name),
        height=CHART_HEIGHT,
        showlegend=False,
    )
    return fig


def write_outputs(result: AggregateResult, config: RenderConfig) -> List[Path]:
    """
    Write the HTML chart plus the optional image and CSV export.

    Returns:
        Paths written, in the order they were written
    """
    if not config.output_folder.is_dir():
        raise ReportWriteError(str(config.output_folder), "output folder does not exist")

    written: List[Path] = []
    fig = build_figure(result, config)

    html_path = config.html_path
    try:
        fig.write_html(str(html_path))
    except OSError as e:
        raise ReportWriteError(str(html_path), str(e))
    written.append(html_path)
    logger.info(f"Chart written to {html_path}")

    if config.save_image:
        image_path = config.image_path
        try:
            fig.write_image(
                str(image_path),
                format=config.image_format,
                width=IMAGE_WIDTH,
                height=IMAGE_HEIGHT,
                scale=config.image_scale,
            )
        except (OSError, ValueError) as e:
            raise ReportWriteError(str(image_path), str(e))
        written.append(image_path)
        logger.info(f"Image written to {image_path}")

    if config.export_csv:
        csv_path = config.csv_path
        try:
            result.to_csv(str(csv_path))
        except OSError as e:
            raise ReportWriteError(str(csv_path), str(e))
        written.append(csv_path)
        logger.info(f"Exposure table written to {csv_path}")

    if config.display:
        fig.show()

    return written
