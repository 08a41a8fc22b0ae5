"""Console summary of an exposure run, rendered with rich."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from xray_src.core.contracts import DataQuality, IssueSeverity
from xray_src.models import AggregateResult, Dimension

SEVERITY_STYLES = {
    IssueSeverity.CRITICAL: "bold red",
    IssueSeverity.HIGH: "red",
    IssueSeverity.MEDIUM: "yellow",
    IssueSeverity.LOW: "dim",
}


def dimension_table(
    result: AggregateResult,
    dimension: Dimension,
    limit: Optional[int] = None,
    currency: str = "€",
) -> Table:
    table = Table(
        title=dimension.value, show_header=True, header_style="bold cyan", box=None
    )
    table.add_column(dimension.value, style="dim")
    table.add_column("Weight", justify="right")
    if result.total_amount is not None:
        table.add_column("Value", justify="right")

    for category, weight in result.sorted_items(dimension, limit):
        cells = [category, f"{weight * 100:.2f}%"]
        if result.total_amount is not None:
            cells.append(f"{weight * result.total_amount:,.0f} {currency}")
        table.add_row(*cells)

    remainder = result.unclassified(dimension)
    if remainder > 1e-9:
        cells = ["[italic]Unknown[/italic]", f"{remainder * 100:.2f}%"]
        if result.total_amount is not None:
            cells.append(f"{remainder * result.total_amount:,.0f} {currency}")
        table.add_row(*cells)
    return table


def quality_table(quality: DataQuality) -> Table:
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Severity", width=9)
    table.add_column("Code", style="dim")
    table.add_column("Message")
    for issue in quality.issues:
        style = SEVERITY_STYLES.get(issue.severity, "")
        table.add_row(f"[{style}]{issue.severity.value}[/{style}]", issue.code, issue.message)
    return table


def print_summary(
    result: AggregateResult,
    quality: Optional[DataQuality] = None,
    limit: Optional[int] = None,
    currency: str = "€",
    console: Optional[Console] = None,
) -> None:
    """Print one table per dimension, the portfolio TER and any data warnings."""
    console = console or Console()

    header = f"[bold blue]Portfolio TER {result.ter:.3f}%[/bold blue]"
    if result.total_amount is not None:
        header += f"   [bold]Total {result.total_amount:,.2f} {currency}[/bold]"
    console.print(Panel.fit(header))

    for dimension in Dimension:
        console.print(dimension_table(result, dimension, limit, currency))
        console.print()

    if quality is not None and quality.issues:
        console.print(f"[yellow]{quality.to_user_message()}[/yellow]")
        console.print(quality_table(quality))
