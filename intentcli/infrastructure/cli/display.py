import logging
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.text import Text
from rich.table import Table

from intentcli.domain.interfaces.user_interface import UserInterface
from intentcli.domain.models.common import ProcessedOutput, WeatherReport

logger = logging.getLogger(__name__)

UNIT_LABELS = {
    "metric": {"temperature": "°C", "wind": "km/h"},
    "imperial": {"temperature": "°F", "wind": "mph"},
}


def _fmt(value: Optional[Any], suffix: str = "") -> str:
    if value is None:
        return "n/a"
    if isinstance(value, float):
        value = round(value, 1)
    return f"{value}{suffix}"


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: ProcessedOutput, **kwargs: Any) -> None:
        """Displays output text inside a panel.

        Args:
            output: The processed output string to display.
            **kwargs: ``title`` for the panel header (default: "Result").
        """
        title = kwargs.get("title", "Result")
        panel = Panel(
            Text(str(output)),
            title=f"[bold white]{title}[/bold white]",
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message."""
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message."""
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_weather(self, report: WeatherReport, units: str = "metric") -> None:
        """Renders a weather report as a two-column table."""
        labels = UNIT_LABELS.get(units, UNIT_LABELS["metric"])
        temp = labels["temperature"]
        temperature = report.get("temperature") or {}

        place = report.get("location", "?")
        if report.get("country"):
            place = f"{place}, {report['country']}"

        table = Table(title=f"Weather · {place}", box=ROUNDED, show_header=False)
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")
        table.add_row("Date", str(report.get("date", "")))
        table.add_row("Conditions", f"{report.get('conditions', '')} ({report.get('icon', '')})")
        table.add_row("Temperature", _fmt(temperature.get("current"), temp))
        table.add_row("Feels like", _fmt(temperature.get("feelsLike"), temp))
        table.add_row(
            "Min / Max",
            f"{_fmt(temperature.get('min'), temp)} / {_fmt(temperature.get('max'), temp)}",
        )
        table.add_row("Humidity", _fmt(report.get("humidity"), "%"))
        table.add_row("Wind", _fmt(report.get("windSpeed"), f" {labels['wind']}"))
        table.add_row("Precipitation", _fmt(report.get("precipitation"), "%"))
        table.add_row("Clouds", _fmt(report.get("clouds"), "%"))
        table.add_row("Source", str(report.get("source", "")))
        self.console.print(table)

        if report.get("source") == "mock":
            self.display_warning("Live weather data is unavailable; showing an estimate.")

    def display_table(self, title: str, columns: List[str], rows: List[Dict[str, Any]]) -> None:
        """Renders rows of records as a table with one column per key."""
        table = Table(title=title, box=ROUNDED)
        for column in columns:
            table.add_column(column.capitalize(), style="cyan" if column == columns[0] else None)
        for row in rows:
            table.add_row(*(str(row.get(column, "")) for column in columns))
        self.console.print(table)
