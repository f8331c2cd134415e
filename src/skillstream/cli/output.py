"""Rich console output helpers."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..core.models import Step, StepStatus
from ..tools.models import ToolSpec

# Shared console instance
console = Console()
error_console = Console(stderr=True)

_STEP_MARKS = {
    StepStatus.COMPLETED: "[green]✓[/green]",
    StepStatus.FAILED: "[red]✗[/red]",
    StepStatus.RUNNING: "[cyan]…[/cyan]",
    StepStatus.PENDING: "[dim]·[/dim]",
}


def print_error(message: str) -> None:
    """Print an error message."""
    error_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def create_table(title: str, columns: list[tuple[str, str]]) -> Table:
    """Create a styled table.

    Args:
        title: Table title
        columns: List of (name, style) tuples
    """
    table = Table(title=title, show_header=True, header_style="bold")
    for name, style in columns:
        table.add_column(name, style=style)
    return table


def format_step(step: Step) -> str:
    """One-line step summary, e.g. ``✓ plan: Plan (3ms)``."""
    mark = _STEP_MARKS.get(step.status, "")
    line = f"{mark} [magenta]{step.type.value}[/magenta]: {step.name}"
    if step.duration_ms is not None:
        line += f" [dim]({step.duration_ms}ms)[/dim]"
    if step.error:
        line += f" [red]{step.error}[/red]"
    return line


def print_tool_table(specs: list[ToolSpec], title: str = "Tools") -> None:
    """Print a table of registered tools."""
    table = create_table(
        title,
        [
            ("Name", "cyan"),
            ("Description", ""),
            ("Parameters", "green"),
        ],
    )
    for spec in specs:
        required = set(spec.parameters.get("required", []))
        params = ", ".join(
            f"{name}*" if name in required else name
            for name in spec.parameters.get("properties", {})
        )
        table.add_row(spec.name, spec.description, params or "-")
    console.print(table)
