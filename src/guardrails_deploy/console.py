"""Styled terminal output for the deployer.

Every user-facing line goes through the helpers below so that status
markers and colors stay consistent between phases.
"""

from collections.abc import Generator, Iterable, Mapping
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from guardrails_deploy.models import ChartEntry

_THEME = Theme(
    {
        "info": "cyan",
        "success": "#76b900",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "#76b900 bold",
        "muted": "dim",
    }
)

# (style, marker) per message level
_MARKERS = {
    "info": ("info", "ℹ"),
    "success": ("success", "✓"),
    "warning": ("warning", "⚠"),
    "error": ("error", "✗"),
    "action": ("info", "→"),
    "step": ("muted", "•"),
}

console = Console(theme=_THEME)


def _emit(level: str, message: str) -> None:
    style, marker = _MARKERS[level]
    console.print(f"[{style}]{marker}[/{style}] {message}")


def info(message: str) -> None:
    """Print an informational message."""
    _emit("info", message)


def success(message: str) -> None:
    """Print a message for a completed phase."""
    _emit("success", message)


def warning(message: str) -> None:
    """Print a non-fatal problem, such as an unreachable repository."""
    _emit("warning", message)


def error(message: str) -> None:
    """Print a fatal problem; the caller decides whether to exit."""
    _emit("error", message)


def action(message: str) -> None:
    """Print the start of a phase."""
    _emit("action", message)


def step(message: str) -> None:
    _emit("step", message)


def highlight(text: str) -> str:
    """Wrap text in highlight markup for use inside other messages."""
    return f"[highlight]{text}[/highlight]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Show a spinner for the duration of the block.

    Args:
        message: Status text next to the spinner.

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def chart_table(title: str, charts: Iterable[ChartEntry]) -> None:
    """Print chart entries as a Repository / Chart / Version table.

    Args:
        title: Title shown above the table.
        charts: Entries to list, in display order.

    """
    table = Table(title=title, title_justify="left", header_style="bold")
    table.add_column("Repository", style="muted")
    table.add_column("Chart", style="highlight")
    table.add_column("Version")

    for chart in charts:
        table.add_row(chart.repository, chart.name, chart.version)

    console.print(table)


def summary_panel(title: str, items: Mapping[str, str]) -> None:
    """Print labelled values inside a bordered panel."""
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column(style="info")
    for label, value in items.items():
        grid.add_row(f"{label}:", value)

    console.print(Panel(grid, title=f"[bold]{title}[/bold]", border_style="success"))


def newline() -> None:
    console.print()
