"""Rich console abstraction layer for datasweeper CLI output.

Handles NO_COLOR environment variable and CI/CD compatibility.
"""

from __future__ import annotations

import os
from typing import Any, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

# Singleton console instance
_console: Optional[Console] = None


def get_console() -> Console:
    """Get or create the singleton Rich Console instance.

    Returns:
        Console: Rich Console instance
    """
    global _console
    if _console is None:
        no_color = os.getenv("NO_COLOR", "").lower() in ("1", "true", "yes")
        is_ci = os.getenv("CI", "").lower() in ("1", "true", "yes")
        force_terminal = not (no_color or is_ci)

        _console = Console(
            force_terminal=force_terminal,
            no_color=no_color,
            highlight=False,  # Prevent auto-highlighting of paths
        )
    return _console


def success(message: str, emoji: bool = True) -> None:
    console = get_console()
    prefix = "✓ " if emoji else ""
    console.print(f"[green]{prefix}{message}[/green]")


def error(message: str, emoji: bool = True) -> None:
    console = get_console()
    prefix = "✗ " if emoji else ""
    console.print(f"[red]{prefix}{message}[/red]")


def warning(message: str, emoji: bool = True) -> None:
    console = get_console()
    prefix = "⚠ " if emoji else ""
    console.print(f"[yellow]{prefix}{message}[/yellow]")


def info(message: str, bold: bool = False) -> None:
    console = get_console()
    style = "bold" if bold else ""
    console.print(message, style=style)


def newline() -> None:
    """Print a blank line."""
    console = get_console()
    console.print()


def table(
    data: List[List[Any]],
    headers: List[str],
    title: Optional[str] = None,
) -> None:
    """Display data in a formatted Rich table.

    Args:
        data: List of rows (each row is a list of values)
        headers: Column headers
        title: Optional table title
    """
    console = get_console()

    rich_table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )

    for header in headers:
        # Right-align numeric-looking headers
        if "count" in header.lower() or "rows" in header.lower():
            rich_table.add_column(header, justify="right")
        else:
            rich_table.add_column(header, justify="left")

    for row in data:
        rich_table.add_row(*[str(cell) for cell in row])

    console.print(rich_table)


def file_list(
    files: Sequence[str],
    max_display: int = 10,
    title: Optional[str] = None,
) -> None:
    """Display list of files, truncated after ``max_display`` entries."""
    console = get_console()

    if title:
        console.print(f"\n[green]{title}[/green]")

    display_count = min(len(files), max_display)
    for file in files[:display_count]:
        console.print(f"  {file}")

    if len(files) > display_count:
        console.print(f"  [dim]...and {len(files) - display_count} more[/dim]")


def confirm(message: str, default: bool = False, abort: bool = True) -> bool:
    """Prompt user for confirmation (wraps click.confirm)."""
    import click

    return click.confirm(message, default=default, abort=abort)
