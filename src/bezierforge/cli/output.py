"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from bezierforge.domain import ControlPoint
from bezierforge.io.path_codec import format_number

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for chunked imports.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Bezierforge[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def print_source_info(path: str, kind: str, size: str) -> None:
    """Print information about an input file.

    Args:
        path: Path to the source file
        kind: Detected content kind ("SVG" or "JSON")
        size: Human-readable file size
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(path)
    line.append(f" ({kind})")
    console.print(line)
    console.print(f"  {size}")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "12 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    objects: int,
    points: int,
    errors: int = 0,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total time in seconds
        objects: Number of objects written
        points: Number of anchors written
        errors: Number of objects that failed
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(total_time_s)}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {objects} objects {SYM_DOT} {points} points {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )


def print_warnings(warnings: list[str]) -> None:
    """Print user-facing warnings, one per line."""
    for warning in warnings:
        console.print(f"  [yellow]{SYM_WARN}[/yellow] {warning}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_anchor_table(points: list[ControlPoint]) -> None:
    """Print decoded anchors with their handles."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("anchor")
    table.add_column("handle in")
    table.add_column("handle out")

    def fmt(x: float, y: float) -> str:
        return f"{format_number(x)}, {format_number(y)}"

    for index, cp in enumerate(points):
        table.add_row(
            str(index),
            fmt(cp.x, cp.y),
            fmt(cp.handle_in.x, cp.handle_in.y),
            fmt(cp.handle_out.x, cp.handle_out.y),
        )
    console.print(table)


def print_cancellation_summary(processed: int, pending: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of candidates processed before cancellation
        pending: Number of candidates never processed
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} objects completed {SYM_DOT} {pending} pending")
    console.print("  No output file created")
