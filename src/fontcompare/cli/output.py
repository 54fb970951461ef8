"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for variant compilation.

    Returns:
        Configured Progress instance with current variant and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        TextColumn("{task.description}"),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header."""
    console.print(f"\n[bold]Fontcompare[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator."""
    console.print(f"\n{SYM_STEP} {message}")


def print_input_info(input_path: str, root: str, compiler: str) -> None:
    """Print the compared document and compiler.

    Args:
        input_path: Path to the input document
        root: Project root
        compiler: Compiler version string
    """
    line = Text("  ")
    line.append(input_path)
    console.print(line)
    root_line = Text(f"  root {SYM_DOT} ")
    root_line.append(root)
    console.print(root_line)
    console.print(f"  {compiler}")


def print_selection(labels: list[str], families: int, with_variants: bool, verbose: bool) -> None:
    """Print the selected variants.

    Args:
        labels: Labels of the selected variants
        families: Number of distinct families
        with_variants: Whether every variant is compared
        verbose: Whether to list all labels
    """
    mode = "variants" if with_variants else "families"
    console.print(
        f"  [green]{len(labels)}[/green] {mode} selected {SYM_DOT} {families} families"
    )
    if verbose and labels:
        names = ", ".join(labels[:20])
        if len(labels) > 20:
            names += f" {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(labels) - 20} more)"
        console.print(Text(f"  {names}"))


def print_variant_list(labels: list[str]) -> None:
    """Print one selected variant per line."""
    console.print(f"\n[bold]{len(labels)} variants[/bold]\n")
    for label in labels:
        console.print(Text(f"  {label}"))


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


def print_processing_info(jobs: int, ppi: float) -> None:
    """Print processing configuration."""
    plural = "job" if jobs == 1 else "jobs"
    console.print(f"  {jobs} {plural} {SYM_DOT} {ppi:g} ppi {SYM_DOT} Ctrl+C to cancel")


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    pages: int,
    succeeded: int,
    failed: int,
    avg_time_ms: float | None = None,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        pages: Number of pages written
        succeeded: Number of variants rendered
        failed: Number of variants that failed
        avg_time_ms: Average time per variant in milliseconds
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    error_style = "red" if failed > 0 else "green"
    console.print(
        f"  {pages} pages {SYM_DOT} {succeeded} variants {SYM_DOT} "
        f"[{error_style}]{failed} failed[/{error_style}]"
    )

    if avg_time_ms is not None:
        console.print(f"  {avg_time_ms:.0f}ms avg per variant")


def print_failures(summary: str, failures: list[tuple[str, str]], verbose: bool) -> None:
    """Print the failed variants.

    Args:
        summary: One-line summary ("N of M variants failed: ...")
        failures: (label, error) pairs
        verbose: Whether to show the error of each variant
    """
    console.print(Text(f"\n{SYM_ERR} {summary}", style="yellow"))
    if verbose:
        for label, error in failures:
            first_line = error.splitlines()[0] if error else ""
            console.print(Text(f"  {label}: {first_line}"))


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] ", end="")
    console.print(Text(message))
    if details:
        console.print(Text(f"  {details}"))


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print("  No output file created")
