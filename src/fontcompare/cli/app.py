"""CLI application entry point for fontcompare.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from fontcompare import __version__
from fontcompare.cli.output import (
    console,
    create_progress,
    print_cancellation_notice,
    print_error,
    print_failures,
    print_header,
    print_input_info,
    print_processing_info,
    print_selection,
    print_step,
    print_success,
    print_variant_list,
)
from fontcompare.config import (
    AxisFilter,
    CompileConfig,
    LoggingConfig,
    OutputConfig,
    ProcessingConfig,
    RenderConfig,
    RunConfig,
    SelectionConfig,
    compile_pattern,
)
from fontcompare.core import ComparisonPipeline, SourceDocument
from fontcompare.domain import FontStretch, FontStyle
from fontcompare.exceptions import AllVariantsFailedError, FontCompareError
from fontcompare.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="fontcompare",
    help="Compare how a Typst document looks with different fonts or font variants.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Fontcompare[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def compare(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the Typst input file",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output PDF (default: {input-stem}.variants.pdf)",
        ),
    ] = None,
    variants: Annotated[
        bool,
        typer.Option(
            "--variants",
            "-v",
            help="Try each variant (style, weight, stretch) instead of one per family",
        ),
    ] = False,
    fallback: Annotated[
        bool,
        typer.Option(
            "--fallback",
            "-f",
            help="Enable font fallback",
        ),
    ] = False,
    include: Annotated[
        str | None,
        typer.Option(
            "--include",
            "-i",
            help="Only include font families matching this regular expression",
        ),
    ] = None,
    exclude: Annotated[
        str | None,
        typer.Option(
            "--exclude",
            "-e",
            help="Exclude font families matching this regular expression (wins over --include)",
        ),
    ] = None,
    styles: Annotated[
        list[FontStyle] | None,
        typer.Option(
            "--style",
            help="Styles to try with --variants (repeatable, default: normal)",
        ),
    ] = None,
    weights: Annotated[
        list[int] | None,
        typer.Option(
            "--weight",
            help="Weights to try with --variants (repeatable, default: all)",
            min=1,
            max=1000,
        ),
    ] = None,
    stretches: Annotated[
        list[FontStretch] | None,
        typer.Option(
            "--stretch",
            help="Stretches to try with --variants (repeatable, default: all)",
        ),
    ] = None,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            envvar="TYPST_ROOT",
            metavar="DIR",
            help="Project root folder (default: directory of the input)",
        ),
    ] = None,
    font_paths: Annotated[
        list[Path] | None,
        typer.Option(
            "--font-path",
            envvar="TYPST_FONT_PATHS",
            metavar="DIR",
            help="Additional directory to search for fonts (repeatable)",
        ),
    ] = None,
    ignore_system_fonts: Annotated[
        bool,
        typer.Option(
            "--ignore-system-fonts",
            help="Only use fonts from --font-path directories",
        ),
    ] = False,
    ppi: Annotated[
        float,
        typer.Option(
            "--ppi",
            help="Resolution to render the variants at",
            min=1.0,
            max=2400.0,
        ),
    ] = 300.0,
    baseline: Annotated[
        bool,
        typer.Option(
            "--baseline",
            help="Add a first pass using the default font resolution",
        ),
    ] = False,
    merge_pages: Annotated[
        bool,
        typer.Option(
            "--merge-pages",
            help="Stack all pages of a variant into a single output page",
        ),
    ] = False,
    jobs: Annotated[
        int,
        typer.Option(
            "--jobs",
            "-j",
            help="Number of variants compiled in parallel",
            min=1,
        ),
    ] = 1,
    typst_bin: Annotated[
        str,
        typer.Option(
            "--typst",
            envvar="TYPST_BIN",
            help="Typst executable",
        ),
    ] = "typst",
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Seconds before compiling one variant is aborted",
            min=0.1,
        ),
    ] = None,
    list_only: Annotated[
        bool,
        typer.Option(
            "--list",
            help="List the selected variants and exit",
        ),
    ] = False,
    report: Annotated[
        Path | None,
        typer.Option(
            "--report",
            help="Write a JSON report of the run",
        ),
    ] = None,
    stamp_labels: Annotated[
        bool,
        typer.Option(
            "--stamp-labels",
            help="Print the font label and page number on every page",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Compile a Typst document once per font and collect the results in one PDF.

    Every font family (or, with --variants, every style, weight and stretch)
    is rendered to its own pages so the fonts can be compared side by side.

    Example:
        fontcompare thesis.typ --include "Serif"

    This will create thesis.variants.pdf with one page per matching family.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        print_error(
            f"Invalid log level: {log_level}",
            details="Valid values: DEBUG, INFO, WARNING, ERROR",
        )
        raise typer.Exit(code=1)

    try:
        config = RunConfig(
            input=input_file,
            selection=SelectionConfig(
                include=compile_pattern("include", include),
                exclude=compile_pattern("exclude", exclude),
                axes=AxisFilter(
                    styles=frozenset(styles) if styles else frozenset({FontStyle.NORMAL}),
                    weights=frozenset(weights or ()),
                    stretches=frozenset(stretches or ()),
                ),
                variants=variants,
            ),
            compile=CompileConfig(
                root=root,
                font_paths=tuple(font_paths or ()),
                use_system_fonts=not ignore_system_fonts,
                fallback=fallback,
                baseline=baseline,
                typst_bin=typst_bin,
                timeout=timeout,
            ),
            render=RenderConfig(ppi=ppi, merge_pages=merge_pages),
            processing=ProcessingConfig(jobs=jobs),
            output=OutputConfig(path=output, report=report, stamp_labels=stamp_labels),
            logging=LoggingConfig(log_file=log_file, log_level=log_level),
        )
    except FontCompareError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except ValidationError as e:
        print_error("Invalid options", details=str(e))
        raise typer.Exit(code=1)

    configure_logging(
        log_file=config.logging.log_file,
        console_level=config.logging.log_level,
        file_level=config.logging.file_log_level,
        quiet=not verbose,
    )

    if not quiet:
        print_header(__version__)

    pipeline = ComparisonPipeline(config)

    try:
        if list_only:
            selection = pipeline.select_variants()
            print_variant_list(selection.labels)
            raise typer.Exit(code=0)

        if not quiet:
            print_step("Preparing")
        source = SourceDocument.resolve(config.input, config.compile.root)
        compiler_version = pipeline.compiler.version()
        if not quiet:
            print_input_info(str(source.path), str(source.root), compiler_version)
            print_step("Discovering fonts")

        selection = pipeline.select_variants()
        if not quiet:
            print_selection(
                selection.labels,
                families=len(selection.families),
                with_variants=selection.with_variants,
                verbose=verbose,
            )
            print_step("Compiling")
            print_processing_info(config.processing.jobs, config.render.ppi)

        try:
            if not quiet:
                total = len(selection) + (1 if config.compile.baseline else 0)
                with create_progress() as progress:
                    task_id = progress.add_task("", total=total)

                    def update_progress(completed: int, _total: int, label: str, *_: object) -> None:
                        progress.update(task_id, completed=completed, description=label)

                    stats = pipeline.run(selection=selection, progress_callback=update_progress)
            else:
                stats = pipeline.run(selection=selection)
        except KeyboardInterrupt:
            if not quiet:
                print_cancellation_notice()
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        summary = stats.failure_summary()
        if summary and not quiet:
            print_failures(summary, stats.failures, verbose=verbose)

        if not quiet and stats.output_path is not None:
            print_success(
                output_path=str(stats.output_path),
                file_size=_format_file_size(stats.output_path),
                total_time_s=stats.duration_seconds,
                pages=stats.page_count,
                succeeded=stats.succeeded_count,
                failed=stats.failed_count,
                avg_time_ms=stats.avg_variant_time_ms,
            )

    except AllVariantsFailedError as e:
        print_error(f"All {len(e.failures)} variants failed, no output written")
        if verbose:
            for label, error in e.failures:
                console.print(f"  {label}: {error.splitlines()[0] if error else ''}", markup=False)
        raise typer.Exit(code=1)
    except FontCompareError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "428 KB")
    """
    try:
        size_bytes = path.stat().st_size
        if size_bytes < 1024:
            return f"{size_bytes} B"
        elif size_bytes < 1024 * 1024:
            return f"{size_bytes / 1024:.0f} KB"
        else:
            return f"{size_bytes / (1024 * 1024):.1f} MB"
    except OSError:
        return "unknown"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
