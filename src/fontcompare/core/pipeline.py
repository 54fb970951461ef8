"""Comparison pipeline orchestration.

This module coordinates the full workflow: discover fonts, select variants,
compile and render each variant, and append the pages to the comparison
document. Variants are processed one at a time by default, or by a small
process pool whose results are still consumed in selection order.

Key components:
- process_variant: Top-level picklable function for parallel execution
- ComparisonPipeline: Main orchestrator class
"""

import time
import traceback
from collections import deque
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ProcessPoolExecutor
from typing import Any

import structlog

from fontcompare.config.settings import RunConfig
from fontcompare.core.driver import Compiler, SourceDocument, compile_for, label_for
from fontcompare.core.render import render
from fontcompare.core.selection import VariantSelection, select_from_config
from fontcompare.domain.page import VariantOutcome
from fontcompare.domain.variant import FontVariant
from fontcompare.exceptions import AllVariantsFailedError
from fontcompare.io.assembler import DocumentAssembler, ensure_writable
from fontcompare.io.catalog import FontCatalog
from fontcompare.io.report import VariantReport, write_report
from fontcompare.io.typst import TypstCompiler
from fontcompare.utils.logging import RunLogger, RunStats

ProgressCallback = Callable[[int, int, str, bool], None]


def process_variant(
    variant_dict: dict[str, Any] | None,
    source_dict: dict[str, Any],
    config_dict: dict[str, Any],
    compiler: Compiler | None = None,
) -> dict[str, Any]:
    """Compile and render the document for a single variant.

    Top-level function designed to be picklable for use with
    ProcessPoolExecutor. Failures are returned, not raised, so one broken
    font never stops the run.

    Args:
        variant_dict: Serialized variant (None for the baseline pass)
        source_dict: Serialized source document
        config_dict: Serialized run configuration
        compiler: Compiler to use (a TypstCompiler from the config if None)

    Returns:
        Dictionary containing either:
        - Success: {"label", "variant", "pages": [page dicts], "duration_ms"}
        - Error: {"label", "variant", "error", "error_type", "traceback", "duration_ms"}
    """
    start_time = time.time()
    config = RunConfig.model_validate(config_dict)
    variant = FontVariant.from_dict(variant_dict) if variant_dict else None
    label = label_for(variant, config.selection.variants)

    try:
        source = SourceDocument.from_dict(source_dict)
        if compiler is None:
            compiler = TypstCompiler(
                config.compile.typst_bin, timeout=config.compile.timeout
            )

        compiled = compile_for(variant, source, config, compiler)
        pages = render(
            compiled,
            ppi=config.render.ppi,
            label=label,
            family=variant.family if variant else None,
            merge=config.render.merge_pages,
        )
        del compiled

        return {
            "label": label,
            "variant": variant_dict,
            "pages": [page.to_dict() for page in pages],
            "duration_ms": (time.time() - start_time) * 1000,
        }

    except Exception as e:
        return {
            "label": label,
            "variant": variant_dict,
            "error": str(e),
            "error_type": type(e).__name__,
            "traceback": traceback.format_exc(),
            "duration_ms": (time.time() - start_time) * 1000,
        }


class ComparisonPipeline:
    """Orchestrates a font comparison run.

    Manages the complete workflow:
    1. Resolve the input document and check the output path
    2. Discover fonts and select variants
    3. Compile and render each variant (bounded, in order)
    4. Append successful pages to the comparison document
    5. Write the document and the optional report

    Example:
        config = RunConfig(input=Path("thesis.typ"))
        pipeline = ComparisonPipeline(config)
        stats = pipeline.run()
    """

    def __init__(
        self,
        config: RunConfig,
        compiler: Compiler | None = None,
        catalog: FontCatalog | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Run configuration
            compiler: Compiler (a TypstCompiler from the config if None)
            catalog: Font catalog (built from the config if None)
            logger: Structured logger (module logger if None)
        """
        self.config = config
        self.compiler = compiler or TypstCompiler(
            config.compile.typst_bin, timeout=config.compile.timeout
        )
        self.catalog = catalog or FontCatalog(
            config.compile.font_paths,
            use_system=config.compile.use_system_fonts,
        )
        self.logger = logger or structlog.get_logger("fontcompare")
        self.run_logger = RunLogger(self.logger)
        self.outcomes: list[VariantReport] = []

    def select_variants(self) -> VariantSelection:
        """Discover fonts and choose the variants to compile.

        Raises:
            NoFontsFoundError: If no font was found
            EmptySelectionError: If filtering left nothing
        """
        catalog = self.catalog.discover()
        selection = select_from_config(catalog, self.config.selection)
        self.logger.info(
            "Variants selected",
            mode="variants" if selection.with_variants else "families",
            catalog=len(catalog),
            selected=len(selection),
        )
        return selection

    def run(
        self,
        selection: VariantSelection | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> RunStats:
        """Run the comparison and write the output document.

        Args:
            selection: Pre-computed selection (discovered if None)
            progress_callback: Optional callback(completed, total, label, success)

        Returns:
            RunStats with counts, failures and timing

        Raises:
            FontCompareError: On any fatal error; nothing is written then
            KeyboardInterrupt: If the run is cancelled
        """
        stats = self.run_logger.stats
        stats.start_time = time.time()

        source = SourceDocument.resolve(self.config.input, self.config.compile.root)
        output_path = self.config.output_path
        ensure_writable(output_path)
        version = self.compiler.version()

        if selection is None:
            selection = self.select_variants()

        tasks: list[FontVariant | None] = list(selection)
        if self.config.compile.baseline:
            tasks.insert(0, None)
        stats.selected_count = len(tasks)

        self.logger.info(
            "Starting comparison",
            input=str(source.path),
            root=str(source.root),
            output=str(output_path),
            compiler=version,
            variants=len(tasks),
            jobs=self.config.processing.jobs,
        )

        assembler = DocumentAssembler(
            output_path,
            title=f"Font comparison of {source.path.name}",
            nest_by_family=selection.with_variants,
            stamp_labels=self.config.output.stamp_labels,
        )
        expected_pages: int | None = None

        for completed, outcome in enumerate(self._iter_outcomes(tasks, source), start=1):
            self.outcomes.append(VariantReport.from_outcome(outcome))

            if outcome.ok:
                pages = len(outcome.pages)
                if not self.config.render.merge_pages:
                    if expected_pages is None:
                        expected_pages = pages
                    elif pages != expected_pages:
                        self.run_logger.log_page_count_mismatch(
                            outcome.label, expected_pages, pages
                        )
                assembler.append(outcome.pages)
                self.run_logger.log_variant_complete(
                    outcome.label, pages, outcome.duration_ms
                )
            else:
                self.run_logger.log_variant_error(
                    outcome.label,
                    outcome.error or "unknown error",
                    error_type=outcome.error_type,
                    traceback=outcome.traceback,
                )
            outcome.pages.clear()

            if progress_callback is not None:
                progress_callback(completed, len(tasks), outcome.label, outcome.ok)

        if stats.succeeded_count == 0:
            stats.end_time = time.time()
            raise AllVariantsFailedError(stats.failures)

        stats.output_path = assembler.finalize()
        stats.end_time = time.time()

        if self.config.output.report is not None:
            write_report(self.config.output.report, source.path, stats, self.outcomes)

        self.logger.info(
            "Comparison complete",
            succeeded=stats.succeeded_count,
            failed=stats.failed_count,
            pages=stats.page_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        summary = stats.failure_summary()
        if summary:
            self.logger.warning(summary)

        return stats

    def _iter_outcomes(
        self,
        tasks: list[FontVariant | None],
        source: SourceDocument,
    ) -> Iterator[VariantOutcome]:
        """Yield variant outcomes in task order.

        With more than one job, at most ``jobs`` variants are in flight and
        a new one is only submitted once the oldest has been consumed.
        """
        config_dict = self.config.model_dump()
        source_dict = source.to_dict()
        jobs = self.config.processing.jobs

        def task_args(variant: FontVariant | None) -> tuple:
            return (
                variant.to_dict() if variant else None,
                source_dict,
                config_dict,
                self.compiler,
            )

        if jobs <= 1 or len(tasks) <= 1:
            for variant in tasks:
                self.run_logger.log_variant_start(
                    label_for(variant, self.config.selection.variants)
                )
                yield VariantOutcome.from_dict(process_variant(*task_args(variant)))
            return

        pending = iter(tasks)
        window: deque[tuple[FontVariant | None, Future]] = deque()

        with ProcessPoolExecutor(max_workers=jobs) as executor:

            def submit_next() -> None:
                for variant in pending:
                    self.run_logger.log_variant_start(
                        label_for(variant, self.config.selection.variants)
                    )
                    future = executor.submit(process_variant, *task_args(variant))
                    window.append((variant, future))
                    return

            for _ in range(jobs):
                submit_next()

            try:
                while window:
                    variant, future = window.popleft()
                    try:
                        result = future.result()
                    except Exception as e:
                        # Executor-level error (e.g. a worker process died)
                        result = {
                            "label": label_for(variant, self.config.selection.variants),
                            "variant": variant.to_dict() if variant else None,
                            "error": str(e) or type(e).__name__,
                            "error_type": type(e).__name__,
                            "traceback": traceback.format_exc(),
                        }
                    submit_next()
                    yield VariantOutcome.from_dict(result)
            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                self.run_logger.stats.was_cancelled = True
                for _, future in window:
                    future.cancel()
                executor.shutdown(wait=True, cancel_futures=True)
                raise
