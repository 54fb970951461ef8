"""JSON report of a comparison run."""

from pathlib import Path

from pydantic import BaseModel, Field

from fontcompare.domain.page import VariantOutcome
from fontcompare.utils.logging import RunStats


class VariantReport(BaseModel):
    """Outcome of one variant."""

    label: str
    family: str | None = None
    style: str | None = None
    weight: int | None = None
    stretch: str | None = None
    source: str | None = None
    pages: int = 0
    error: str | None = None
    duration_ms: float = 0.0

    @classmethod
    def from_outcome(cls, outcome: VariantOutcome) -> "VariantReport":
        """Build the report entry of a variant outcome."""
        variant = outcome.variant
        return cls(
            label=outcome.label,
            family=variant.family if variant else None,
            style=variant.style.value if variant else None,
            weight=variant.weight if variant else None,
            stretch=variant.stretch.value if variant else None,
            source=variant.source.path if variant and variant.source.path else None,
            pages=len(outcome.pages),
            error=outcome.error,
            duration_ms=round(outcome.duration_ms, 2),
        )


class RunReport(BaseModel):
    """Summary of a comparison run."""

    input: str
    output: str | None = None
    selected: int = 0
    succeeded: int = 0
    failed: int = 0
    pages: int = 0
    duration_seconds: float = 0.0
    variants: list[VariantReport] = Field(default_factory=list)


def write_report(
    path: Path,
    input_path: Path,
    stats: RunStats,
    outcomes: list[VariantReport],
) -> None:
    """Write the run report as JSON.

    Args:
        path: Destination file
        input_path: Compared document
        stats: Run statistics
        outcomes: Per-variant entries in selection order
    """
    report = RunReport(
        input=str(input_path),
        output=str(stats.output_path) if stats.output_path else None,
        selected=stats.selected_count,
        succeeded=stats.succeeded_count,
        failed=stats.failed_count,
        pages=stats.page_count,
        duration_seconds=round(stats.duration_seconds, 3),
        variants=outcomes,
    )
    path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
