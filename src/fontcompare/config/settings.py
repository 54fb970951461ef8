"""Configuration settings for Fontcompare."""

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from fontcompare.domain.variant import FontStretch, FontStyle
from fontcompare.exceptions import PatternError


def compile_pattern(option: str, pattern: str | None) -> re.Pattern[str] | None:
    """Compile a family name regular expression.

    Args:
        option: Option name used in error messages ("include" or "exclude")
        pattern: Regular expression, or None

    Returns:
        Compiled pattern, or None if no pattern was given

    Raises:
        PatternError: If the expression does not compile
    """
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(option, pattern, str(e)) from e


class AxisFilter(BaseModel):
    """Restrictions on the variant axes.

    An empty set places no restriction on that axis.
    """

    model_config = ConfigDict(frozen=True)

    styles: frozenset[FontStyle] = Field(
        default=frozenset({FontStyle.NORMAL}),
        description="Allowed styles",
    )
    weights: frozenset[int] = Field(
        default=frozenset(),
        description="Allowed weights (1-1000)",
    )
    stretches: frozenset[FontStretch] = Field(
        default=frozenset(),
        description="Allowed stretches",
    )

    def allows(self, style: FontStyle, weight: int, stretch: FontStretch) -> bool:
        """Check whether a combination of axis values passes the filter."""
        return (
            (not self.styles or style in self.styles)
            and (not self.weights or weight in self.weights)
            and (not self.stretches or stretch in self.stretches)
        )


class SelectionConfig(BaseModel):
    """Configuration for choosing font variants."""

    model_config = ConfigDict(frozen=True)

    include: re.Pattern[str] | None = Field(
        default=None,
        description="Only keep families matching this expression",
    )
    exclude: re.Pattern[str] | None = Field(
        default=None,
        description="Drop families matching this expression (wins over include)",
    )
    axes: AxisFilter = Field(default_factory=AxisFilter)
    variants: bool = Field(
        default=False,
        description="Compare every style, weight and stretch instead of one face per family",
    )


class CompileConfig(BaseModel):
    """Configuration for the Typst compiler."""

    model_config = ConfigDict(frozen=True)

    root: Path | None = Field(
        default=None,
        description="Project root (None = directory of the input)",
    )
    font_paths: tuple[Path, ...] = Field(
        default=(),
        description="Additional font directories",
    )
    use_system_fonts: bool = Field(
        default=True,
        description="Search the system font directories",
    )
    fallback: bool = Field(
        default=False,
        description="Let the compiler fall back to other fonts for missing glyphs",
    )
    baseline: bool = Field(
        default=False,
        description="Add a pass using the compiler's default font resolution",
    )
    typst_bin: str = Field(
        default="typst",
        description="Typst executable",
    )
    timeout: float | None = Field(
        default=None,
        gt=0.0,
        description="Seconds before one compilation is aborted (None = no limit)",
    )


class RenderConfig(BaseModel):
    """Configuration for rasterizing pages."""

    model_config = ConfigDict(frozen=True)

    ppi: float = Field(
        default=300.0,
        gt=0.0,
        le=2400.0,
        description="Pixels per inch",
    )
    merge_pages: bool = Field(
        default=False,
        description="Stack all pages of a variant into one image",
    )


class ProcessingConfig(BaseModel):
    """Configuration for variant processing."""

    model_config = ConfigDict(frozen=True)

    jobs: int = Field(
        default=1,
        ge=1,
        description="Variants compiled concurrently",
    )


class OutputConfig(BaseModel):
    """Configuration for produced files."""

    model_config = ConfigDict(frozen=True)

    path: Path | None = Field(
        default=None,
        description="Output PDF (None = <input-stem>.variants.pdf)",
    )
    report: Path | None = Field(
        default=None,
        description="Optional JSON run report",
    )
    stamp_labels: bool = Field(
        default=False,
        description="Print the variant label and page number on every page",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class RunConfig(BaseModel):
    """Main application settings, resolved once per run."""

    model_config = ConfigDict(frozen=True)

    input: Path
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    compile: CompileConfig = Field(default_factory=CompileConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def output_path(self) -> Path:
        """Output PDF path, derived from the input when not given."""
        if self.output.path is not None:
            return self.output.path
        return default_output_path(self.input)


def default_output_path(input_path: Path) -> Path:
    """Generate the default output path.

    Converts: thesis.typ -> thesis.variants.pdf

    Args:
        input_path: Input document path

    Returns:
        Path next to the input with a .variants.pdf extension
    """
    return input_path.with_suffix(".variants.pdf")
