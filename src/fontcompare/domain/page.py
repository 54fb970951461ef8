"""Compiled and rendered page models.

Pages travel between worker processes and the main process, so every
model here can be serialized to a plain dictionary.
"""

from dataclasses import dataclass, field
from typing import Any

from fontcompare.domain.variant import FontVariant

POINTS_PER_INCH = 72.0


def pixels_to_points(pixels: int, ppi: float) -> float:
    """Convert a pixel length at the given resolution to PDF points."""
    return pixels / ppi * POINTS_PER_INCH


@dataclass
class CompiledPage:
    """One page of a document compiled for a single variant.

    Attributes:
        index: Zero-based page number in the compiled document
        png: Raster produced by the compiler
        pixel_width: Raster width in pixels
        pixel_height: Raster height in pixels
        ppi: Resolution the page was rasterized at
    """

    index: int
    png: bytes
    pixel_width: int
    pixel_height: int
    ppi: float

    @property
    def width(self) -> float:
        """Page width in points."""
        return pixels_to_points(self.pixel_width, self.ppi)

    @property
    def height(self) -> float:
        """Page height in points."""
        return pixels_to_points(self.pixel_height, self.ppi)


@dataclass
class RenderedPage:
    """A rendered page paired with the label of the variant that produced it.

    Attributes:
        image: PNG data flattened onto a white background
        width: Page width in points
        height: Page height in points
        pixel_width: Image width in pixels
        pixel_height: Image height in pixels
        label: Variant label shown in the output outline
        family: Family of the variant (None for the baseline pass)
        page_index: Page number inside the variant's document
    """

    image: bytes
    width: float
    height: float
    pixel_width: int
    pixel_height: int
    label: str
    family: str | None = None
    page_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "image": self.image,
            "width": self.width,
            "height": self.height,
            "pixel_width": self.pixel_width,
            "pixel_height": self.pixel_height,
            "label": self.label,
            "family": self.family,
            "page_index": self.page_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderedPage":
        """Deserialize from dictionary."""
        return cls(**data)


@dataclass
class VariantOutcome:
    """Result of compiling and rendering one variant.

    Exactly one of ``pages`` (success) or ``error`` (failure) is meaningful.
    """

    label: str
    variant: FontVariant | None
    pages: list[RenderedPage] = field(default_factory=list)
    error: str | None = None
    error_type: str | None = None
    traceback: str | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Whether the variant produced pages."""
        return self.error is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VariantOutcome":
        """Build an outcome from a worker result dictionary."""
        variant = data.get("variant")
        return cls(
            label=data["label"],
            variant=FontVariant.from_dict(variant) if variant else None,
            pages=[RenderedPage.from_dict(p) for p in data.get("pages", [])],
            error=data.get("error"),
            error_type=data.get("error_type"),
            traceback=data.get("traceback"),
            duration_ms=data.get("duration_ms", 0.0),
        )
