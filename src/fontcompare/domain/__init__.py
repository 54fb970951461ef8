"""Domain models for fontcompare.

This module contains the models passed through the comparison pipeline.
All models are designed to be:

- Immutable where they identify something (frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of fontTools, Pillow and the Typst binary

Key classes:
- FontVariant: A font face identified by family, style, weight and stretch
- FontSource: The file a face was discovered in
- CompiledPage: A page produced by the compiler for one variant
- RenderedPage: A labelled page ready to be assembled
- VariantOutcome: Pages or error of one variant
"""

from fontcompare.domain.page import (
    CompiledPage,
    RenderedPage,
    VariantOutcome,
    pixels_to_points,
)
from fontcompare.domain.variant import (
    BASELINE_LABEL,
    FontSource,
    FontStretch,
    FontStyle,
    FontVariant,
)

__all__: list[str] = [
    "BASELINE_LABEL",
    # Enums
    "FontStretch",
    "FontStyle",
    # Core types
    "CompiledPage",
    "FontSource",
    "FontVariant",
    "RenderedPage",
    "VariantOutcome",
    "pixels_to_points",
]
