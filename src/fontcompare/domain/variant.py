"""Font variant representation.

This module defines the identity of a font face as seen by the Typst
compiler: a family name plus the three variant axes (style, weight and
stretch) and a handle back to the file the face was read from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

BASELINE_LABEL = "System fonts"


class FontStyle(str, Enum):
    """Slant of a font face."""

    NORMAL = "normal"
    ITALIC = "italic"
    OBLIQUE = "oblique"

    @property
    def rank(self) -> int:
        """Position used for ordering (normal < italic < oblique)."""
        return _STYLE_ORDER.index(self)


_STYLE_ORDER = [FontStyle.NORMAL, FontStyle.ITALIC, FontStyle.OBLIQUE]


class FontStretch(str, Enum):
    """Named width classes, matching OS/2 usWidthClass 1-9."""

    ULTRA_CONDENSED = "ultra-condensed"
    EXTRA_CONDENSED = "extra-condensed"
    CONDENSED = "condensed"
    SEMI_CONDENSED = "semi-condensed"
    NORMAL = "normal"
    SEMI_EXPANDED = "semi-expanded"
    EXPANDED = "expanded"
    EXTRA_EXPANDED = "extra-expanded"
    ULTRA_EXPANDED = "ultra-expanded"

    @property
    def ratio(self) -> float:
        """Width relative to normal, in percent."""
        return _STRETCH_RATIOS[self]

    @classmethod
    def from_width_class(cls, width_class: int) -> "FontStretch":
        """Map an OS/2 usWidthClass value to a stretch.

        Values outside 1-9 are treated as normal width.
        """
        if 1 <= width_class <= 9:
            return list(_STRETCH_RATIOS)[width_class - 1]
        return cls.NORMAL


_STRETCH_RATIOS: dict[FontStretch, float] = {
    FontStretch.ULTRA_CONDENSED: 50.0,
    FontStretch.EXTRA_CONDENSED: 62.5,
    FontStretch.CONDENSED: 75.0,
    FontStretch.SEMI_CONDENSED: 87.5,
    FontStretch.NORMAL: 100.0,
    FontStretch.SEMI_EXPANDED: 112.5,
    FontStretch.EXPANDED: 125.0,
    FontStretch.EXTRA_EXPANDED: 150.0,
    FontStretch.ULTRA_EXPANDED: 200.0,
}


@dataclass(frozen=True)
class FontSource:
    """Location of a face: font file path and index inside a collection."""

    path: str
    index: int = 0


@dataclass(frozen=True)
class FontVariant:
    """A single font face identified by family and variant axes.

    Equality, hashing and ordering only consider
    ``(family, style, weight, stretch)``; two files providing the same
    face compare equal.

    Attributes:
        family: Family name as the compiler resolves it (e.g. "Roboto")
        style: Slant of the face
        weight: Weight class, 1 to 1000
        stretch: Width class
        source: File the face was discovered in
    """

    family: str
    style: FontStyle = FontStyle.NORMAL
    weight: int = 400
    stretch: FontStretch = FontStretch.NORMAL
    source: FontSource = field(default=FontSource(""), compare=False)

    def __post_init__(self) -> None:
        if not 1 <= self.weight <= 1000:
            raise ValueError(f"Font weight must be between 1 and 1000, got {self.weight}")

    @property
    def key(self) -> tuple[str, FontStyle, int, FontStretch]:
        """Identity tuple of the variant."""
        return (self.family, self.style, self.weight, self.stretch)

    @property
    def sort_key(self) -> tuple[str, int, int, float]:
        """Key giving the deterministic enumeration order."""
        return (self.family, self.style.rank, self.weight, self.stretch.ratio)

    def __lt__(self, other: "FontVariant") -> bool:
        if not isinstance(other, FontVariant):
            return NotImplemented
        return self.sort_key < other.sort_key

    @property
    def is_regular(self) -> bool:
        """Whether this is the normal style, 400 weight, normal width face."""
        return (
            self.style == FontStyle.NORMAL
            and self.weight == 400
            and self.stretch == FontStretch.NORMAL
        )

    def label(self, with_variant: bool = True) -> str:
        """Human-readable label for output pages.

        Args:
            with_variant: Include style, weight and stretch after the family

        Returns:
            "Roboto" or "Roboto Italic 700 Condensed"
        """
        if not with_variant:
            return self.family
        style = self.style.value.capitalize()
        stretch = self.stretch.value.title()
        return f"{self.family} {style} {self.weight} {stretch}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the variant
        """
        return {
            "family": self.family,
            "style": self.style.value,
            "weight": self.weight,
            "stretch": self.stretch.value,
            "source": {"path": self.source.path, "index": self.source.index},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FontVariant":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a variant

        Returns:
            FontVariant instance
        """
        source = data.get("source") or {}
        return cls(
            family=data["family"],
            style=FontStyle(data["style"]),
            weight=data["weight"],
            stretch=FontStretch(data["stretch"]),
            source=FontSource(path=source.get("path", ""), index=source.get("index", 0)),
        )

    def __str__(self) -> str:
        return self.label()
