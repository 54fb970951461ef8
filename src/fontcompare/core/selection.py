"""Variant selection from the font catalog.

This module turns the exhaustive list of discovered faces into the ordered
list of variants to compile:

1. Family-only mode keeps one representative face per family
2. Variants mode keeps every face allowed by the axis filter
3. Families matching the exclude pattern are dropped
4. Families not matching the include pattern are dropped
5. Duplicates are removed and the result is sorted
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fontcompare.config.settings import AxisFilter, SelectionConfig
from fontcompare.domain.variant import FontVariant
from fontcompare.exceptions import EmptySelectionError


@dataclass(frozen=True)
class VariantSelection:
    """Ordered, duplicate-free variants chosen for a run.

    Attributes:
        variants: Variants in compilation and output order
        with_variants: Whether labels include style, weight and stretch
    """

    variants: tuple[FontVariant, ...]
    with_variants: bool = False

    def __len__(self) -> int:
        return len(self.variants)

    def __iter__(self):
        return iter(self.variants)

    def __getitem__(self, index: int) -> FontVariant:
        return self.variants[index]

    @property
    def labels(self) -> list[str]:
        """Labels of the selected variants, in order."""
        return [self.label_for(v) for v in self.variants]

    @property
    def families(self) -> list[str]:
        """Distinct family names, in order."""
        return list(dict.fromkeys(v.family for v in self.variants))

    def label_for(self, variant: FontVariant) -> str:
        """Output label of a selected variant."""
        return variant.label(with_variant=self.with_variants)


def representatives(catalog: Iterable[FontVariant]) -> list[FontVariant]:
    """Pick one face per family.

    The first discovered regular face (normal style, weight 400, normal
    stretch) wins; a family without one is represented by its first
    discovered face.

    Args:
        catalog: Faces in discovery order

    Returns:
        One variant per family, in order of first discovery
    """
    chosen: dict[str, FontVariant] = {}
    for variant in catalog:
        current = chosen.get(variant.family)
        if current is None or (variant.is_regular and not current.is_regular):
            chosen[variant.family] = variant
    return list(chosen.values())


def _matches(pattern: re.Pattern[str] | None, family: str) -> bool:
    return pattern is not None and pattern.search(family) is not None


def select(
    catalog: Sequence[FontVariant],
    include: re.Pattern[str] | None = None,
    exclude: re.Pattern[str] | None = None,
    axes: AxisFilter | None = None,
    variants_mode: bool = False,
) -> VariantSelection:
    """Choose the variants to compile.

    Args:
        catalog: Every discovered face, in discovery order
        include: Keep only families matching this pattern
        exclude: Drop families matching this pattern; wins over include
        axes: Style, weight and stretch restrictions (variants mode only)
        variants_mode: Compare every face instead of one per family

    Returns:
        Sorted, duplicate-free selection

    Raises:
        EmptySelectionError: If nothing is left after filtering
    """
    if variants_mode:
        axes = axes or AxisFilter()
        candidates = [
            v for v in catalog if axes.allows(v.style, v.weight, v.stretch)
        ]
    else:
        candidates = representatives(catalog)

    candidates = [v for v in candidates if not _matches(exclude, v.family)]
    if include is not None:
        candidates = [v for v in candidates if _matches(include, v.family)]

    unique: dict[tuple, FontVariant] = {}
    for variant in candidates:
        unique.setdefault(variant.key, variant)

    if not unique:
        raise EmptySelectionError(len(catalog))

    return VariantSelection(
        variants=tuple(sorted(unique.values(), key=lambda v: v.sort_key)),
        with_variants=variants_mode,
    )


def select_from_config(
    catalog: Sequence[FontVariant], config: SelectionConfig
) -> VariantSelection:
    """Choose variants using the selection settings of a run."""
    return select(
        catalog,
        include=config.include,
        exclude=config.exclude,
        axes=config.axes,
        variants_mode=config.variants,
    )
