"""Core comparison pipeline for fontcompare.

This module contains the core steps of a comparison run:

- Variant selection (family-only collapse, axis filter, include/exclude)
- Compilation with the font resolution bound to one variant
- Rendering compiled pages into labelled output pages
- Orchestration of the whole run, sequential or with a bounded pool

Key functions:
- select: Choose the ordered variants to compile
- compile_for: Compile the unmodified document for one variant
- render: Convert compiled pages into labelled pages
- process_variant: Compile and render one variant (picklable)

Key classes:
- VariantSelection: Ordered, duplicate-free variants of a run
- SourceDocument: Input document inside its project root
- ComparisonPipeline: Main orchestrator
"""

from fontcompare.core.driver import (
    SourceDocument,
    build_main_source,
    compile_for,
    label_for,
)
from fontcompare.core.pipeline import ComparisonPipeline, process_variant
from fontcompare.core.render import merge_images, render
from fontcompare.core.selection import (
    VariantSelection,
    representatives,
    select,
    select_from_config,
)

__all__ = [
    # Pipeline classes
    "ComparisonPipeline",
    # Driver classes
    "SourceDocument",
    # Selection classes
    "VariantSelection",
    "build_main_source",
    "compile_for",
    "label_for",
    "merge_images",
    "process_variant",
    "render",
    "representatives",
    "select",
    "select_from_config",
]
