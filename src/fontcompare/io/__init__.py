"""I/O layer for fontcompare.

This module handles everything outside the process: font files, the Typst
compiler and the produced documents.

Key responsibilities:
- Discover installed font faces (fontTools)
- Run the Typst compiler and collect rasterized pages
- Write the comparison PDF with per-page sizes (reportlab)
- Write the JSON run report

Key classes:
- FontCatalog: Enumerate font variants
- TypstCompiler: Compile Typst sources to PNG pages
- DocumentAssembler: Build the comparison PDF
"""

from fontcompare.io.assembler import DocumentAssembler, PageRecord, ensure_writable
from fontcompare.io.catalog import FontCatalog, discover, system_font_directories
from fontcompare.io.report import RunReport, VariantReport, write_report
from fontcompare.io.typst import TypstCompiler

__all__ = [
    "DocumentAssembler",
    "FontCatalog",
    "PageRecord",
    "RunReport",
    "TypstCompiler",
    "VariantReport",
    "discover",
    "ensure_writable",
    "system_font_directories",
    "write_report",
]
