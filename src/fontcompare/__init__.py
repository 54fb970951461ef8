"""Fontcompare - Compare how a Typst document looks in different fonts.

Fontcompare recompiles a Typst document once per installed font family (or per
font variant: style, weight and stretch), renders every compilation to images
and collects all of them into a single PDF with one page per rendered page.

Example:
    $ fontcompare thesis.typ --include "Serif"

This will create thesis.variants.pdf with one page per matching font family.
"""

__version__ = "0.1.0"
__author__ = "Fontcompare contributors"

__all__ = ["__author__", "__version__"]
