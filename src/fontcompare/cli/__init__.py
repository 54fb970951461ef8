"""Command-line interface for fontcompare.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bar over the compiled variants
- Verbose/quiet output modes
- Listing mode to preview the selection
- Summary of variants that failed
"""

from fontcompare.cli.app import cli, main

__all__ = ["cli", "main"]
