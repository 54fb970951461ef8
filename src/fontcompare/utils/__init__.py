"""Utility functions for fontcompare.

This module provides utility functions including:

- Logging setup and configuration
- Run statistics and failure summaries
"""

from fontcompare.utils.logging import (
    RunLogger,
    RunStats,
    configure_logging,
)

__all__ = [
    "RunLogger",
    "RunStats",
    "configure_logging",
]
