"""Utility functions for bezierforge.

This module provides logging setup and import statistics tracking.
"""

from bezierforge.utils.logging import (
    ImportLogger,
    ImportStats,
    configure_logging,
)

__all__ = [
    "ImportLogger",
    "ImportStats",
    "configure_logging",
]
