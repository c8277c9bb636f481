"""
Utilities module for Product Scout.

Provides logging setup and helpers.
"""

from product_scout.utils.logging import (
    setup_logging,
    get_logger,
    get_logger_with_context,
    reset_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_logger_with_context",
    "reset_logging",
]
