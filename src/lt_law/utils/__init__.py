"""Utility modules for statute ingestion."""

from lt_law.utils.batching import (
    chunked,
    unique,
)

__all__ = [
    "chunked",
    "unique",
]
