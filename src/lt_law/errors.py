"""Exception types shared by the fetch client and the ingestion pipeline.

Two tiers:
 - fatal errors (``FetchError``, ``PaginationLimitError``, ``ConfigurationError``)
   abort the whole run;
 - per-document problems are not exceptions at all, they are recorded as
   ``SkippedLaw`` entries by the orchestrator.
"""
from __future__ import annotations

from typing import Optional


class IngestError(RuntimeError):
    pass


class FetchError(IngestError):
    """Upstream request failed for good (retries exhausted or non-retryable status)."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class PaginationLimitError(FetchError):
    pass


class ConfigurationError(IngestError):
    pass


__all__ = ['IngestError', 'FetchError', 'PaginationLimitError', 'ConfigurationError']
