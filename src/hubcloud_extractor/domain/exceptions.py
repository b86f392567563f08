"""Extraction pipeline exceptions."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for all extraction-related errors."""


class FetchError(ExtractionError):
    """Raised when an upstream page cannot be fetched."""

    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}" if reason else url)


class FetchCancelledError(FetchError):
    """Raised when the caller's cancellation token fires mid-request."""
