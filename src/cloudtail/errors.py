"""Error types for cloudtail."""

from __future__ import annotations


class CloudTailError(Exception):
    """Base class for cloudtail errors."""


class SourceUnavailableError(CloudTailError):
    """Fetching log events failed or timed out."""


class InvalidPatternError(CloudTailError, ValueError):
    """A search expression could not be compiled."""
