"""Error types raised at the edges of an analysis run."""

from __future__ import annotations


class StraceTriageError(Exception):
    """Base class for strace triage failures."""


class SourceUnavailable(StraceTriageError):
    """The trace source could not be opened or read."""


class SinkFailure(StraceTriageError):
    """A finished report could not be written to its destination."""
