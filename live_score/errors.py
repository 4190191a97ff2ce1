# live_score/errors.py
"""
Exception tree:
    LiveScoreError
    +-- NetworkError            (connection failure, HTTP error status)
    |   +-- FetchTimeout        (deadline exceeded)
    |   +-- ResponseTooLarge    (body over the byte cap)
    +-- ExtractionError
    |   +-- FragmentNotFound    (marker / key absent)
    |   +-- UnbalancedObject    (depth scan ran out of text)
    |   +-- MalformedStructure  (balanced text failed to parse, bad numeric field)
    |   +-- RecordPatternMismatch (tabular template matched nothing in its window)
    +-- SerializationError

Only NetworkError aborts a refresh cycle. Extraction errors downgrade a
single snapshot section to "unavailable this cycle".
"""
from __future__ import annotations

from typing import Optional


class LiveScoreError(Exception):
    """Base exception for the live score relay."""

    def __init__(self, message: str, *, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class NetworkError(LiveScoreError):
    """Raised when the source page cannot be retrieved."""
    pass


class FetchTimeout(NetworkError):
    pass


class ResponseTooLarge(NetworkError):
    pass


class ExtractionError(LiveScoreError):
    """Raised when an embedded payload section cannot be extracted."""
    pass


class FragmentNotFound(ExtractionError):
    pass


class UnbalancedObject(ExtractionError):
    pass


class MalformedStructure(ExtractionError):
    pass


class RecordPatternMismatch(ExtractionError):
    pass


class SerializationError(LiveScoreError):
    pass
