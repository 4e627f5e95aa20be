"""Exception hierarchy shared by the scoring components.

Every failure raised by ``irscore`` derives from ``ScoringError`` so a host
can catch one type per document or per query. Statistics-store failures
are defined next to the store interface in
``irscore.collection_stats.base``.
"""


class ScoringError(Exception):
    """Base exception for scoring failures."""
    pass


class ScoringConfigurationError(ScoringError, ValueError):
    """Query parameters are missing or malformed for the selected scorer.

    Raised once while building a ``ScoringRequest``, before any document is
    scored.
    """
    pass


class DocumentStatisticsError(ScoringError):
    """Per-document statistics needed by a scorer are unavailable."""
    pass


class MissingLengthField(DocumentStatisticsError):
    """The document has no usable value in its length field."""
    pass


class MissingFieldTerms(DocumentStatisticsError):
    """The distinct terms of the scored field could not be retrieved."""
    pass
