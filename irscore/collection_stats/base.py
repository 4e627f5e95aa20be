"""Base statistics store interface.

Collection statistics live in an external key-value store as decimal
strings under keys of the form ``<tag>:<escaped-term>``. This module
defines the contract the scorers depend on, independent of the backing
implementation, plus the key scheme shared by readers and loaders.

Stores are synchronous: scoring runs on host worker threads and blocks on
one round trip per lookup.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from irscore.errors import ScoringError


class StatisticType(Enum):
    """Per-term statistics available in the store.

    Each type carries its key tag and the sentinel term whose value is used
    for terms the collection has never seen.
    """
    TERM_FREQUENCY = ("tf", "min_tf")
    INVERSE_DOCUMENT_FREQUENCY = ("idf", "max_idf")

    def __init__(self, tag: str, fallback_term: str):
        self.tag = tag
        self.fallback_term = fallback_term

    @property
    def fallback_key(self) -> str:
        return build_key(self.tag, self.fallback_term)


# Collection-wide total term frequency, not tied to a single term.
COLLECTION_TOTAL_KEY = "ttf:total"


def escape_term(term: str) -> str:
    """Make a term safe for use inside a ``tag:term`` key."""
    return term.replace(":", "-").replace('"', "'")


def build_key(tag: str, term: str) -> str:
    return f"{tag}:{escape_term(term)}"


class StatisticsStore(ABC):
    """Abstract key-value store holding collection statistics.

    Implementations must be safe to call from several threads at once, or
    document that a store instance belongs to one thread.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the raw value stored under ``key``, or ``None`` if absent.

        Transport failures raise ``StatisticsStoreError``.
        """

    @abstractmethod
    def close(self) -> None:
        """Release connections held by the store."""

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the store is reachable."""

    def __enter__(self) -> "StatisticsStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class StatisticsError(ScoringError):
    """Base exception for collection statistics lookups."""
    pass


class StatisticsUnavailable(StatisticsError):
    """Neither the term key nor its fallback key holds a value."""
    pass


class StatisticsParseError(StatisticsError):
    """A stored value is not a finite decimal number."""
    pass


class StatisticsStoreError(StatisticsError):
    """The backing store could not be reached or answered with an error."""
    pass
