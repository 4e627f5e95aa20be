"""Test doubles shared across test modules."""

from typing import List, Mapping, Optional

from irscore.collection_stats import InMemoryStatisticsStore
from irscore.scoring import StaticDocumentAccessor


class RecordingStore(InMemoryStatisticsStore):
    """In-memory store that remembers every key it was asked for."""

    def __init__(self, values=None):
        super().__init__(values)
        self.requested: List[str] = []

    def get(self, key):
        self.requested.append(key)
        return super().get(key)


def document(
    term_frequencies: Mapping[str, int],
    length: Optional[int],
    raw: Optional[str] = None,
) -> StaticDocumentAccessor:
    return StaticDocumentAccessor(term_frequencies, length, raw_field=raw)
