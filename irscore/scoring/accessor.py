"""Per-document statistics accessors.

The host search engine binds one accessor per document. Scorers only use
the subset of capabilities they need:

- query likelihood: ``term_frequency``, ``document_length``,
  ``raw_field_length``
- BM25: ``term_frequency``, ``document_length``
- KL divergence (vocabulary union): all four
- KL divergence (query model only): ``term_frequency``, ``document_length``
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Mapping, Optional, Set


class DocumentStatisticsAccessor(ABC):
    """Read-only view of one document's statistics for one field."""

    @abstractmethod
    def term_frequency(self, term: str) -> int:
        """Number of occurrences of ``term`` in the scored field."""

    @abstractmethod
    def document_length(self) -> Optional[int]:
        """Value of the length field, or ``None`` when the document has none."""

    @abstractmethod
    def field_terms(self) -> Optional[Set[str]]:
        """Distinct terms of the scored field, or ``None`` if not retrievable."""

    @abstractmethod
    def raw_field_length(self) -> int:
        """Character length of the raw field value."""


class StaticDocumentAccessor(DocumentStatisticsAccessor):
    """Accessor over precomputed statistics held in memory.

    Term frequencies come from an already analyzed field; this class never
    tokenizes. ``field_terms`` is the set of terms with a positive count.
    """

    def __init__(
        self,
        term_frequencies: Mapping[str, int],
        document_length: Optional[int],
        raw_field: Optional[str] = None,
        doc_id: Optional[str] = None,
    ):
        self._term_frequencies: Dict[str, int] = dict(term_frequencies)
        self._document_length = document_length
        self._raw_field = raw_field
        self.doc_id = doc_id
        self._field_terms: FrozenSet[str] = frozenset(
            term for term, count in self._term_frequencies.items() if count > 0
        )

    @classmethod
    def from_source(
        cls,
        source: Mapping[str, Any],
        field: str,
        doc_length_field: str,
        term_frequencies_key: str = "term_frequencies",
        id_key: str = "id",
    ) -> "StaticDocumentAccessor":
        """Build an accessor from a stored document.

        ``source[field]`` holds the raw text, ``source[doc_length_field]`` the
        length, and ``source[term_frequencies_key]`` the analyzed counts for
        ``field``.
        """
        length = source.get(doc_length_field)
        raw_field = source.get(field)
        doc_id = source.get(id_key)
        return cls(
            term_frequencies=source.get(term_frequencies_key) or {},
            document_length=int(length) if length is not None else None,
            raw_field=raw_field if isinstance(raw_field, str) else None,
            doc_id=str(doc_id) if doc_id is not None else None,
        )

    def term_frequency(self, term: str) -> int:
        return self._term_frequencies.get(term, 0)

    def document_length(self) -> Optional[int]:
        return self._document_length

    def field_terms(self) -> Optional[Set[str]]:
        return set(self._field_terms)

    def raw_field_length(self) -> int:
        return len(self._raw_field) if self._raw_field is not None else 0

    def __repr__(self) -> str:
        return f"StaticDocumentAccessor(doc_id={self.doc_id!r}, terms={len(self._term_frequencies)})"
