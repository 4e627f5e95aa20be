"""In-process statistics store.

Holds statistics in a plain dictionary. Useful for local runs, small
collections, and tests. The mapping is copied on construction and never
mutated afterwards, so concurrent reads are safe.
"""

from typing import Dict, Mapping, Optional, Union

from .base import StatisticType, StatisticsStore, build_key, COLLECTION_TOTAL_KEY


class InMemoryStatisticsStore(StatisticsStore):
    """Dictionary-backed implementation of ``StatisticsStore``."""

    def __init__(self, values: Optional[Mapping[str, Union[str, float]]] = None):
        self._values: Dict[str, str] = {
            key: str(value) for key, value in (values or {}).items()
        }
        self._closed = False

    @classmethod
    def from_term_statistics(
        cls,
        statistic: StatisticType,
        statistics: Mapping[str, float],
        fallback: Optional[float] = None,
        collection_total: Optional[float] = None,
    ) -> "InMemoryStatisticsStore":
        """Build a store from ``term -> value`` pairs of one statistic type.

        Terms are escaped exactly as the lookup client escapes them. When
        ``fallback`` is given it is stored under the statistic's sentinel key.
        """
        values: Dict[str, Union[str, float]] = {
            build_key(statistic.tag, term): value for term, value in statistics.items()
        }
        if fallback is not None:
            values[statistic.fallback_key] = fallback
        if collection_total is not None:
            values[COLLECTION_TOTAL_KEY] = collection_total
        return cls(values)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def health_check(self) -> bool:
        return not self._closed

    def __len__(self) -> int:
        return len(self._values)
