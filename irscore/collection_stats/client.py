"""Collection statistics lookup with fallback.

``CollectionStatisticsClient.get(term)`` resolves one per-term statistic:

1. Look up ``<tag>:<escaped-term>``.
2. If absent, look up the sentinel key (``tf:min_tf`` or ``idf:max_idf``)
   and use that value instead.
3. Parse the value as a finite float.

Unseen query terms therefore get the least-frequent (or most-informative)
value present in the collection instead of crashing or scoring zero.
Store and parse failures are fatal for the current document and are not
retried.
"""

import math
import threading
from typing import Dict, Optional

import structlog

from irscore.common.metrics import MetricsCollector, get_metrics_collector
from .base import (
    COLLECTION_TOTAL_KEY,
    StatisticType,
    StatisticsParseError,
    StatisticsStore,
    StatisticsUnavailable,
    build_key,
)

logger = structlog.get_logger("collection_stats.client")


def parse_statistic(key: str, value: str) -> float:
    """Parse a stored decimal string, rejecting NaN and infinities."""
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise StatisticsParseError(f"Value stored under '{key}' is not a number: {value!r}") from e
    if not math.isfinite(parsed):
        raise StatisticsParseError(f"Value stored under '{key}' is not finite: {value!r}")
    return parsed


class CollectionStatisticsClient:
    """Resolve one statistic type for arbitrary terms.

    The client holds no per-term state; it only wraps a store, which owns
    the connection. Sharing a client across threads is safe whenever the
    store is.
    """

    def __init__(
        self,
        store: StatisticsStore,
        statistic: StatisticType,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.store = store
        self.statistic = statistic
        self.metrics = metrics or get_metrics_collector()

    def key_for(self, term: str) -> str:
        return build_key(self.statistic.tag, term)

    def get(self, term: str) -> float:
        """Return the statistic for ``term``, using the fallback when unseen.

        Raises
        - ``StatisticsUnavailable`` if neither key holds a value
        - ``StatisticsParseError`` if the value found is not a finite number
        - ``StatisticsStoreError`` on transport failures
        """
        key = self.key_for(term)
        value = self.store.get(key)
        source = "primary"

        if value is None:
            key = self.statistic.fallback_key
            value = self.store.get(key)
            source = "fallback"

        if value is None:
            self.metrics.record_statistic_error(self.statistic.tag, "unavailable")
            logger.error(
                "Collection statistic unavailable",
                statistic=self.statistic.tag,
                term=term,
                fallback_key=self.statistic.fallback_key
            )
            raise StatisticsUnavailable(
                f"No '{self.statistic.tag}' statistic for term {term!r} and no "
                f"fallback under '{self.statistic.fallback_key}'"
            )

        try:
            parsed = parse_statistic(key, value)
        except StatisticsParseError:
            self.metrics.record_statistic_error(self.statistic.tag, "parse")
            logger.error("Malformed collection statistic", key=key, value=value)
            raise

        self.metrics.record_statistic_lookup(self.statistic.tag, source)
        return parsed

    def get_collection_total(self) -> Optional[float]:
        """Return the collection-wide total term frequency, if stored."""
        value = self.store.get(COLLECTION_TOTAL_KEY)
        if value is None:
            return None
        return parse_statistic(COLLECTION_TOTAL_KEY, value)


class CachingStatisticsClient(CollectionStatisticsClient):
    """``CollectionStatisticsClient`` that remembers resolved values.

    Values are cached per term for the lifetime of the client, which is one
    scoring session. Failed lookups are not cached, so a later call raises
    again instead of reusing a default.
    """

    def __init__(
        self,
        store: StatisticsStore,
        statistic: StatisticType,
        metrics: Optional[MetricsCollector] = None,
    ):
        super().__init__(store, statistic, metrics)
        self._cache: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, term: str) -> float:
        with self._lock:
            cached = self._cache.get(term)
        if cached is not None:
            self.metrics.record_statistic_lookup(self.statistic.tag, "cache")
            return cached

        value = super().get(term)
        with self._lock:
            self._cache[term] = value
        return value

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)
