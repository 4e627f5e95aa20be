"""Collection-level statistics stores and lookup client.

Primary components:
- ``base``: abstract ``StatisticsStore`` interface, statistic types, key
  construction, and common exceptions.
- ``redis_store``: Redis implementation backed by a connection pool.
- ``memory``: dictionary-backed implementation for local runs and tests.
- ``client``: ``CollectionStatisticsClient`` applying the fallback chain.
- ``factory``: helpers to construct a store from typed config or env.

Guidance:
- Prefer ``factory.create_statistics_store`` so callers stay decoupled from
  specific backends.
"""

from .base import (
    StatisticType,
    StatisticsStore,
    StatisticsError,
    StatisticsUnavailable,
    StatisticsParseError,
    StatisticsStoreError,
    build_key,
    escape_term,
)
from .client import CollectionStatisticsClient, CachingStatisticsClient
from .memory import InMemoryStatisticsStore

__all__ = [
    "StatisticType",
    "StatisticsStore",
    "StatisticsError",
    "StatisticsUnavailable",
    "StatisticsParseError",
    "StatisticsStoreError",
    "build_key",
    "escape_term",
    "CollectionStatisticsClient",
    "CachingStatisticsClient",
    "InMemoryStatisticsStore",
]
