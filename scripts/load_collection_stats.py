#!/usr/bin/env python3
"""Load precomputed collection statistics into Redis.

Input is a tab-separated file of ``term<TAB>value`` rows for one statistic
type. Keys are escaped exactly as the scorers escape them. Unless given
explicitly, the fallback sentinel is derived from the data: the minimum
value for ``tf`` (``tf:min_tf``) and the maximum for ``idf``
(``idf:max_idf``).
"""

import argparse
import csv
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import structlog

from irscore.collection_stats.base import COLLECTION_TOTAL_KEY, StatisticType, StatisticsError, build_key
from irscore.collection_stats.client import parse_statistic
from irscore.collection_stats.redis_store import RedisStatisticsStore
from irscore.common.config import get_config
from irscore.common.logging import configure_logging
from irscore.common.metrics import measure_time

logger = structlog.get_logger("load_collection_stats")

STATISTIC_TYPES = {statistic.tag: statistic for statistic in StatisticType}


def read_statistics(path: Path) -> Iterator[Tuple[str, float]]:
    """Yield ``(term, value)`` rows, skipping blanks and ``#`` comments."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f, delimiter="\t", quoting=csv.QUOTE_NONE)
        for line_number, row in enumerate(reader, start=1):
            if not row or row[0].startswith("#"):
                continue
            if len(row) != 2:
                raise ValueError(f"{path}:{line_number}: expected 'term<TAB>value', got {row!r}")
            term, raw_value = row
            yield term, parse_statistic(f"{path}:{line_number}", raw_value)


def build_entries(
    statistic: StatisticType,
    rows: Iterator[Tuple[str, float]],
    fallback: Optional[float] = None,
    collection_total: Optional[float] = None,
) -> List[Tuple[str, str]]:
    """Turn statistic rows into store keys, appending the sentinel key."""
    entries = []
    values = []
    for term, value in rows:
        entries.append((build_key(statistic.tag, term), repr(value)))
        values.append(value)

    if fallback is None and values:
        fallback = min(values) if statistic is StatisticType.TERM_FREQUENCY else max(values)
    if fallback is not None:
        entries.append((statistic.fallback_key, repr(fallback)))
    if collection_total is not None:
        entries.append((COLLECTION_TOTAL_KEY, repr(collection_total)))
    return entries


@measure_time("load_collection_stats")
def load_statistics(store: RedisStatisticsStore, entries: List[Tuple[str, str]], batch_size: int) -> int:
    return store.set_many(entries, batch_size=batch_size)


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Load collection statistics into Redis")
    parser.add_argument("--statistic", required=True, choices=sorted(STATISTIC_TYPES), help="Statistic type")
    parser.add_argument("--input", required=True, type=Path, help="TSV file of term/value rows")
    parser.add_argument("--fallback", type=float, default=None, help="Explicit fallback sentinel value")
    parser.add_argument("--collection-total", type=float, default=None, help="Total term count of the collection")
    parser.add_argument("--redis-url", default=None, help="Overrides IRSCORE_REDIS_URL")

    args = parser.parse_args()

    config = get_config("scripts")
    configure_logging("load_collection_stats", config.irscore_log_level, config.irscore_log_format)
    statistic = STATISTIC_TYPES[args.statistic]

    try:
        entries = build_entries(
            statistic,
            read_statistics(args.input),
            fallback=args.fallback,
            collection_total=args.collection_total
        )
        with RedisStatisticsStore(
            redis_url=args.redis_url or config.irscore_redis_url,
            pool_size=config.irscore_redis_pool_size,
            socket_timeout=config.irscore_redis_socket_timeout,
        ) as store:
            written = load_statistics(store, entries, config.irscore_stats_load_batch_size)
    except (OSError, ValueError, StatisticsError) as e:
        logger.error("Loading statistics failed", statistic=statistic.tag, error=str(e))
        print(f"Failed to load statistics: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {written} '{statistic.tag}' keys")


if __name__ == "__main__":
    main()
