"""Metrics collection for relevance scoring.

Provides a thin wrapper around ``prometheus_client`` so scorers and the
statistics client record documents scored, scoring latency, and
statistics lookups with consistent label sets.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- Term text is never used as a label value
- A single registry is kept per process (can be injected for tests)
"""

import time
from functools import wraps
from typing import Any, Callable, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for scoring.

    Parameters
    - service_name: Logical name of the process owning the registry
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.documents_scored = Counter(
            'irscore_documents_scored_total',
            'Documents scored, partitioned by scorer and outcome.',
            ['scorer', 'outcome'],
            registry=self.registry
        )

        self.scoring_duration = Histogram(
            'irscore_scoring_duration_seconds',
            'Time spent scoring a single document.',
            ['scorer'],
            buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self.registry
        )

        self.statistic_lookups = Counter(
            'irscore_statistic_lookups_total',
            'Collection statistic lookups by statistic and resolving source.',
            ['statistic', 'source'],
            registry=self.registry
        )

        self.statistic_errors = Counter(
            'irscore_statistic_errors_total',
            'Collection statistic lookups that failed.',
            ['statistic', 'error'],
            registry=self.registry
        )

        self.sessions = Counter(
            'irscore_sessions_total',
            'Scoring sessions opened, partitioned by scorer and status.',
            ['scorer', 'status'],
            registry=self.registry
        )

    def record_document(self, scorer: str, outcome: str, duration: float) -> None:
        """Record one scored document.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.documents_scored.labels(scorer=scorer, outcome=outcome).inc()
        self.scoring_duration.labels(scorer=scorer).observe(duration)

    def record_statistic_lookup(self, statistic: str, source: str) -> None:
        """Record a resolved lookup; source is ``primary``, ``fallback`` or ``cache``."""
        self.statistic_lookups.labels(statistic=statistic, source=source).inc()

    def record_statistic_error(self, statistic: str, error: str) -> None:
        self.statistic_errors.labels(statistic=statistic, error=error).inc()

    def record_session(self, scorer: str, status: str) -> None:
        self.sessions.labels(scorer=scorer, status=status).inc()

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str = "irscore") -> MetricsCollector:
    """Get or create the process-wide metrics collector.

    Returns a singleton to avoid registering the same metric names twice.
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
    return _metrics_collector


def measure_time(operation: str, **labels: Any) -> Callable:
    """Decorator to log function execution time.

    Example
    >>> @measure_time("load_statistics", statistic="idf")
    ... def load(rows):
    ...     ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration = time.perf_counter() - start_time
                logger.info(
                    f"Operation {operation} completed",
                    operation=operation,
                    duration_ms=duration * 1000,
                    **labels
                )
                return result
            except Exception as e:
                duration = time.perf_counter() - start_time
                logger.error(
                    f"Operation {operation} failed",
                    operation=operation,
                    duration_ms=duration * 1000,
                    error=str(e),
                    **labels
                )
                raise
        return wrapper
    return decorator
