"""Per-query scoring sessions.

A session owns the resources a query needs: the validated request, the
statistics store connection, the lookup client, and the scorer. It is
opened when the query starts and closed when it ends, on success or
failure::

    with open_scoring_session("qle_model_script_score", params) as session:
        scores = session.score_many(accessors, max_workers=4)

The store connection is released by the context manager; scorers never
close it themselves.
"""

from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
import time
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import structlog

from irscore.collection_stats.base import StatisticsStore
from irscore.collection_stats.client import CachingStatisticsClient, CollectionStatisticsClient
from irscore.collection_stats.factory import create_statistics_store
from irscore.common.config import ScoringConfig
from irscore.common.logging import log_performance
from irscore.common.metrics import MetricsCollector, get_metrics_collector
from irscore.common.tracing import traced_span
from .accessor import DocumentStatisticsAccessor
from .base import Scorer
from .registry import SCORERS, resolve_kind
from .request import ScorerKind, ScoringRequest

logger = structlog.get_logger("scoring.session")


class ScoringSession:
    """Scores documents for one query with a bound scorer."""

    def __init__(self, scorer: Scorer, default_workers: int = 1):
        self.scorer = scorer
        self.default_workers = default_workers

    @property
    def request(self) -> ScoringRequest:
        return self.scorer.request

    def score(self, accessor: DocumentStatisticsAccessor) -> float:
        return self.scorer.score(accessor)

    def score_many(
        self,
        accessors: Iterable[DocumentStatisticsAccessor],
        max_workers: Optional[int] = None,
    ) -> List[float]:
        """Score documents, in parallel threads when ``max_workers > 1``.

        Scores come back in input order. The first failing document's
        exception propagates.
        """
        workers = max_workers or self.default_workers
        documents = list(accessors)
        start_time = time.perf_counter()

        if workers <= 1 or len(documents) <= 1:
            scores = [self.scorer.score(accessor) for accessor in documents]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="irscore") as executor:
                scores = list(executor.map(self.scorer.score, documents))

        log_performance(
            "score_many",
            (time.perf_counter() - start_time) * 1000,
            scorer=self.scorer.name,
            documents=len(documents),
            workers=workers
        )
        return scores

    def rank(
        self,
        documents: Sequence[Tuple[str, DocumentStatisticsAccessor]],
        top_k: Optional[int] = None,
        max_workers: Optional[int] = None,
    ) -> List[Tuple[str, float]]:
        """Score ``(doc_id, accessor)`` pairs and sort by descending score.

        Ties keep their input order. Raises ``ValueError`` for a negative
        ``top_k``.
        """
        if top_k is not None and top_k < 0:
            raise ValueError(f"top_k must be >= 0, got {top_k}")
        if not documents:
            return []

        scores = np.asarray(
            self.score_many([accessor for _, accessor in documents], max_workers=max_workers),
            dtype=np.float64,
        )
        order = np.argsort(-scores, kind="stable")
        if top_k is not None:
            order = order[:top_k]
        return [(documents[i][0], float(scores[i])) for i in order]


@contextmanager
def open_scoring_session(
    kind: Union[ScorerKind, str],
    params: Mapping[str, Any],
    config: Optional[ScoringConfig] = None,
    store: Optional[StatisticsStore] = None,
    metrics: Optional[MetricsCollector] = None,
) -> Iterator[ScoringSession]:
    """Open a scoring session for one query.

    Parameters
    - kind: Scorer name or ``ScorerKind``
    - params: Raw host parameters, validated before any connection is made
    - config: Process configuration; read from the environment if omitted
    - store: Existing store to use; the caller keeps ownership of it
    - metrics: Metrics collector; the process-wide one if omitted
    """
    kind = resolve_kind(kind)
    request = ScoringRequest.from_params(params, kind)
    config = config or ScoringConfig()
    metrics = metrics or get_metrics_collector()

    scorer_cls = SCORERS[kind]
    owns_store = store is None
    if owns_store:
        store = create_statistics_store(config)

    try:
        with traced_span("scoring.session", scorer=kind.value, field=request.field):
            client_cls = CachingStatisticsClient if config.irscore_stats_cache_enabled else CollectionStatisticsClient
            client = client_cls(store, scorer_cls.statistic, metrics=metrics)
            scorer = scorer_cls(request, client, metrics=metrics)

            logger.info("Scoring session opened", **request.describe())
            yield ScoringSession(scorer, default_workers=config.irscore_max_workers)
    except Exception:
        metrics.record_session(kind.value, "failed")
        raise
    else:
        metrics.record_session(kind.value, "completed")
    finally:
        if owns_store:
            store.close()
        logger.info("Scoring session closed", scorer=kind.value)
