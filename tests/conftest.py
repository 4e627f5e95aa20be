"""Shared fixtures for scorer tests."""

from typing import Dict, Mapping, Optional

import pytest
from prometheus_client import CollectorRegistry

from irscore.collection_stats import CollectionStatisticsClient, StatisticType
from irscore.collection_stats.base import COLLECTION_TOTAL_KEY, build_key
from irscore.common.metrics import MetricsCollector
from irscore.scoring import ScorerKind, ScoringRequest
from tests.helpers import RecordingStore


@pytest.fixture
def metrics():
    """Metrics collector with its own registry."""
    return MetricsCollector("test", registry=CollectorRegistry())


@pytest.fixture
def make_store():
    """Build a ``RecordingStore`` from per-term statistics."""
    def _make(
        statistic: StatisticType,
        statistics: Mapping[str, float],
        fallback: Optional[float] = None,
        collection_total: Optional[float] = None,
    ) -> RecordingStore:
        values: Dict[str, float] = {build_key(statistic.tag, t): v for t, v in statistics.items()}
        if fallback is not None:
            values[statistic.fallback_key] = fallback
        if collection_total is not None:
            values[COLLECTION_TOTAL_KEY] = collection_total
        return RecordingStore(values)
    return _make


@pytest.fixture
def make_client(make_store, metrics):
    """Build a client; its recording store is reachable as ``client.store``."""
    def _make(statistic: StatisticType, statistics: Mapping[str, float], **kwargs) -> CollectionStatisticsClient:
        return CollectionStatisticsClient(make_store(statistic, statistics, **kwargs), statistic, metrics=metrics)
    return _make


@pytest.fixture
def make_request():
    """Build a ``ScoringRequest`` from host-style parameters.

    ``lambda`` is a keyword, so pass it as ``lambda_``.
    """
    def _make(kind: ScorerKind, **params) -> ScoringRequest:
        if "lambda_" in params:
            params["lambda"] = params.pop("lambda_")
        base = {"field": "body", "word_count_field": "body_words"}
        base.update(params)
        return ScoringRequest.from_params(base, kind)
    return _make
