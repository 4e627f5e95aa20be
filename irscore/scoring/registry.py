"""Scorer registry.

Maps registered scorer names to implementations so a host can select a
model by name and hand over its raw parameter map.
"""

from typing import Any, Dict, Mapping, Optional, Type, Union

from irscore.collection_stats.base import StatisticType
from irscore.collection_stats.client import CollectionStatisticsClient
from irscore.common.metrics import MetricsCollector
from irscore.errors import ScoringConfigurationError
from .base import Scorer
from .bm25 import BM25Scorer
from .kl_divergence import KLDivergenceScorer, QueryModelKLDivergenceScorer
from .query_likelihood import QueryLikelihoodScorer
from .request import ScorerKind, ScoringRequest

SCORERS: Dict[ScorerKind, Type[Scorer]] = {
    ScorerKind.QUERY_LIKELIHOOD: QueryLikelihoodScorer,
    ScorerKind.BM25: BM25Scorer,
    ScorerKind.KL_DIVERGENCE: KLDivergenceScorer,
    ScorerKind.KL_QUERY_MODEL: QueryModelKLDivergenceScorer,
}


def resolve_kind(kind: Union[ScorerKind, str]) -> ScorerKind:
    """Accept a ``ScorerKind``, its registered name, or its enum member name."""
    if isinstance(kind, ScorerKind):
        return kind
    try:
        return ScorerKind(kind)
    except ValueError:
        pass
    try:
        return ScorerKind[str(kind).upper()]
    except KeyError:
        known = ", ".join(k.value for k in ScorerKind)
        raise ScoringConfigurationError(f"Unknown scorer {kind!r}; expected one of: {known}")


def scorer_class(kind: Union[ScorerKind, str]) -> Type[Scorer]:
    return SCORERS[resolve_kind(kind)]


def statistic_for(kind: Union[ScorerKind, str]) -> StatisticType:
    """Collection statistic the scorer for ``kind`` looks up."""
    return scorer_class(kind).statistic


def create_scorer(
    kind: Union[ScorerKind, str],
    params: Union[Mapping[str, Any], ScoringRequest],
    statistics: CollectionStatisticsClient,
    metrics: Optional[MetricsCollector] = None,
) -> Scorer:
    """Validate ``params`` for ``kind`` and bind a scorer to ``statistics``."""
    kind = resolve_kind(kind)
    request = params if isinstance(params, ScoringRequest) else ScoringRequest.from_params(params, kind)
    return SCORERS[kind](request, statistics, metrics=metrics)
