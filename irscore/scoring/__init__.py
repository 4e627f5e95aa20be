"""Relevance scorers and per-query scoring sessions.

Contents
- ``request``: parameter validation and the immutable ``ScoringRequest``
- ``accessor``: per-document statistics interface
- ``query_likelihood``, ``bm25``, ``kl_divergence``: the scoring models
- ``registry``: scorer names and ``create_scorer``
- ``session``: ``open_scoring_session`` for scoped store acquisition
"""

from .accessor import DocumentStatisticsAccessor, StaticDocumentAccessor
from .base import Scorer, ScoreOutcome
from .bm25 import BM25Scorer
from .kl_divergence import KLDivergenceScorer, QueryModelKLDivergenceScorer
from .query_likelihood import QueryLikelihoodScorer
from .registry import create_scorer, resolve_kind, statistic_for
from .request import ScorerKind, ScoringParameters, ScoringRequest
from .session import ScoringSession, open_scoring_session

__all__ = [
    "DocumentStatisticsAccessor",
    "StaticDocumentAccessor",
    "Scorer",
    "ScoreOutcome",
    "BM25Scorer",
    "KLDivergenceScorer",
    "QueryModelKLDivergenceScorer",
    "QueryLikelihoodScorer",
    "create_scorer",
    "resolve_kind",
    "statistic_for",
    "ScorerKind",
    "ScoringParameters",
    "ScoringRequest",
    "ScoringSession",
    "open_scoring_session",
]
