"""Kullback-Leibler divergence scoring.

Two distinct strategies are provided. They are not interchangeable and
produce scores on different scales.

``KLDivergenceScorer`` (vocabulary union, collection smoothed)
    Iterates over the union of the query model's terms and the document's
    distinct field terms::

        sum_t ((1 - l) * P(t|Mc) + l * P(t|Mq)) * ln((1 - l) * P(t|Mc) + l * P(t|Md))

    Documents matching no term get ``NO_MATCH_SCORE``.

``QueryModelKLDivergenceScorer`` (query model only)
    Classical KL over the query model's terms present in the document::

        sum_{t: tf(t) > 0} P(t|Mq) * ln(P(t|Mq) / P(t|Md))

    No collection smoothing and no sentinel for unmatched documents.

See Manning et al., "Introduction to Information Retrieval", chapter 12,
equation 12.10.
"""

from typing import Optional, Tuple

from irscore.collection_stats.base import StatisticType
from irscore.errors import MissingFieldTerms
from .accessor import DocumentStatisticsAccessor
from .base import Scorer, ScoreOutcome, weighted_log
from .request import ScorerKind

OVER_LENGTH_SCORE = -1000.0
NO_MATCH_SCORE = -1000.0


class KLDivergenceScorer(Scorer):
    """KL divergence over the query/document vocabulary union."""

    kind = ScorerKind.KL_DIVERGENCE
    statistic = StatisticType.TERM_FREQUENCY

    def _score(self, accessor: DocumentStatisticsAccessor) -> Tuple[float, ScoreOutcome]:
        if self._exceeds_max_length(accessor):
            return OVER_LENGTH_SCORE, ScoreOutcome.OVER_LENGTH

        doc_length = self._document_length(accessor)
        document_terms = accessor.field_terms()
        if document_terms is None:
            raise MissingFieldTerms(
                f"Could not compute {self.name} score, unable to retrieve terms "
                f"of field '{self.request.field}'"
            )

        query_model = self.request.query_model
        lam = self.request.lambda_
        # Sorted so the floating point sum does not depend on set ordering.
        vocabulary = sorted(set(query_model) | set(document_terms))

        score = 0.0
        at_least_one = False
        for term in vocabulary:
            tf = accessor.term_frequency(term)
            if tf > 0:
                at_least_one = True

            p_mq = query_model.get(term, 0.0)
            p_md = self._document_probability(term, tf, doc_length)
            p_mc = self.statistics.get(term)

            weight = (1.0 - lam) * p_mc + lam * p_mq
            contribution = weighted_log(weight, (1.0 - lam) * p_mc + lam * p_md)
            score += contribution

            self.trace_term(term, tf=tf, p_mq=p_mq, p_md=p_md, p_mc=p_mc, kl=contribution)

        if not at_least_one:
            return NO_MATCH_SCORE, ScoreOutcome.NO_MATCH
        return score, ScoreOutcome.SCORED


class QueryModelKLDivergenceScorer(Scorer):
    """Classical KL divergence over the query model's matched terms."""

    kind = ScorerKind.KL_QUERY_MODEL
    statistic = StatisticType.TERM_FREQUENCY

    def collection_total_term_frequency(self) -> Optional[float]:
        """Total term count of the collection, for length diagnostics.

        Not part of the score. ``None`` when the store has no total.
        """
        return self.statistics.get_collection_total()

    def _score(self, accessor: DocumentStatisticsAccessor) -> Tuple[float, ScoreOutcome]:
        doc_length = self._document_length(accessor)

        score = 0.0
        for term, p_mq in self.request.query_model.items():
            tf = accessor.term_frequency(term)
            if tf == 0:
                continue
            p_md = self._document_probability(term, tf, doc_length)
            contribution = weighted_log(p_mq, p_mq / p_md)
            score += contribution

            self.trace_term(term, tf=tf, p_mq=p_mq, p_md=p_md, kl=contribution)

        return score, ScoreOutcome.SCORED
