"""Query likelihood scoring with linear interpolation.

Scores a list of terms on one field with a language model smoothed by the
collection model (Manning et al., "Introduction to Information Retrieval",
chapter 12, equation 12.12)::

    score = sum_t ln((1 - lambda) * M_c(t) + lambda * tf(t) / L_d)

The sum runs over the query terms in order, duplicates included, and is
kept in the log domain to avoid underflow.
"""

from typing import Tuple

from irscore.collection_stats.base import StatisticType
from .accessor import DocumentStatisticsAccessor
from .base import Scorer, ScoreOutcome, log_or_floor
from .request import ScorerKind

OVER_LENGTH_SCORE = -100.0
NO_MATCH_SCORE = -10000.0


class QueryLikelihoodScorer(Scorer):
    """Linearly interpolated query likelihood model."""

    kind = ScorerKind.QUERY_LIKELIHOOD
    statistic = StatisticType.TERM_FREQUENCY

    def _score(self, accessor: DocumentStatisticsAccessor) -> Tuple[float, ScoreOutcome]:
        if self._exceeds_max_length(accessor):
            return OVER_LENGTH_SCORE, ScoreOutcome.OVER_LENGTH

        doc_length = self._document_length(accessor)
        lam = self.request.lambda_

        score = 0.0
        at_least_one = False
        for term in self.request.terms:
            tf = accessor.term_frequency(term)
            if tf > 0:
                at_least_one = True

            m_c = self.statistics.get(term)
            m_d = self._document_probability(term, tf, doc_length)
            score += log_or_floor((1.0 - lam) * m_c + lam * m_d)

            self.trace_term(term, tf=tf, doc_length=doc_length, m_c=m_c, m_d=m_d, score=score)

        if not at_least_one or score == 0.0:
            return NO_MATCH_SCORE, ScoreOutcome.NO_MATCH
        return score, ScoreOutcome.SCORED
