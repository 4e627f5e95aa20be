"""Okapi BM25 scoring with externally supplied idf values.

For each query term present in the document::

    idf(t) * tf * (k1 + 1) / (tf + k1 * (1 - b + b * L_d / avgdl))

idf comes from the collection statistics store rather than from the index,
so every shard scores with the same corpus-wide values.
"""

from typing import Tuple

from irscore.collection_stats.base import StatisticType
from .accessor import DocumentStatisticsAccessor
from .base import Scorer, ScoreOutcome
from .request import ScorerKind


class BM25Scorer(Scorer):
    """BM25 (Best Matching 25) scorer.

    Documents matching no term score 0.0; there is no sentinel.
    """

    kind = ScorerKind.BM25
    statistic = StatisticType.INVERSE_DOCUMENT_FREQUENCY

    def _score(self, accessor: DocumentStatisticsAccessor) -> Tuple[float, ScoreOutcome]:
        doc_length = self._document_length(accessor)
        relative_length = doc_length / self.request.average_doc_length
        k1 = self.request.k1
        b = self.request.b
        norm = k1 * (1.0 - b + b * relative_length)

        score = 0.0
        for term in self.request.terms:
            tf = accessor.term_frequency(term)
            if tf == 0:
                continue

            idf = self.statistics.get(term)
            contribution = idf * tf * (k1 + 1.0) / (tf + norm)
            score += contribution

            self.trace_term(
                term,
                tf=tf,
                idf=idf,
                doc_length=doc_length,
                relative_length=relative_length,
                contribution=contribution
            )

        return score, ScoreOutcome.SCORED
