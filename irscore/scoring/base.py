"""Abstract base class for document scorers.

A scorer is bound to one ``ScoringRequest`` and one
``CollectionStatisticsClient`` for the duration of a query and scores any
number of documents through per-document accessors. Subclasses implement
``_score``; ``score`` adds timing, metrics, and verbose tracing around it
without touching the returned value.
"""

from abc import ABC, abstractmethod
from enum import Enum
import math
import time
from typing import ClassVar, Optional, Tuple

from irscore.collection_stats.base import StatisticType
from irscore.collection_stats.client import CollectionStatisticsClient
from irscore.common.logging import ServiceLogger
from irscore.common.metrics import MetricsCollector, get_metrics_collector
from irscore.errors import MissingLengthField, ScoringConfigurationError
from .accessor import DocumentStatisticsAccessor
from .request import ScorerKind, ScoringRequest


class ScoreOutcome(Enum):
    """How a document's score was produced."""
    SCORED = "scored"
    OVER_LENGTH = "over_length"
    NO_MATCH = "no_match"


def log_or_floor(value: float) -> float:
    """Natural log that maps 0 to -inf instead of raising."""
    if value <= 0.0:
        return -math.inf
    return math.log(value)


def weighted_log(weight: float, value: float) -> float:
    """``weight * ln(value)`` with the convention ``0 * ln(0) == 0``."""
    if weight == 0.0:
        return 0.0
    return weight * log_or_floor(value)


class Scorer(ABC):
    """Base class for relevance scorers.

    Class attributes
    - kind: Registered scorer name
    - statistic: Which collection statistic the scorer looks up
    """

    kind: ClassVar[ScorerKind]
    statistic: ClassVar[StatisticType] = StatisticType.TERM_FREQUENCY

    def __init__(
        self,
        request: ScoringRequest,
        statistics: CollectionStatisticsClient,
        metrics: Optional[MetricsCollector] = None,
    ):
        if request.kind is not self.kind:
            raise ScoringConfigurationError(
                f"{self.__class__.__name__} cannot run a {request.kind.value} request"
            )
        if statistics.statistic is not self.statistic:
            raise ScoringConfigurationError(
                f"{self.__class__.__name__} needs '{self.statistic.tag}' statistics, "
                f"got '{statistics.statistic.tag}'"
            )

        self.request = request
        self.statistics = statistics
        self.metrics = metrics or get_metrics_collector()
        self.logger = ServiceLogger(
            f"scoring.{self.kind.name.lower()}", scorer=self.kind.value, field=request.field
        )

    @property
    def name(self) -> str:
        return self.kind.value

    def score(self, accessor: DocumentStatisticsAccessor) -> float:
        """Score one document.

        Returns the model score, or a sentinel score for documents that are
        too long or match no query term. Per-document failures propagate.
        """
        start_time = time.perf_counter()
        try:
            score, outcome = self._score(accessor)
        except Exception as e:
            self.metrics.record_document(self.name, "error", time.perf_counter() - start_time)
            self.logger.error("Document scoring failed", error=str(e), error_type=type(e).__name__)
            raise

        self.metrics.record_document(self.name, outcome.value, time.perf_counter() - start_time)
        if self.request.verbose:
            self.logger.info("Document scored", score=score, outcome=outcome.value)
        return score

    @abstractmethod
    def _score(self, accessor: DocumentStatisticsAccessor) -> Tuple[float, ScoreOutcome]:
        """Compute the score and report how it was produced."""

    def _exceeds_max_length(self, accessor: DocumentStatisticsAccessor) -> bool:
        if not self.request.length_guard_enabled:
            return False
        field_length = accessor.raw_field_length()
        if field_length > self.request.max_field_length:
            if self.request.verbose:
                self.logger.info(
                    "Field too long",
                    field_length=field_length,
                    max_field_length=self.request.max_field_length
                )
            return True
        return False

    def _document_length(self, accessor: DocumentStatisticsAccessor) -> int:
        """Read the length field; absent or negative lengths are fatal.

        A length of 0 is accepted here. ``_document_probability`` rejects it
        only once a query term actually occurs in the document.
        """
        length = accessor.document_length()
        if length is None:
            raise MissingLengthField(
                f"Could not compute {self.name} score, "
                f"length field '{self.request.doc_length_field}' missing"
            )
        if length < 0:
            raise MissingLengthField(
                f"Could not compute {self.name} score, "
                f"length field '{self.request.doc_length_field}' holds {length}"
            )
        return length

    def _document_probability(self, term: str, tf: int, doc_length: int) -> float:
        """``tf / L_d``, with unmatched terms at 0 whatever the length."""
        if tf == 0:
            return 0.0
        if doc_length <= 0:
            raise MissingLengthField(
                f"Could not compute {self.name} score, length field "
                f"'{self.request.doc_length_field}' holds {doc_length} "
                f"but term {term!r} occurs {tf} times"
            )
        return tf / doc_length

    def trace_term(self, term: str, **values: float) -> None:
        if self.request.verbose:
            self.logger.info("Term contribution", term=term, **values)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value!r}, field={self.request.field!r})"
