"""Tests for the scorer registry and scoring sessions."""

import math

import pytest

from irscore.collection_stats import (
    CachingStatisticsClient,
    CollectionStatisticsClient,
    InMemoryStatisticsStore,
    StatisticType,
)
from irscore.common.config import ScoringConfig
from irscore.errors import MissingLengthField, ScoringConfigurationError
from irscore.scoring import (
    BM25Scorer,
    QueryLikelihoodScorer,
    ScorerKind,
    create_scorer,
    open_scoring_session,
    resolve_kind,
    statistic_for,
)
from tests.helpers import RecordingStore, document

QL_PARAMS = {"field": "body", "word_count_field": "body_words", "terms": ["cat"], "lambda": 0.5}
QL_STATISTICS = {"tf:cat": 0.01, "tf:min_tf": 0.0001}


def memory_config(**overrides):
    return ScoringConfig(_env_file=None, irscore_stats_backend="memory", **overrides)


@pytest.fixture
def owned_store(monkeypatch):
    """Store handed to sessions that create their own connection."""
    store = RecordingStore(QL_STATISTICS)
    created = []

    def fake_factory(config):
        created.append(config)
        return store

    monkeypatch.setattr("irscore.scoring.session.create_statistics_store", fake_factory)
    store.created = created
    return store


class TestRegistry:
    @pytest.mark.parametrize(
        "name",
        [ScorerKind.BM25, "temp_sum_bm25_script_score", "BM25", "bm25"],
    )
    def test_resolve_kind(self, name):
        assert resolve_kind(name) is ScorerKind.BM25

    def test_unknown_scorer(self):
        with pytest.raises(ScoringConfigurationError, match="Unknown scorer"):
            resolve_kind("tfidf_script_score")

    def test_statistic_for(self):
        assert statistic_for("qle_model_script_score") is StatisticType.TERM_FREQUENCY
        assert statistic_for(ScorerKind.BM25) is StatisticType.INVERSE_DOCUMENT_FREQUENCY
        assert statistic_for(ScorerKind.KL_DIVERGENCE) is StatisticType.TERM_FREQUENCY
        assert statistic_for(ScorerKind.KL_QUERY_MODEL) is StatisticType.TERM_FREQUENCY

    def test_create_scorer_from_params(self, metrics):
        client = CollectionStatisticsClient(InMemoryStatisticsStore(), StatisticType.TERM_FREQUENCY, metrics=metrics)

        scorer = create_scorer("qle_model_script_score", QL_PARAMS, client, metrics=metrics)

        assert isinstance(scorer, QueryLikelihoodScorer)
        assert scorer.request.terms == ("cat",)

    def test_create_scorer_validates(self, metrics):
        client = CollectionStatisticsClient(
            InMemoryStatisticsStore(), StatisticType.INVERSE_DOCUMENT_FREQUENCY, metrics=metrics
        )

        with pytest.raises(ScoringConfigurationError):
            create_scorer(ScorerKind.BM25, {"field": "body"}, client, metrics=metrics)

    def test_create_scorer_from_request(self, make_request, metrics):
        request = make_request(ScorerKind.BM25, terms=["cat"], word_count_average=10)
        client = CollectionStatisticsClient(
            InMemoryStatisticsStore(), StatisticType.INVERSE_DOCUMENT_FREQUENCY, metrics=metrics
        )

        assert isinstance(create_scorer(ScorerKind.BM25, request, client, metrics=metrics), BM25Scorer)


class TestOpenScoringSession:
    def test_owned_store_is_closed(self, owned_store, metrics):
        with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, QL_PARAMS, config=memory_config(), metrics=metrics) as session:
            score = session.score(document({"cat": 1}, 10))
            assert not owned_store.closed

        assert score == pytest.approx(math.log(0.055))
        assert owned_store.closed
        assert len(owned_store.created) == 1
        assert metrics.registry.get_sample_value(
            "irscore_sessions_total", {"scorer": "qle_model_script_score", "status": "completed"}
        ) == 1.0

    def test_owned_store_is_closed_on_error(self, owned_store, metrics):
        with pytest.raises(RuntimeError):
            with open_scoring_session("qle_model_script_score", QL_PARAMS, config=memory_config(), metrics=metrics):
                raise RuntimeError("host aborted the query")

        assert owned_store.closed
        assert metrics.registry.get_sample_value(
            "irscore_sessions_total", {"scorer": "qle_model_script_score", "status": "failed"}
        ) == 1.0

    def test_invalid_parameters_fail_before_connecting(self, owned_store, metrics):
        with pytest.raises(ScoringConfigurationError):
            with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, {"field": "body"}, config=memory_config(), metrics=metrics):
                pytest.fail("session should not open")

        assert owned_store.created == []
        assert not owned_store.closed

    def test_caller_store_stays_open(self, metrics):
        store = InMemoryStatisticsStore(QL_STATISTICS)

        with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, QL_PARAMS, config=memory_config(), store=store, metrics=metrics) as session:
            session.score(document({"cat": 1}, 10))

        assert not store.closed

    def test_plain_client_by_default(self, owned_store, metrics):
        with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, QL_PARAMS, config=memory_config(), metrics=metrics) as session:
            assert type(session.scorer.statistics) is CollectionStatisticsClient

    def test_caching_client_when_enabled(self, owned_store, metrics):
        config = memory_config(irscore_stats_cache_enabled=True)

        with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, QL_PARAMS, config=config, metrics=metrics) as session:
            session.score_many([document({"cat": 1}, 10) for _ in range(5)])
            assert isinstance(session.scorer.statistics, CachingStatisticsClient)

        assert owned_store.requested == ["tf:cat"]

    def test_default_workers_from_config(self, owned_store, metrics):
        config = memory_config(irscore_max_workers=3)

        with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, QL_PARAMS, config=config, metrics=metrics) as session:
            assert session.default_workers == 3


class TestScoringSession:
    @pytest.fixture
    def session(self, owned_store, metrics):
        with open_scoring_session(ScorerKind.QUERY_LIKELIHOOD, QL_PARAMS, config=memory_config(), metrics=metrics) as session:
            yield session

    def test_threaded_scores_match_sequential(self, session):
        documents = [document({"cat": i % 7}, 10 + i) for i in range(40)]

        sequential = session.score_many(documents, max_workers=1)
        threaded = session.score_many(documents, max_workers=4)

        assert threaded == sequential
        assert sequential[0] == -10000.0

    def test_rank(self, session):
        documents = [
            ("a", document({"cat": 1}, 10)),
            ("b", document({"cat": 5}, 10)),
            ("c", document({"dog": 1}, 10)),
            ("d", document({"cat": 1}, 10)),
        ]

        ranked = session.rank(documents)

        assert [doc_id for doc_id, _ in ranked] == ["b", "a", "d", "c"]
        assert ranked[0][1] == pytest.approx(math.log(0.255))
        assert ranked[-1][1] == -10000.0

    def test_rank_top_k(self, session):
        documents = [(str(i), document({"cat": i}, 10)) for i in range(5)]

        ranked = session.rank(documents, top_k=2, max_workers=2)

        assert [doc_id for doc_id, _ in ranked] == ["4", "3"]

    def test_rank_nothing(self, session):
        assert session.rank([]) == []

    def test_rank_rejects_negative_top_k(self, session):
        documents = [(str(i), document({"cat": i}, 10)) for i in range(3)]

        with pytest.raises(ValueError, match="top_k"):
            session.rank(documents, top_k=-1)

    def test_rank_top_k_zero(self, session):
        assert session.rank([("a", document({"cat": 1}, 10))], top_k=0) == []

    def test_empty_document_does_not_abort_ranking(self, session):
        documents = [("empty", document({}, 0)), ("match", document({"cat": 1}, 10))]

        ranked = session.rank(documents)

        assert ranked == [("match", pytest.approx(math.log(0.055))), ("empty", -10000.0)]

    def test_first_failure_propagates(self, session):
        documents = [document({"cat": 1}, 10), document({"cat": 1}, None)]

        with pytest.raises(MissingLengthField):
            session.score_many(documents, max_workers=2)
