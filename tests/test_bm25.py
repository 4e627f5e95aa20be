"""Tests for the BM25 scorer."""

import pytest

from irscore.collection_stats import StatisticType
from irscore.errors import MissingLengthField, ScoringConfigurationError
from irscore.scoring import BM25Scorer, ScorerKind
from tests.helpers import document

BM25 = ScorerKind.BM25
IDF = StatisticType.INVERSE_DOCUMENT_FREQUENCY


@pytest.fixture
def scorer_for(make_request, make_client, metrics):
    def _make(idf, fallback=None, **params):
        request = make_request(BM25, **params)
        client = make_client(IDF, idf, fallback=fallback)
        return BM25Scorer(request, client, metrics=metrics)
    return _make


def test_single_term_score(scorer_for):
    scorer = scorer_for({"cat": 2.0}, terms=["cat"], word_count_average=100)

    score = scorer.score(document({"cat": 3}, 100))

    # 2.0 * 3 * 2.2 / (3 + 1.2)
    assert score == pytest.approx(13.2 / 4.2)


def test_unmatched_document_scores_zero_without_lookups(scorer_for):
    scorer = scorer_for({"cat": 2.0, "dog": 1.0}, terms=["cat", "dog"], word_count_average=100)

    assert scorer.score(document({"bird": 1}, 50)) == 0.0
    assert scorer.statistics.store.requested == []


def test_max_idf_fallback(scorer_for):
    scorer = scorer_for({}, fallback=5.0, terms=["unicorn"], word_count_average=10)

    score = scorer.score(document({"unicorn": 1}, 10))

    assert score == pytest.approx(5.0 * 2.2 / 2.2)
    assert scorer.statistics.store.requested == ["idf:unicorn", "idf:max_idf"]


def test_longer_documents_score_lower(scorer_for):
    scorer = scorer_for({"cat": 2.0}, terms=["cat"], word_count_average=100)

    short = scorer.score(document({"cat": 2}, 50))
    long = scorer.score(document({"cat": 2}, 400))

    assert short > long


def test_b_zero_ignores_length(scorer_for):
    scorer = scorer_for({"cat": 2.0}, terms=["cat"], word_count_average=100, b=0.0)

    assert scorer.score(document({"cat": 2}, 50)) == scorer.score(document({"cat": 2}, 5000))


def test_custom_k1(scorer_for):
    scorer = scorer_for({"cat": 1.0}, terms=["cat"], word_count_average=10, k1=2.0)

    assert scorer.score(document({"cat": 1}, 10)) == pytest.approx(3.0 / 3.0)


def test_zero_length_is_allowed(scorer_for):
    scorer = scorer_for({"cat": 1.0}, terms=["cat"], word_count_average=10)

    # norm = 1.2 * 0.25
    assert scorer.score(document({"cat": 1}, 0)) == pytest.approx(2.2 / 1.3)


def test_missing_length(scorer_for):
    scorer = scorer_for({"cat": 1.0}, terms=["cat"], word_count_average=10)

    with pytest.raises(MissingLengthField):
        scorer.score(document({"cat": 1}, None))


def test_negative_length(scorer_for):
    scorer = scorer_for({"cat": 1.0}, terms=["cat"], word_count_average=10)

    with pytest.raises(MissingLengthField):
        scorer.score(document({"cat": 1}, -5))
    with pytest.raises(MissingLengthField):
        scorer.score(document({}, -5))


def test_terms_sum(scorer_for):
    scorer = scorer_for({"cat": 2.0, "dog": 1.0}, terms=["cat", "dog"], word_count_average=100)
    both = scorer.score(document({"cat": 1, "dog": 1}, 100))

    cat = 2.0 * 2.2 / 2.2
    dog = 1.0 * 2.2 / 2.2
    assert both == pytest.approx(cat + dog)


def test_requires_idf_statistics(make_request, make_client, metrics):
    request = make_request(BM25, terms=["cat"], word_count_average=10)
    client = make_client(StatisticType.TERM_FREQUENCY, {"cat": 0.1})

    with pytest.raises(ScoringConfigurationError):
        BM25Scorer(request, client, metrics=metrics)
