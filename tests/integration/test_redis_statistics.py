"""Round trip through a real Redis server.

Uses database 15 of ``IRSCORE_TEST_REDIS_URL`` (default
``redis://localhost:6379/15``) and flushes it. Skipped when no server
answers.
"""

import math
import os

import pytest
import redis

from irscore.collection_stats import StatisticType
from irscore.collection_stats.redis_store import RedisStatisticsStore
from irscore.common.config import ScoringConfig
from irscore.scoring import ScorerKind, open_scoring_session
from scripts.load_collection_stats import build_entries
from tests.helpers import document

pytestmark = pytest.mark.integration

REDIS_URL = os.getenv("IRSCORE_TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def redis_store():
    store = RedisStatisticsStore(redis_url=REDIS_URL, pool_size=4, socket_timeout=1.0)
    try:
        store._client.flushdb()
    except redis.ConnectionError:
        store.close()
        pytest.skip(f"Redis not available at {REDIS_URL}")
    yield store
    store._client.flushdb()
    store.close()


def test_loaded_statistics_are_used_for_scoring(redis_store, metrics):
    entries = build_entries(StatisticType.TERM_FREQUENCY, iter([("cat", 0.01), ("dog:x", 0.02)]))
    assert redis_store.set_many(entries, batch_size=2) == 3
    assert redis_store.health_check()

    params = {
        "field": "body",
        "word_count_field": "body_words",
        "terms": ["cat", "dog:x", "unseen"],
        "lambda": 0.5,
    }
    config = ScoringConfig(_env_file=None)

    with open_scoring_session(
        ScorerKind.QUERY_LIKELIHOOD, params, config=config, store=redis_store, metrics=metrics
    ) as session:
        score = session.score(document({"cat": 2}, 10))

    expected = math.log(0.105) + math.log(0.01) + math.log(0.005)
    assert score == pytest.approx(expected)


def test_missing_key_reads_none(redis_store):
    assert redis_store.get("tf:nothing") is None
