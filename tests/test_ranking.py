from unittest import mock

import pytest
import redis

from quiz.models import User
from quiz.ranking import (
    LEADERBOARD_KEYS,
    FallbackRankIndex,
    Metric,
    RankEntry,
    RedisRankIndex,
    StoreRankIndex,
    clamp_limit,
    ranked,
)
from quiz.store import UserState

USERS = [(1, 100, 3), (2, 300, 1), (3, 100, 7), (4, 0, 0), (5, 250, 7)]


@pytest.fixture
def users(db):
    for user_id, score, max_streak in USERS:
        User.objects.create(id=user_id, score=score, max_streak=max_streak)


@pytest.fixture
def redis_index(redis_client, users, store):
    index = RedisRankIndex(redis_client)
    index.rebuild(store.iter_users())
    return index


def test_clamp_limit():
    assert clamp_limit(None) == 10
    assert clamp_limit(0) == 10
    assert clamp_limit(-5) == 10
    assert clamp_limit(25) == 25
    assert clamp_limit(1000) == 100


def test_ranked_shares_rank_on_ties():
    assert ranked([(2, 300), (1, 100), (3, 100), (4, 0)]) == [
        RankEntry(2, 300, 1),
        RankEntry(1, 100, 2),
        RankEntry(3, 100, 2),
        RankEntry(4, 0, 4),
    ]


def test_redis_top_by_score(redis_index):
    entries = redis_index.top(Metric.SCORE, 3)

    assert [(e.user_id, e.value, e.rank) for e in entries][:2] == [(2, 300, 1), (5, 250, 2)]
    assert len(entries) == 3
    assert entries[2].value == 100 and entries[2].rank == 3


def test_redis_top_caps_limit(redis_client):
    index = RedisRankIndex(redis_client)
    index.rebuild(UserState(id=i, score=i) for i in range(1, 151))

    assert len(index.top(Metric.SCORE, 500)) == 100


def test_redis_rank_of_absent_member_is_none(redis_index):
    assert redis_index.rank(99, Metric.SCORE) is None


def test_redis_rank_matches_store_rank(redis_index, store):
    store_index = StoreRankIndex(store)
    for user_id, _, _ in USERS:
        for metric in Metric:
            assert redis_index.rank(user_id, metric) == store_index.rank(user_id, metric)


def test_store_index_top_by_streak(store, users):
    entries = StoreRankIndex(store).top(Metric.STREAK, 10)

    assert [(e.user_id, e.rank) for e in entries] == [(3, 1), (5, 1), (1, 3), (2, 4), (4, 5)]


def test_queue_update_writes_both_orderings(redis_client):
    index = RedisRankIndex(redis_client)
    batch = redis_client.pipeline(transaction=False)

    index.queue_update(batch, UserState(id=8, score=70, max_streak=2))
    batch.execute()

    assert redis_client.zscore(LEADERBOARD_KEYS[Metric.SCORE], "8") == 70
    assert redis_client.zscore(LEADERBOARD_KEYS[Metric.STREAK], "8") == 2


def test_rebuild_drops_stale_members(redis_client, store, users):
    redis_client.zadd(LEADERBOARD_KEYS[Metric.SCORE], {"999": 5000})

    count = RedisRankIndex(redis_client).rebuild(store.iter_users())

    assert count == len(USERS)
    assert redis_client.zscore(LEADERBOARD_KEYS[Metric.SCORE], "999") is None


def test_fallback_uses_store_when_redis_is_down(broken_redis, store, users):
    index = FallbackRankIndex(RedisRankIndex(broken_redis), StoreRankIndex(store))

    assert [e.user_id for e in index.top(Metric.SCORE, 2)] == [2, 5]
    assert index.rank(1, Metric.SCORE) == 3


def test_fallback_uses_store_for_missing_member(redis_client, store, users):
    index = FallbackRankIndex(RedisRankIndex(redis_client), StoreRankIndex(store))
    redis_client.zadd(LEADERBOARD_KEYS[Metric.SCORE], {"2": 300})

    assert index.rank(4, Metric.SCORE) == 5


def test_fallback_uses_store_for_empty_index(redis_client, store, users):
    index = FallbackRankIndex(RedisRankIndex(redis_client), StoreRankIndex(store))

    assert [e.user_id for e in index.top(Metric.STREAK, 2)] == [3, 5]


def test_fallback_prefers_index_when_available(redis_index, store):
    fallback = mock.Mock(wraps=StoreRankIndex(store))
    index = FallbackRankIndex(redis_index, fallback)

    assert index.rank(2, Metric.SCORE) == 1
    assert index.top(Metric.SCORE, 1)[0].user_id == 2
    fallback.rank.assert_not_called()
    fallback.top.assert_not_called()


def test_unranked_everywhere_is_none(redis_client, store, users):
    index = FallbackRankIndex(RedisRankIndex(redis_client), StoreRankIndex(store))

    assert index.rank(404, Metric.STREAK) is None


def test_redis_errors_propagate_from_plain_index(broken_redis):
    with pytest.raises(redis.RedisError):
        RedisRankIndex(broken_redis).rank(1, Metric.SCORE)
