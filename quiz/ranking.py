"""Leaderboards by score and by max streak.

Two implementations of the same capability: a Redis sorted-set index that is
fast but not authoritative, and a scan of the user table. `FallbackRankIndex`
puts them together so callers never see which one answered.

Ranks are 1-indexed competition ranks (1 + number of users strictly ahead),
so tied users share a rank and both implementations agree. A user missing
from an ordering has rank None.
"""
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

import redis

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class Metric(enum.Enum):
    SCORE = "score"
    STREAK = "streak"


LEADERBOARD_KEYS = {
    Metric.SCORE: "leaderboard:score",
    Metric.STREAK: "leaderboard:streak",
}


@dataclass(frozen=True)
class RankEntry:
    user_id: int
    value: int
    rank: int


def clamp_limit(limit):
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def ranked(pairs):
    """Turn (user_id, value) pairs sorted by descending value into RankEntry rows."""
    entries = []
    previous = None
    rank = 0
    for position, (user_id, value) in enumerate(pairs, start=1):
        if value != previous:
            rank = position
            previous = value
        entries.append(RankEntry(user_id=user_id, value=value, rank=rank))
    return entries


def metric_value(state, metric):
    if metric is Metric.SCORE:
        return state.score
    return state.max_streak


class RankIndex:
    def top(self, metric: Metric, limit: int) -> List[RankEntry]:
        raise NotImplementedError

    def rank(self, user_id: int, metric: Metric) -> Optional[int]:
        raise NotImplementedError

    def queue_update(self, batch, state):
        """Add the user's new values to a Redis batch. No-op for indexes that do not live in Redis."""


class RedisRankIndex(RankIndex):
    """Sorted sets keyed by stringified user id. Redis errors propagate."""

    def __init__(self, client):
        self.client = client

    def top(self, metric, limit):
        rows = self.client.zrevrange(LEADERBOARD_KEYS[metric], 0, clamp_limit(limit) - 1, withscores=True)
        pairs = []
        for member, value in rows:
            try:
                pairs.append((int(member), int(value)))
            except ValueError:
                logger.warning("Skipping malformed leaderboard member %r", member)
        return ranked(pairs)

    def rank(self, user_id, metric):
        key = LEADERBOARD_KEYS[metric]
        value = self.client.zscore(key, str(user_id))
        if value is None:
            return None
        return self.client.zcount(key, f"({value}", "+inf") + 1

    def queue_update(self, batch, state):
        member = str(state.id)
        batch.zadd(LEADERBOARD_KEYS[Metric.SCORE], {member: state.score})
        batch.zadd(LEADERBOARD_KEYS[Metric.STREAK], {member: state.max_streak})

    def rebuild(self, states):
        """Replace both orderings with the given user states. Returns the number of users indexed."""
        batch = self.client.pipeline()
        for key in LEADERBOARD_KEYS.values():
            batch.delete(key)
        count = 0
        for state in states:
            self.queue_update(batch, state)
            count += 1
        batch.execute()
        return count


class StoreRankIndex(RankIndex):
    """Answers leaderboard queries straight from the user table."""

    def __init__(self, store):
        self.store = store

    def top(self, metric, limit):
        limit = clamp_limit(limit)
        if metric is Metric.SCORE:
            users = self.store.top_by_score(limit)
        else:
            users = self.store.top_by_streak(limit)
        return ranked((u.id, metric_value(u, metric)) for u in users)

    def rank(self, user_id, metric):
        if metric is Metric.SCORE:
            return self.store.rank_by_score(user_id)
        return self.store.rank_by_streak(user_id)


class FallbackRankIndex(RankIndex):
    """Ask `primary` first; use `fallback` when it fails or has nothing to say."""

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback

    def top(self, metric, limit):
        try:
            entries = self.primary.top(metric, limit)
        except redis.RedisError as e:
            logger.warning("Leaderboard index read failed for %s, using store: %s", metric.value, e)
            return self.fallback.top(metric, limit)
        if not entries:
            return self.fallback.top(metric, limit)
        return entries

    def rank(self, user_id, metric):
        try:
            rank = self.primary.rank(user_id, metric)
        except redis.RedisError as e:
            logger.warning("Rank lookup failed for user %s (%s), using store: %s", user_id, metric.value, e)
            return self.fallback.rank(user_id, metric)
        if rank is None:
            return self.fallback.rank(user_id, metric)
        return rank

    def queue_update(self, batch, state):
        self.primary.queue_update(batch, state)
