"""Process-wide wiring: one Redis client, one question index, one pipeline."""
import atexit
import functools
from datetime import timedelta

import redis
from django.conf import settings

from quiz.cache import UserStateCache
from quiz.guard import DuplicateGuard
from quiz.pipeline import AnswerPipeline
from quiz.questions import QuestionProvider
from quiz.ranking import FallbackRankIndex, RedisRankIndex, StoreRankIndex
from quiz.store import UserStore


@functools.lru_cache(maxsize=None)
def get_redis_client():
    return redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        username=settings.REDIS_USERNAME,
        password=settings.REDIS_PASSWORD,
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )


def build_pipeline(redis_client, questions):
    store = UserStore()
    return AnswerPipeline(
        store=store,
        cache=UserStateCache(redis_client, ttl=settings.QUIZ_USER_CACHE_TTL),
        guard=DuplicateGuard(redis_client, ttl=settings.QUIZ_DUPLICATE_GUARD_TTL),
        rank_index=FallbackRankIndex(RedisRankIndex(redis_client), StoreRankIndex(store)),
        questions=questions,
        redis_client=redis_client,
        decay_window=timedelta(seconds=settings.QUIZ_STREAK_DECAY_WINDOW),
    )


@functools.lru_cache(maxsize=None)
def get_pipeline():
    pipeline = build_pipeline(get_redis_client(), QuestionProvider.from_database())
    # Lives for the whole process; stop its guard-read workers on interpreter exit
    atexit.register(pipeline.close)
    return pipeline
