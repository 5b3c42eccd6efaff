import json
import logging

import redis

from quiz.store import UserState

logger = logging.getLogger(__name__)

USER_CACHE_KEY_PREFIX = "user:info:"
USER_CACHE_TTL = 24 * 60 * 60


def user_cache_key(user_id):
    return f"{USER_CACHE_KEY_PREFIX}{user_id}"


class UserStateCache:
    """Read-through copy of user progression in Redis.

    Only values already accepted by the store are written here. Any Redis
    problem on read is reported as a miss so callers fall back to the store.
    """

    def __init__(self, client, ttl=USER_CACHE_TTL):
        self.client = client
        self.ttl = ttl

    def get(self, user_id):
        try:
            data = self.client.get(user_cache_key(user_id))
        except redis.RedisError as e:
            logger.warning("User cache read failed for user %s: %s", user_id, e)
            return None
        if data is None:
            return None
        try:
            return UserState.from_dict(json.loads(data))
        except (ValueError, TypeError) as e:
            logger.warning("Discarding unreadable cache entry for user %s: %s", user_id, e)
            return None

    def set(self, state):
        try:
            self.client.set(user_cache_key(state.id), self._dump(state), ex=self.ttl)
        except redis.RedisError as e:
            logger.warning("User cache write failed for user %s: %s", state.id, e)
            return False
        return True

    def queue_set(self, batch, state):
        batch.set(user_cache_key(state.id), self._dump(state), ex=self.ttl)

    @staticmethod
    def _dump(state):
        return json.dumps(state.to_dict())
