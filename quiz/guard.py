import logging

import redis

logger = logging.getLogger(__name__)

LAST_ANSWER_KEY_PREFIX = "user:last_answer:"
LAST_ANSWER_TTL = 5


def last_answer_key(user_id):
    return f"{LAST_ANSWER_KEY_PREFIX}{user_id}"


class DuplicateGuard:
    """Remembers the last accepted question per user for a few seconds.

    Matching is by (user, question) only, so a user served the same question
    twice inside the TTL cannot answer it the second time.
    """

    def __init__(self, client, ttl=LAST_ANSWER_TTL):
        self.client = client
        self.ttl = ttl

    def last_question(self, user_id):
        """Last accepted question id, or None when unset or unreadable."""
        try:
            value = self.client.get(last_answer_key(user_id))
        except redis.RedisError as e:
            logger.warning("Duplicate guard read failed for user %s: %s", user_id, e)
            return None
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def check(self, user_id, question_id):
        return self.last_question(user_id) == question_id

    def set(self, user_id, question_id):
        try:
            self.client.set(last_answer_key(user_id), str(question_id), ex=self.ttl)
        except redis.RedisError as e:
            logger.warning("Duplicate guard write failed for user %s: %s", user_id, e)
            return False
        return True

    def queue_set(self, batch, user_id, question_id):
        batch.set(last_answer_key(user_id), str(question_id), ex=self.ttl)
