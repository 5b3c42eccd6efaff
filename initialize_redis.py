import logging
import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "brainbolt.settings")
django.setup()

from quiz.ranking import RedisRankIndex  # noqa: E402
from quiz.services import get_redis_client  # noqa: E402
from quiz.store import UserStore  # noqa: E402

logger = logging.getLogger("quiz.initialize_redis")


# Rebuild both leaderboards from the user table
def initialize_redis(redis_client=None, store=None):
    redis_client = redis_client or get_redis_client()
    store = store or UserStore()
    count = RedisRankIndex(redis_client).rebuild(store.iter_users())
    logger.info("Rebuilt leaderboards for %d users", count)
    return count


# Run initialization
if __name__ == "__main__":
    initialize_redis()
    print("✅ Redis initialized successfully!")
