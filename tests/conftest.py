import random
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest

from quiz.cache import UserStateCache
from quiz.guard import DuplicateGuard
from quiz.models import Question
from quiz.pipeline import AnswerPipeline
from quiz.questions import QuestionProvider
from quiz.ranking import FallbackRankIndex, RedisRankIndex, StoreRankIndex
from quiz.store import UserStore

SEED = [
    (1, 1, "What is the capital of France?", ["Berlin", "Paris", "Madrid", "Rome"], "B"),
    (2, 2, "Which planet is known as the Red Planet?", ["Earth", "Venus", "Mars", "Jupiter"], "C"),
    (3, 3, "What is 15 multiplied by 4?", ["50", "60", "70", "80"], "B"),
    (4, 4, "Which element has the chemical symbol 'O'?", ["Gold", "Silver", "Oxygen", "Iron"], "C"),
    (5, 5, "Who painted the Mona Lisa?", ["Van Gogh", "Picasso", "Da Vinci", "Monet"], "C"),
    (6, 6, "What is the square root of 144?", ["10", "11", "12", "14"], "C"),
    (7, 7, "Which continent is the Sahara Desert located in?", ["Asia", "Africa", "South America", "Australia"], "B"),
    (8, 8, "In what year did the Titanic sink?", ["1905", "1912", "1918", "1922"], "B"),
    (9, 9, "What is the largest organ in the human body?", ["Heart", "Liver", "Skin", "Lungs"], "C"),
    (10, 10, "Which physicist developed the theory of General Relativity?", ["Newton", "Bohr", "Einstein", "Hawking"], "C"),
    (11, 3, "How many sides does a hexagon have?", ["5", "6", "7", "8"], "B"),
    (12, 3, "What is the boiling point of water at sea level in Celsius?", ["90", "100", "110", "120"], "B"),
]


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def broken_redis():
    server = fakeredis.FakeServer()
    server.connected = False
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def seeded_questions(db):
    for question_id, difficulty, text, options, answer in SEED:
        Question.objects.create(id=question_id, difficulty=difficulty, question=text, options=options, answer=answer)


@pytest.fixture
def questions(seeded_questions):
    return QuestionProvider.from_database(rng=random.Random(7))


@pytest.fixture
def store(db):
    return UserStore()


def make_pipeline(redis_client, store, questions, clock):
    return AnswerPipeline(
        store=store,
        cache=UserStateCache(redis_client),
        guard=DuplicateGuard(redis_client),
        rank_index=FallbackRankIndex(RedisRankIndex(redis_client), StoreRankIndex(store)),
        questions=questions,
        redis_client=redis_client,
        clock=clock,
    )


@pytest.fixture
def pipeline(redis_client, store, questions, clock):
    pipeline = make_pipeline(redis_client, store, questions, clock)
    yield pipeline
    pipeline.close()
