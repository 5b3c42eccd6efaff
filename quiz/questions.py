import logging
import random
from collections import defaultdict
from dataclasses import dataclass
from typing import Tuple

from django.db import DatabaseError

from quiz import models
from quiz.errors import QuestionNotFound
from quiz.scoring import clamp_difficulty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Question:
    id: int
    difficulty: int
    question: str
    options: Tuple[str, ...]
    answer: str

    def is_correct(self, answer):
        # Exact, case-sensitive comparison with the answer key
        return self.answer == answer


class QuestionProvider:
    """
    Immutable question index, built once at startup and shared by reference.

    Only the "asked" relation goes to the database: it steers selection
    towards questions the user has not seen yet.
    """

    def __init__(self, questions, rng=None):
        self._by_id = {}
        pools = defaultdict(list)
        for q in questions:
            self._by_id[q.id] = q
            pools[q.difficulty].append(q)
        self._pools = {d: tuple(qs) for d, qs in pools.items()}
        self._rng = rng or random.Random()

    @classmethod
    def from_database(cls, rng=None):
        rows = models.Question.objects.order_by("id")
        questions = [
            Question(
                id=row.id,
                difficulty=row.difficulty,
                question=row.question,
                options=tuple(row.options),
                answer=row.answer,
            )
            for row in rows
        ]
        logger.info("Loaded %d questions", len(questions))
        return cls(questions, rng=rng)

    def __len__(self):
        return len(self._by_id)

    def get_question(self, question_id):
        try:
            return self._by_id[question_id]
        except KeyError:
            raise QuestionNotFound(question_id=question_id) from None

    def pool(self, difficulty):
        return self._pools.get(difficulty, ())

    def select_next_question(self, user_id, difficulty):
        """Pick an unseen question at `difficulty`, or any question there once all were shown."""
        difficulty = clamp_difficulty(difficulty)
        pool = self.pool(difficulty)
        if not pool:
            raise QuestionNotFound(difficulty=difficulty)

        asked = self._asked_ids(user_id, difficulty)
        unseen = [q for q in pool if q.id not in asked]
        question = self._rng.choice(unseen or pool)

        self._record_asked(user_id, question.id)
        return question

    def _asked_ids(self, user_id, difficulty):
        try:
            return set(
                models.AskedQuestion.objects.filter(
                    user_id=user_id, question__difficulty=difficulty
                ).values_list("question_id", flat=True)
            )
        except DatabaseError as e:
            logger.warning("Failed to load asked questions for user %s: %s", user_id, e)
            return set()

    def _record_asked(self, user_id, question_id):
        try:
            models.AskedQuestion.objects.get_or_create(user_id=user_id, question_id=question_id)
        except DatabaseError as e:
            logger.warning(
                "Failed to record question asked for user %s, question %s: %s", user_id, question_id, e
            )
