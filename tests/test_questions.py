import random
from unittest import mock

import pytest
from django.db import DatabaseError

from quiz.errors import QuestionNotFound
from quiz.models import AskedQuestion, User
from quiz.questions import Question, QuestionProvider


@pytest.fixture
def user(db):
    return User.objects.create(id=1)


def test_loads_every_question(questions):
    assert len(questions) == 12
    assert questions.get_question(3).answer == "B"
    assert questions.get_question(3).options == ("50", "60", "70", "80")


def test_unknown_question_raises(questions):
    with pytest.raises(QuestionNotFound) as excinfo:
        questions.get_question(999)
    assert excinfo.value.question_id == 999


def test_answer_check_is_exact():
    q = Question(id=1, difficulty=1, question="?", options=("a", "b"), answer="B")

    assert q.is_correct("B")
    assert not q.is_correct("b")
    assert not q.is_correct(" B")


def test_selection_prefers_unseen_questions(questions, user):
    seen = {questions.select_next_question(1, 3).id for _ in range(3)}

    assert seen == {3, 11, 12}


def test_selection_repeats_once_pool_is_exhausted(questions, user):
    for _ in range(3):
        questions.select_next_question(1, 3)

    assert questions.select_next_question(1, 3).id in {3, 11, 12}
    assert AskedQuestion.objects.filter(user_id=1).count() == 3


def test_selection_records_asked_relation_once(questions, user):
    questions.select_next_question(1, 1)
    questions.select_next_question(1, 1)

    assert list(AskedQuestion.objects.filter(user_id=1).values_list("question_id", flat=True)) == [1]


def test_selection_clamps_difficulty(questions, user):
    assert questions.select_next_question(1, 0).difficulty == 1
    assert questions.select_next_question(1, 15).difficulty == 10


def test_empty_pool_raises(db):
    provider = QuestionProvider([], rng=random.Random(1))

    with pytest.raises(QuestionNotFound) as excinfo:
        provider.select_next_question(1, 4)
    assert excinfo.value.difficulty == 4


def test_failed_asked_record_still_returns_question(questions, user):
    with mock.patch("quiz.models.AskedQuestion.objects.get_or_create", side_effect=DatabaseError("down")):
        question = questions.select_next_question(1, 2)

    assert question.id == 2
    assert not AskedQuestion.objects.exists()
