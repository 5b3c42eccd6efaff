import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from quiz.errors import DuplicateAnswer, QuestionNotFound
from quiz.ranking import Metric
from quiz.services import get_pipeline

logger = logging.getLogger(__name__)


def _int_param(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _positive_id(value):
    # Ids start at 1; zero and negatives are rejected like malformed values
    number = _int_param(value)
    if number is None or number < 1:
        return None
    return number


def _user_id_or_error(request):
    user_id = _positive_id(request.query_params.get("userId"))
    if user_id is None:
        return None, Response({"error": "userId query parameter is required and must be a positive integer"}, status=400)
    return user_id, None


def _database_error(action, e):
    logger.error("Failed to %s: %s", action, e)
    return Response({"error": "Database update failed", "details": str(e)}, status=500)


# 🔹 Fetch Next Question
@api_view(["GET"])
def next_question(request):
    user_id, error = _user_id_or_error(request)
    if error:
        return error

    try:
        question, current_difficulty = get_pipeline().get_next_question(user_id)
    except QuestionNotFound as e:
        return Response({"error": str(e)}, status=404)
    except DatabaseError as e:
        return _database_error(f"get next question for user {user_id}", e)

    return Response({
        "questionId": question.id,
        "difficulty": question.difficulty,
        "question": question.question,
        "options": list(question.options),
        "currentDifficulty": current_difficulty,
        "userId": user_id,
    })


# 🔹 Validate Answer & Update Score
@api_view(["POST"])
def submit_answer(request):
    user_id = _positive_id(request.data.get("userId"))
    question_id = _positive_id(request.data.get("questionId"))
    answer = request.data.get("answer")

    if user_id is None or question_id is None or answer is None or answer == "":
        return Response({"error": "userId and questionId must be positive integers and answer is required"}, status=400)

    pipeline = get_pipeline()
    try:
        result = pipeline.submit_answer(user_id, question_id, str(answer))
        score_rank = pipeline.get_rank(user_id, Metric.SCORE)
        streak_rank = pipeline.get_rank(user_id, Metric.STREAK)
    except DuplicateAnswer:
        return Response(status=status.HTTP_204_NO_CONTENT)
    except QuestionNotFound as e:
        return Response({"error": str(e)}, status=404)
    except DatabaseError as e:
        return _database_error(f"submit answer for user {user_id}", e)

    user = result.user
    return Response({
        "correct": result.correct,
        "newDifficulty": user.current_difficulty,
        "newStreak": user.streak,
        "totalScore": user.score,
        "leaderboardRankScore": score_rank,
        "leaderboardRankStreak": streak_rank,
    })


@api_view(["GET"])
def metrics(request):
    user_id, error = _user_id_or_error(request)
    if error:
        return error

    try:
        user = get_pipeline().get_user_state(user_id)
    except DatabaseError as e:
        return _database_error(f"load metrics for user {user_id}", e)

    return Response({
        "currentDifficulty": user.current_difficulty,
        "streak": user.streak,
        "maxStreak": user.max_streak,
        "totalScore": user.score,
        "accuracy": user.accuracy * 100,
        "totalCorrect": user.total_correct,
        "totalAnswered": user.total_answered,
    })


@api_view(["GET"])
def score_leaderboard(request):
    try:
        entries = get_pipeline().top_by_score(_int_param(request.query_params.get("limit")))
    except DatabaseError as e:
        return _database_error("load score leaderboard", e)
    return Response([
        {"userId": e.user_id, "score": e.value, "rank": e.rank} for e in entries
    ])


@api_view(["GET"])
def streak_leaderboard(request):
    try:
        entries = get_pipeline().top_by_streak(_int_param(request.query_params.get("limit")))
    except DatabaseError as e:
        return _database_error("load streak leaderboard", e)
    return Response([
        {"userId": e.user_id, "streak": e.value, "rank": e.rank} for e in entries
    ])


@api_view(["GET"])
def rank(request):
    user_id, error = _user_id_or_error(request)
    if error:
        return error

    try:
        metric = Metric(request.query_params.get("metric", Metric.SCORE.value))
    except ValueError:
        return Response({"error": "metric must be 'score' or 'streak'"}, status=400)

    try:
        user_rank = get_pipeline().get_rank(user_id, metric)
    except DatabaseError as e:
        return _database_error(f"load {metric.value} rank for user {user_id}", e)

    return Response({
        "userId": user_id,
        "metric": metric.value,
        "rank": user_rank,
    })
