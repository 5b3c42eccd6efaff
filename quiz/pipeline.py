"""
Answer submission and everything that keeps user state consistent.

The store is the record of truth. The cache, the duplicate guard and the
leaderboards are refreshed after each successful store write in a single
Redis round trip; their failures are logged and never fail a submission.

Concurrent submissions for the same user are not serialised: each one reads
the user, computes new values and writes the whole record back, so the last
writer wins and an update can be lost. Fixing that needs per-user ordering
(optimistic versioning or single-flight), which is not done here.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Tuple

import redis
from django.utils import timezone

from quiz.errors import DuplicateAnswer
from quiz.ranking import Metric, clamp_limit
from quiz.scoring import DEFAULT_DECAY_WINDOW, adjust_difficulty, decay_anchor, decay_streak, score_delta
from quiz.store import UserState

logger = logging.getLogger(__name__)


@dataclass
class AnswerResult:
    correct: bool
    user: UserState
    score_delta: int = 0
    failed_propagations: Tuple[str, ...] = field(default_factory=tuple)


class AnswerPipeline:
    def __init__(
        self,
        store,
        cache,
        guard,
        rank_index,
        questions,
        redis_client,
        decay_window=DEFAULT_DECAY_WINDOW,
        clock=timezone.now,
    ):
        self.store = store
        self.cache = cache
        self.guard = guard
        self.rank_index = rank_index
        self.questions = questions
        self.redis = redis_client
        self.decay_window = decay_window
        self.clock = clock
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="quiz-guard")

    def close(self):
        self._executor.shutdown(wait=True)

    # User state

    def get_user_state(self, user_id):
        """Current progression for `user_id`, creating the user on first sight.

        Reads the cache first and the store on a miss. Streak decay is applied
        here and written back to the store before the value is returned.
        """
        state = self.cache.get(user_id)
        from_cache = state is not None
        if not from_cache:
            state = self.store.get_or_create(user_id)

        decayed = self._apply_decay(state)
        if decayed:
            self.store.update_streak(user_id, state.streak, state.streak_decayed_at)
        if decayed or not from_cache:
            self.cache.set(state)
        return state

    def _apply_decay(self, state):
        anchor = decay_anchor(state.last_answered_at, state.streak_decayed_at)
        streak, decayed_to = decay_streak(state.streak, anchor, self.clock(), self.decay_window)
        if streak == state.streak:
            return False
        logger.info("Streak for user %s decayed from %s to %s", state.id, state.streak, streak)
        state.streak = streak
        state.streak_decayed_at = decayed_to
        return True

    # Answers

    def submit_answer(self, user_id, question_id, answer):
        # The guard lookup only touches Redis, so it runs beside the state read
        guard_read = self._executor.submit(self.guard.last_question, user_id)
        state = self.get_user_state(user_id)
        last_question = guard_read.result()

        if last_question == question_id:
            raise DuplicateAnswer(user_id, question_id)

        question = self.questions.get_question(question_id)
        correct = question.is_correct(answer)

        updated = state.copy()
        updated.total_answered += 1
        delta = 0
        if correct:
            updated.total_correct += 1
            updated.streak += 1
            updated.max_streak = max(updated.max_streak, updated.streak)
            delta = score_delta(
                question.difficulty, updated.streak, updated.total_correct, updated.total_answered
            )
            updated.score += delta
        else:
            updated.streak = 0
        updated.current_difficulty = adjust_difficulty(updated.current_difficulty, correct)
        updated.last_answered_at = self.clock()

        # Must succeed; database errors go straight back to the caller
        self.store.save_after_answer(updated)

        failed = self._propagate(updated, question_id)
        return AnswerResult(correct=correct, user=updated, score_delta=delta, failed_propagations=failed)

    def _propagate(self, state, question_id):
        batch = self.redis.pipeline(transaction=False)
        targets = []
        for target, queue in (
            ("cache", lambda: self.cache.queue_set(batch, state)),
            ("leaderboard", lambda: self.rank_index.queue_update(batch, state)),
            ("duplicate guard", lambda: self.guard.queue_set(batch, state.id, question_id)),
        ):
            queued = len(batch)
            queue()
            targets.extend([target] * (len(batch) - queued))

        try:
            results = batch.execute(raise_on_error=False)
        except redis.RedisError as e:
            logger.warning("Redis propagation failed for user %s: %s", state.id, e)
            return tuple(dict.fromkeys(targets))

        failed = tuple(
            dict.fromkeys(
                target for target, result in zip(targets, results) if isinstance(result, Exception)
            )
        )
        for target in failed:
            logger.warning("Failed to update %s for user %s", target, state.id)
        return failed

    # Questions

    def get_next_question(self, user_id):
        state = self.get_user_state(user_id)
        difficulty = state.current_difficulty or 1
        question = self.questions.select_next_question(user_id, difficulty)
        return question, difficulty

    # Leaderboards

    def top_by_score(self, limit=None):
        return self.rank_index.top(Metric.SCORE, clamp_limit(limit))

    def top_by_streak(self, limit=None):
        return self.rank_index.top(Metric.STREAK, clamp_limit(limit))

    def get_rank(self, user_id, metric=Metric.SCORE):
        """1-indexed rank of the user, or None when the user is unranked."""
        return self.rank_index.rank(user_id, Metric(metric))
