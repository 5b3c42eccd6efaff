import logging
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Iterator, List, Optional

from django.utils.dateparse import parse_datetime

from quiz.models import User

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("last_answered_at", "streak_decayed_at")


@dataclass
class UserState:
    id: int
    username: str = ""
    score: int = 0
    streak: int = 0
    max_streak: int = 0
    total_correct: int = 0
    total_answered: int = 0
    current_difficulty: int = 1
    last_answered_at: Optional[datetime] = None
    streak_decayed_at: Optional[datetime] = None

    @property
    def accuracy(self):
        if self.total_answered == 0:
            return 0.0
        return self.total_correct / self.total_answered

    def copy(self, **changes):
        return replace(self, **changes)

    def to_dict(self):
        data = asdict(self)
        for name in TIMESTAMP_FIELDS:
            if data[name] is not None:
                data[name] = data[name].isoformat()
        return data

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        for name in TIMESTAMP_FIELDS:
            if data.get(name):
                data[name] = parse_datetime(data[name])
        return cls(**data)

    @classmethod
    def from_model(cls, user):
        return cls(
            id=user.id,
            username=user.username,
            score=user.score,
            streak=user.streak,
            max_streak=user.max_streak,
            total_correct=user.total_correct,
            total_answered=user.total_answered,
            current_difficulty=user.current_difficulty,
            last_answered_at=user.last_answered_at,
            streak_decayed_at=user.streak_decayed_at,
        )


class UserStore:
    """Durable user progression backed by the Django ORM.

    Database errors are never caught here; the pipeline decides which ones
    are fatal.
    """

    def get_or_create(self, user_id: int) -> UserState:
        user, created = User.objects.get_or_create(id=user_id)
        if created:
            logger.info("Created user %s with default progression", user_id)
        return UserState.from_model(user)

    def update_streak(self, user_id: int, streak: int, decayed_at: Optional[datetime]) -> None:
        """Store a decayed streak together with the point up to which decay was charged."""
        User.objects.filter(id=user_id).update(streak=streak, streak_decayed_at=decayed_at)

    def save_after_answer(self, state: UserState) -> None:
        updated = User.objects.filter(id=state.id).update(
            score=state.score,
            streak=state.streak,
            max_streak=state.max_streak,
            total_correct=state.total_correct,
            total_answered=state.total_answered,
            current_difficulty=state.current_difficulty,
            last_answered_at=state.last_answered_at,
            streak_decayed_at=state.streak_decayed_at,
        )
        if not updated:
            # Row vanished between read and write; recreate it with the new values
            User.objects.update_or_create(id=state.id, defaults=_model_fields(state))

    def top_by_score(self, limit: int) -> List[UserState]:
        users = User.objects.order_by("-score", "id")[:limit]
        return [UserState.from_model(u) for u in users]

    def top_by_streak(self, limit: int) -> List[UserState]:
        users = User.objects.order_by("-max_streak", "id")[:limit]
        return [UserState.from_model(u) for u in users]

    def rank_by_score(self, user_id: int) -> Optional[int]:
        return self._rank(user_id, "score")

    def rank_by_streak(self, user_id: int) -> Optional[int]:
        return self._rank(user_id, "max_streak")

    def iter_users(self, chunk_size=500) -> Iterator[UserState]:
        for user in User.objects.order_by("id").iterator(chunk_size=chunk_size):
            yield UserState.from_model(user)

    def _rank(self, user_id, field):
        value = User.objects.filter(id=user_id).values_list(field, flat=True).first()
        if value is None:
            return None
        return User.objects.filter(**{f"{field}__gt": value}).count() + 1


def _model_fields(state):
    fields = state.to_dict()
    fields.pop("id")
    for name in TIMESTAMP_FIELDS:
        fields[name] = getattr(state, name)
    return fields
