from django.db import models


# User progression, the record of truth for scores and streaks
class User(models.Model):
    username = models.CharField(max_length=255, blank=True, default="")
    score = models.BigIntegerField(default=0)
    streak = models.PositiveIntegerField(default=0)
    max_streak = models.PositiveIntegerField(default=0)
    total_correct = models.PositiveIntegerField(default=0)
    total_answered = models.PositiveIntegerField(default=0)
    current_difficulty = models.PositiveSmallIntegerField(default=1)
    last_answered_at = models.DateTimeField(null=True, blank=True)
    # Inactivity before this point has already been charged against the streak
    streak_decayed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["-score"], name="quiz_user_score_idx"),
            models.Index(fields=["-max_streak"], name="quiz_user_max_streak_idx"),
        ]

    def __str__(self):
        return f"{self.id} - Score: {self.score}, Streak: {self.streak}/{self.max_streak}"


class Question(models.Model):
    difficulty = models.PositiveSmallIntegerField(db_index=True)
    question = models.TextField()
    options = models.JSONField(default=list)
    answer = models.CharField(max_length=255)

    def __str__(self):
        return f"#{self.id} (difficulty {self.difficulty}) {self.question}"


# Which questions a user has already been shown
class AskedQuestion(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="asked")
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="+")
    asked_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "question"], name="quiz_asked_once"),
        ]
