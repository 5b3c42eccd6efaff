class QuizError(Exception):
    """Base class for quiz errors surfaced to callers of the pipeline."""


class DuplicateAnswer(QuizError):
    """The same question was already accepted for this user moments ago.

    Not a failure: the earlier submission was recorded and this one is a no-op.
    """

    def __init__(self, user_id, question_id):
        super().__init__(f"duplicate answer for user {user_id}, question {question_id}")
        self.user_id = user_id
        self.question_id = question_id


class QuestionNotFound(QuizError):
    def __init__(self, question_id=None, difficulty=None):
        if question_id is not None:
            message = f"question {question_id} not found"
        else:
            message = f"no questions available at difficulty {difficulty}"
        super().__init__(message)
        self.question_id = question_id
        self.difficulty = difficulty
