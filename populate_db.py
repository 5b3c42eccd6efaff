import logging
import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "brainbolt.settings")
django.setup()

from quiz.models import Question  # noqa: E402

logger = logging.getLogger("quiz.populate_db")

# (id, difficulty, question, options, answer key)
SEED_QUESTIONS = [
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
]


def populate_questions(questions=SEED_QUESTIONS):
    """Insert or refresh the seed questions. Safe to run repeatedly."""
    created_count = 0
    for question_id, difficulty, text, options, answer in questions:
        _, created = Question.objects.update_or_create(
            id=question_id,
            defaults={
                "difficulty": difficulty,
                "question": text,
                "options": options,
                "answer": answer,
            },
        )
        if created:
            created_count += 1
    logger.info("Seeded %d questions (%d new)", len(questions), created_count)
    return created_count


if __name__ == "__main__":
    populate_questions()
    print("✅ Questions stored in the database.")
