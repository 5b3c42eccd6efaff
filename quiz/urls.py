from django.urls import path
from . import views

urlpatterns = [
    path("quiz/next", views.next_question),
    path("quiz/answer", views.submit_answer),
    path("quiz/metrics", views.metrics),
    path("leaderboard/score", views.score_leaderboard),
    path("leaderboard/streak", views.streak_leaderboard),
    path("leaderboard/rank", views.rank),
]
