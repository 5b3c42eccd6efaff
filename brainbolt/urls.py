from django.urls import include, path, re_path
from . import views

urlpatterns = [
    path('', views.home),
    path('api/v1/', include('quiz.urls')),
    re_path(r'^.*$', views.error),
]
