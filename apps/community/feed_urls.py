from django.urls import path
from . import views

# /api/feed/...
urlpatterns = [
    path("vastapae", views.vastapae_feed),
    path("posts", views.create_post),
]
