from django.urls import path
from . import views

# /api/friends/...
urlpatterns = [
    path("search", views.friend_search),
    path("request", views.friend_request),
    path("accept", views.friend_accept),
    path("<uuid:user_id>", views.friend_list),
]
