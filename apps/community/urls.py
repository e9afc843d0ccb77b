from django.urls import path
from . import views

# /api/communities/...
urlpatterns = [
    path("search", views.community_search),
    path("<uuid:community_id>/join", views.community_join),
    path("<uuid:community_id>/members", views.community_members),
    path("<uuid:community_id>/messages", views.community_messages),
    path("<uuid:community_id>/mute", views.community_mute),
    path("<uuid:community_id>/unmute", views.community_unmute),
]
