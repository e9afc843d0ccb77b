from django.urls import path
from . import views

# /api/love/...
urlpatterns = [
    path("create", views.love_create),
    path("<uuid:chat_id>/messages", views.love_messages),
]
