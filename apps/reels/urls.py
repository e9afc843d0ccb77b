from django.urls import path
from . import views

urlpatterns = [
    path("upload", views.upload),
    path("feed", views.feed),
    path("search", views.search),
    path("<str:reel_id>/video", views.reel_video),
    path("<str:reel_id>/like", views.reel_like),
    path("<str:reel_id>", views.reel_detail),
]
