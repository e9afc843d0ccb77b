from django.urls import path
from . import views

# /api/messages/...
urlpatterns = [
    path("send", views.send_message),
    path("<uuid:user_id>/<uuid:other_id>", views.conversation),
]
