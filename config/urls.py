from django.contrib import admin
from django.urls import include, path, re_path

from apps.account.views import health
from apps.community.views import community_create
from apps.system.views import api_not_found, landing

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health", health),
    path("api/auth/", include("apps.account.urls")),
    path("api/user/", include("apps.account.user_urls")),
    path("api/reels/", include("apps.reels.urls")),
    path("api/friends/", include("apps.community.friend_urls")),
    path("api/communities", community_create),
    path("api/communities/", include("apps.community.urls")),
    path("api/feed/", include("apps.community.feed_urls")),
    path("api/messages/", include("apps.im.urls")),
    path("api/love/", include("apps.im.love_urls")),
    # всё прочее под /api: JSON 404, остальное: страницы фронтенда
    re_path(r"^api(?:/.*)?$", api_not_found),
    re_path(r"^(?P<path>.*)$", landing),
]
