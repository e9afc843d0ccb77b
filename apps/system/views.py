"""
Неизвестные /api/* маршруты и страницы фронтенда
"""
from django.conf import settings
from django.http import FileResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from .errors import NotFound

INDEX_PAGE = "launch.html"


@api_view(["GET", "POST", "PUT", "PATCH", "DELETE"])
@permission_classes([AllowAny])
def api_not_found(request):
    raise NotFound(f"API route not found: {request.path}")


def _public_file(path):
    """/reels-feed -> PUBLIC_DIR/reels-feed.html; за пределы PUBLIC_DIR не выходим"""
    root = settings.PUBLIC_DIR.resolve()
    name = path.strip("/") or INDEX_PAGE
    if "." not in name.rsplit("/", 1)[-1]:
        name += ".html"
    candidate = (root / name).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


@require_GET
def landing(request, path=""):
    """Страница из PUBLIC_DIR, а если её нет, встроенная заглушка со списком API"""
    found = _public_file(path)
    if found is not None:
        return FileResponse(open(found, "rb"))
    return render(request, "system/landing.html", {"path": "/" + path})
