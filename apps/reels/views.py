"""
Reels API: загрузка, лента, карточка, видео, лайк, поиск
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from . import services


@api_view(["POST"])
@permission_classes([AllowAny])
def upload(request):
    """Загрузка Reel: multipart (поле video) или JSON (videoData: base64 или data URL)"""
    data = request.data
    video = request.FILES.get("video") or data.get("videoData") or data.get("video")
    reel = services.upload(
        user_id=data.get("userId"),
        video=video,
        filename=data.get("filename") or data.get("fileName"),
        file_size=data.get("fileSize"),
        mime_type=data.get("mimeType") or data.get("fileType"),
        caption=data.get("caption"),
        music=data.get("music"),
        duration=data.get("duration"),
    )
    return Response({"success": True, "reel": reel, "message": "Reel успешно загружен"})


@api_view(["GET"])
@permission_classes([AllowAny])
def feed(request):
    """Лента: page, limit, userId (для is_liked)"""
    reels, pagination = services.feed(
        page=request.GET.get("page"),
        limit=request.GET.get("limit"),
        caller_id=request.GET.get("userId"),
    )
    return Response({"success": True, "reels": reels, "pagination": pagination})


@api_view(["GET"])
@permission_classes([AllowAny])
def search(request):
    reels = services.search(request.GET.get("query") or request.GET.get("q"), caller_id=request.GET.get("userId"))
    return Response({"success": True, "reels": reels})


@api_view(["GET"])
@permission_classes([AllowAny])
def reel_detail(request, reel_id):
    reel = services.get_by_id(reel_id, caller_id=request.GET.get("userId"))
    return Response({"success": True, "reel": reel})


@api_view(["GET"])
@permission_classes([AllowAny])
def reel_video(request, reel_id):
    video = services.get_video(reel_id)
    return Response({"success": True, **video})


@api_view(["POST"])
@permission_classes([AllowAny])
def reel_like(request, reel_id):
    """Лайк/снятие лайка. body: { "userId": "..." }"""
    result = services.toggle_like(reel_id, request.data.get("userId"))
    return Response({"success": True, **result})
