"""
Reels: загрузка, лента, просмотр, лайки, поиск.

Лента и карточка Reel увеличивают views_count. Лента при недоступной БД
отдаёт демо-ролики, остальные операции поднимают ошибку.
"""
import base64
import binascii
import logging
import mimetypes

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from apps.account.models import User
from apps.system.errors import InvalidFormat, InvalidInput, NotFound, PayloadTooLarge, StoreUnavailable
from apps.system.params import positive_int, text, to_uuid
from apps.system.schema import (
    ensure_schema_once,
    is_missing_column_error,
    is_missing_table_error,
    recover_reel_tables,
    store_available,
)

from .demo import demo_feed, demo_reel, is_demo_id
from .models import Reel, ReelLike

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Пользователь"
PLACEHOLDER_AVATAR = "👤"
SEARCH_LIMIT = 20
MIN_QUERY_LENGTH = 2
FEED_ORDER = ("-created_at", "-id")


def _video_url(reel):
    if reel.video_url:
        return reel.video_url
    if reel.video_data:
        return f"/api/reels/{reel.id}/video"
    return None


def reel_item(reel, user, likes, liked=False, views_bump=0):
    """Строка ответа: Reel + имя и аватар автора. Сам base64 в ленту не попадает, только ссылка на него."""
    return {
        "id": str(reel.id),
        "user_id": str(reel.user_id),
        "video_url": _video_url(reel),
        "video_filename": reel.video_filename,
        "video_size": reel.video_size,
        "video_mime_type": reel.video_mime_type,
        "thumbnail_url": reel.thumbnail_url,
        "caption": reel.caption or "",
        "music": reel.music or "",
        "likes_count": likes,
        "actual_likes": likes,
        "views_count": (reel.views_count or 0) + views_bump,
        "duration": reel.duration or settings.REELS_DEFAULT_DURATION,
        "created_at": reel.created_at.isoformat() if reel.created_at else None,
        "user_name": getattr(user, "name", None) or PLACEHOLDER_NAME,
        "user_avatar": getattr(user, "avatar_url", None) or PLACEHOLDER_AVATAR,
        "is_liked": liked,
    }


def _items(reels, caller_id=None, views_bump=0):
    """Авторы, число лайков и лайк текущего пользователя: по одному запросу на всю страницу"""
    if not reels:
        return []
    reel_ids = [r.id for r in reels]
    user_ids = list({r.user_id for r in reels})
    users = {u.id: u for u in User.objects.filter(id__in=user_ids).only("id", "name", "avatar_url")}
    likes = {
        row["reel_id"]: row["n"]
        for row in ReelLike.objects.filter(reel_id__in=reel_ids).values("reel_id").annotate(n=Count("id"))
    }
    liked_set = set()
    if caller_id:
        liked_set = set(
            ReelLike.objects.filter(user_id=caller_id, reel_id__in=reel_ids).values_list("reel_id", flat=True)
        )
    return [
        reel_item(r, users.get(r.user_id), likes.get(r.id, 0), liked=(r.id in liked_set), views_bump=views_bump)
        for r in reels
    ]


def _split_data_url(payload):
    """data:video/mp4;base64,AAAA -> ("AAAA", "video/mp4"); просто base64 -> (payload, None)"""
    if payload.startswith("data:") and "," in payload:
        header, body = payload.split(",", 1)
        mime = header[5:].split(";", 1)[0].strip() or None
        return body, mime
    return payload, None


def _decoded_size(b64):
    padding = b64[-2:].count("=") if b64 else 0
    return max(0, len(b64) * 3 // 4 - padding)


def _check_size(size):
    limit = settings.REELS_MAX_VIDEO_BYTES
    if size > limit:
        raise PayloadTooLarge(f"Видео слишком большое, максимум {limit // (1024 * 1024)} МБ")


def _check_mime(mime):
    if not mime or not mime.startswith("video/"):
        raise InvalidFormat("Только видео файлы разрешены")


def _default_filename(mime):
    ext = mimetypes.guess_extension(mime or "") or ".mp4"
    return f"reel-{timezone.now().strftime('%Y%m%d%H%M%S')}{ext}"


def upload(user_id, video, filename=None, file_size=None, mime_type=None, caption=None, music=None, duration=None):
    """
    Сохранить новый Reel. video: загруженный файл (multipart) или строка base64 / data URL.
    Ошибки валидации не оставляют строк в БД.
    """
    if not user_id:
        raise InvalidInput("ID пользователя обязателен")
    owner_id = to_uuid(user_id)
    if owner_id is None:
        raise InvalidInput("Некорректный ID пользователя")
    if not video:
        raise InvalidInput("Видео файл обязателен")

    declared_size = positive_int(file_size, 0)
    mime = text(mime_type).lower()

    if hasattr(video, "read"):
        # UploadedFile: размер и тип известны до чтения содержимого
        mime = mime or (video.content_type or "").lower()
        filename = filename or video.name
        _check_size(max(declared_size, video.size or 0))
        _check_mime(mime)
        payload = base64.b64encode(video.read()).decode("ascii")
        size = video.size
    else:
        payload, data_url_mime = _split_data_url(str(video).strip())
        mime = mime or (data_url_mime or "").lower()
        size = max(declared_size, _decoded_size(payload))
        _check_size(size)
        _check_mime(mime)
        try:
            size = len(base64.b64decode(payload, validate=True))
        except (binascii.Error, ValueError):
            raise InvalidFormat("Видео повреждено: ожидается base64")
        _check_size(size)

    if not ensure_schema_once():
        raise StoreUnavailable("База данных недоступна, попробуйте позже")
    with transaction.atomic():
        reel = Reel.objects.create(
            user_id=owner_id,
            video_filename=text(filename, 255) or _default_filename(mime),
            video_data=payload,
            video_size=size,
            video_mime_type=mime,
            caption=text(caption),
            music=text(music, 255),
            likes_count=0,
            views_count=0,
            duration=positive_int(duration, settings.REELS_DEFAULT_DURATION),
        )
    logger.info("Reel %s загружен пользователем %s (%s байт)", reel.id, owner_id, size)
    user = User.objects.filter(id=owner_id).first()
    return reel_item(reel, user, 0)


def page_args(page, limit):
    page = positive_int(page, 1)
    limit = min(positive_int(limit, settings.REELS_FEED_DEFAULT_LIMIT), settings.REELS_FEED_MAX_LIMIT)
    return page, limit


def _feed_from_store(page, limit, caller_id):
    pagination = {"page": page, "limit": limit, "total": Reel.objects.count()}
    offset = (page - 1) * limit
    # страница за концом ленты: OFFSET может не влезть в целое БД
    if offset >= pagination["total"]:
        return [], pagination
    reels = list(Reel.objects.defer("video_data").order_by(*FEED_ORDER)[offset:offset + limit])
    if reels:
        # один UPDATE на всю страницу
        Reel.objects.filter(id__in=[r.id for r in reels]).update(views_count=F("views_count") + 1)
    return _items(reels, caller_id, views_bump=1), pagination


def feed(page=1, limit=None, caller_id=None):
    """Лента по created_at (новые сверху). Возвращает (reels, pagination)."""
    page, limit = page_args(page, limit)
    caller = to_uuid(caller_id)
    if not store_available():
        logger.warning("Лента Reels: БД недоступна, отдаём демо-ролики")
        return demo_feed(page, limit)
    try:
        # просмотры засчитываются только вместе с успешным ответом
        with transaction.atomic():
            return _feed_from_store(page, limit, caller)
    except DatabaseError as e:
        if is_missing_column_error(e) or is_missing_table_error(e):
            recover_reel_tables(e)
        else:
            logger.exception("Ошибка получения ленты Reels: %s", e)
        return demo_feed(page, limit)


def get_by_id(reel_id, caller_id=None):
    if is_demo_id(reel_id):
        row = demo_reel(reel_id)
        if row is None:
            raise NotFound("Reel не найден")
        return row
    pk = to_uuid(reel_id)
    reel = Reel.objects.defer("video_data").filter(pk=pk).first() if pk else None
    if reel is None:
        raise NotFound("Reel не найден")
    Reel.objects.filter(pk=pk).update(views_count=F("views_count") + 1)
    return _items([reel], to_uuid(caller_id), views_bump=1)[0]


def get_video(reel_id):
    """Содержимое видео: data URL для base64 в БД или внешняя ссылка"""
    if is_demo_id(reel_id):
        row = demo_reel(reel_id)
        if row is None:
            raise NotFound("Видео не найдено")
        return {"video": row["video_url"], "mimeType": row["video_mime_type"], "filename": row["video_filename"]}
    pk = to_uuid(reel_id)
    reel = (
        Reel.objects.only("id", "video_url", "video_data", "video_filename", "video_mime_type").filter(pk=pk).first()
        if pk else None
    )
    if reel is None or not (reel.video_data or reel.video_url):
        raise NotFound("Видео не найдено")
    mime = reel.video_mime_type or "video/mp4"
    video = f"data:{mime};base64,{reel.video_data}" if reel.video_data else reel.video_url
    return {"video": video, "mimeType": mime, "filename": reel.video_filename}


def toggle_like(reel_id, user_id):
    """Лайк/снятие лайка. likes_count пересчитывается по reel_likes и записывается в reels в той же транзакции."""
    if not user_id:
        raise InvalidInput("ID пользователя обязателен")
    if is_demo_id(reel_id):
        row = demo_reel(reel_id)
        if row is None:
            raise NotFound("Reel не найден")
        return {"likes_count": row["likes_count"], "is_liked": True}
    liker = to_uuid(user_id)
    if liker is None:
        raise InvalidInput("Некорректный ID пользователя")
    pk = to_uuid(reel_id)
    if pk is None:
        raise NotFound("Reel не найден")

    with transaction.atomic():
        # блокировка строки Reel сериализует параллельные лайки одного ролика
        if Reel.objects.select_for_update().only("id").filter(pk=pk).first() is None:
            raise NotFound("Reel не найден")
        removed, _ = ReelLike.objects.filter(reel_id=pk, user_id=liker).delete()
        if not removed:
            ReelLike.objects.create(reel_id=pk, user_id=liker)
        likes = ReelLike.objects.filter(reel_id=pk).count()
        Reel.objects.filter(pk=pk).update(likes_count=likes)
    return {"likes_count": likes, "is_liked": not removed}


def search(query, caller_id=None):
    """Поиск по подписи и имени/фамилии автора, без учёта регистра, не больше 20"""
    q = text(query, 100)
    if len(q) < MIN_QUERY_LENGTH:
        raise InvalidInput(f"Запрос должен содержать минимум {MIN_QUERY_LENGTH} символа")
    author_ids = User.objects.filter(Q(name__icontains=q) | Q(surname__icontains=q)).values("id")
    reels = list(
        Reel.objects.defer("video_data")
        .filter(Q(caption__icontains=q) | Q(user_id__in=author_ids))
        .order_by(*FEED_ORDER)[:SEARCH_LIMIT]
    )
    return _items(reels, to_uuid(caller_id))
