import logging
import re

from django.core.cache import cache
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.reels.models import Reel
from apps.system.errors import InvalidInput, NotFound
from apps.system.params import require_uuid, text
from apps.system.schema import ensure_schema_once, store_available

from .models import User
from .verification import check_code, issue_code

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\+?\d{10,15}$")
PROFILE_FIELDS = ("surname", "bio", "gender")


def _normalize_phone(raw):
    """Убрать пробелы, дефисы и скобки: +7 (999) 123-45-67 -> +79991234567"""
    return re.sub(r"[\s\-()]", "", str(raw or "").strip())


def user_item(u):
    return {
        "id": str(u.id),
        "phone": u.phone,
        "name": u.name,
        "surname": u.surname,
        "bio": u.bio,
        "gender": u.gender,
        "avatar_url": u.avatar_url,
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }


@api_view(["GET"])
@permission_classes([AllowAny])
def health(request):
    """Проверка сервера: БД и Redis. Всегда 200, даже если БД недоступна."""
    result = {
        "status": "OK",
        "timestamp": timezone.now().isoformat(),
        "database": "Disconnected",
        "cache": "Disconnected",
        "reels_count": 0,
        "users_count": 0,
    }
    if store_available():
        try:
            result["reels_count"] = Reel.objects.count()
            result["users_count"] = User.objects.count()
            result["database"] = "Connected"
        except DatabaseError as e:
            logger.warning("health: ошибка запроса к БД: %s", e)
    cache.set("health_check", 1, 5)
    if cache.get("health_check") == 1:
        result["cache"] = "Connected"
        cache.delete("health_check")
    return Response(result)


@api_view(["POST"])
@permission_classes([AllowAny])
def register(request):
    """Регистрация: телефон + имя. Телефон уникален, повторная регистрация: 400."""
    phone = _normalize_phone(request.data.get("phone"))
    name = text(request.data.get("name"), 100)
    if not phone or not name:
        raise InvalidInput("Телефон и имя обязательны")
    if not PHONE_PATTERN.match(phone):
        raise InvalidInput("Некорректный номер телефона")

    ensure_schema_once()
    if User.objects.filter(phone=phone).exists():
        raise InvalidInput("Пользователь уже существует")
    try:
        with transaction.atomic():
            user = User.objects.create(phone=phone, name=name)
    except IntegrityError:
        raise InvalidInput("Пользователь уже существует")

    code = issue_code(user.id)
    logger.info("Код подтверждения %s -> %s", phone, code)
    return Response({
        "success": True,
        "userId": str(user.id),
        "verificationCode": code,
        "message": "Код подтверждения отправлен",
    })


@api_view(["POST"])
@permission_classes([AllowAny])
def verify(request):
    """Подтверждение кода, заодно можно заполнить профиль: userData { surname, bio, gender }"""
    user_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    code = text(request.data.get("code"))
    if not check_code(user_id, code):
        raise InvalidInput("Неверный код")

    user = User.objects.filter(id=user_id).first()
    if not user:
        raise NotFound("Пользователь не найден")

    user_data = request.data.get("userData")
    if isinstance(user_data, dict):
        changed = []
        for field in PROFILE_FIELDS:
            value = text(user_data.get(field))
            if value:
                setattr(user, field, value)
                changed.append(field)
        if changed:
            user.save(update_fields=changed + ["updated_at"])
    return Response({"success": True, "user": user_item(user)})


@api_view(["GET", "PUT"])
@permission_classes([AllowAny])
def user_profile(request, user_id):
    """GET: профиль; PUT: обновить name / surname / bio / gender"""
    user = User.objects.filter(id=user_id).first()
    if not user:
        raise NotFound("Пользователь не найден")
    if request.method == "GET":
        return Response({"success": True, "user": user_item(user)})

    changed = []
    if "name" in request.data:
        name = text(request.data.get("name"), 100)
        if not name:
            raise InvalidInput("Имя не может быть пустым")
        user.name = name
        changed.append("name")
    for field in PROFILE_FIELDS:
        if field in request.data:
            setattr(user, field, text(request.data.get(field)) or None)
            changed.append(field)
    if changed:
        user.save(update_fields=changed + ["updated_at"])
    return Response({"success": True, "user": user_item(user)})


@api_view(["POST"])
@permission_classes([AllowAny])
def update_avatar(request, user_id):
    """Смена аватара. body: { "avatarUrl": "..." }"""
    avatar_url = text(request.data.get("avatarUrl") or request.data.get("avatar_url"))
    if not avatar_url:
        raise InvalidInput("Ссылка на аватар обязательна")
    user = User.objects.filter(id=user_id).first()
    if not user:
        raise NotFound("Пользователь не найден")
    user.avatar_url = avatar_url
    user.save(update_fields=["avatar_url", "updated_at"])
    return Response({"success": True, "user": user_item(user)})
