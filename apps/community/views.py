"""
Друзья, сообщества (модерация: мут/размут), сообщения сообществ, лента постов VASTAPAE
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, IntegerField, OuterRef, Q, Subquery
from django.db.models.functions import Coalesce
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.account.models import User
from apps.system.errors import Forbidden, InvalidInput, NotFound
from apps.system.params import flag, require_uuid, text, to_uuid
from apps.system.schema import ensure_schema_once

from .models import Community, CommunityMember, CommunityMessage, Friend, Post

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20
MESSAGES_LIMIT = 50
FEED_LIMIT = 20
MODERATOR_ROLES = ("admin", "moderator")


def _users_map(user_ids):
    ids = {uid for uid in user_ids if uid}
    return {u.id: u for u in User.objects.filter(id__in=ids)} if ids else {}


def _author(u):
    return {
        "name": getattr(u, "name", None) or "Пользователь",
        "surname": getattr(u, "surname", None),
        "avatar_url": getattr(u, "avatar_url", None),
    }


def _public_user(u):
    return {"id": str(u.id), "name": u.name, "surname": u.surname, "avatar_url": u.avatar_url, "bio": u.bio}


def _community_item(c, members_count=None):
    return {
        "id": str(c.id),
        "name": c.name,
        "type": c.type,
        "description": c.description,
        "is_private": c.is_private,
        "created_by": str(c.created_by) if c.created_by else None,
        "members_count": members_count if members_count is not None else getattr(c, "members_count", 0),
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }


def _member_item(m, u=None):
    return {
        "id": str(m.id),
        "community_id": str(m.community_id),
        "user_id": str(m.user_id),
        "role": m.role or "member",
        "is_muted": m.is_muted,
        "mute_reason": m.mute_reason,
        "muted_by": str(m.muted_by) if m.muted_by else None,
        "joined_at": m.joined_at.isoformat() if m.joined_at else None,
        **(_author(u) if u is not None else {}),
    }


def _message_item(msg, u):
    return {
        "id": str(msg.id),
        "community_id": str(msg.community_id),
        "user_id": str(msg.user_id),
        "content": msg.content,
        "created_at": msg.created_at.isoformat() if msg.created_at else None,
        **_author(u),
    }


def _get_community(community_id):
    c = Community.objects.filter(id=community_id).first()
    if not c:
        raise NotFound("Сообщество не найдено")
    return c


# ---------- Друзья ----------
@api_view(["GET"])
@permission_classes([AllowAny])
def friend_search(request):
    """Поиск людей по имени или фамилии"""
    query = text(request.GET.get("query"), 100)
    if not query:
        return Response({"success": True, "users": []})
    qs = User.objects.filter(Q(name__icontains=query) | Q(surname__icontains=query)).order_by("name", "id")[:SEARCH_LIMIT]
    return Response({"success": True, "users": [_public_user(u) for u in qs]})


@api_view(["POST"])
@permission_classes([AllowAny])
def friend_request(request):
    """Заявка в друзья. body: { userId, friendId }"""
    user_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    friend_id = require_uuid(request.data.get("friendId"), "ID друга обязателен")
    if user_id == friend_id:
        raise InvalidInput("Нельзя добавить в друзья самого себя")
    ensure_schema_once()
    if Friend.objects.filter(
        Q(user_id=user_id, friend_id=friend_id) | Q(user_id=friend_id, friend_id=user_id)
    ).exists():
        raise InvalidInput("Запрос уже отправлен")
    try:
        with transaction.atomic():
            Friend.objects.create(user_id=user_id, friend_id=friend_id, status="pending")
    except IntegrityError:
        raise InvalidInput("Запрос уже отправлен")
    return Response({"success": True, "message": "Запрос отправлен"})


@api_view(["POST"])
@permission_classes([AllowAny])
def friend_accept(request):
    """Принять заявку. body: { userId: кто принимает, friendId: кто отправил }"""
    user_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    friend_id = require_uuid(request.data.get("friendId"), "ID друга обязателен")
    updated = Friend.objects.filter(user_id=friend_id, friend_id=user_id, status="pending").update(status="accepted")
    if not updated:
        raise NotFound("Заявка не найдена")
    return Response({"success": True, "message": "Заявка принята"})


@api_view(["GET"])
@permission_classes([AllowAny])
def friend_list(request, user_id):
    """Принятые друзья пользователя"""
    edges = Friend.objects.filter(Q(user_id=user_id) | Q(friend_id=user_id), status="accepted")
    other_ids = [e.friend_id if e.user_id == user_id else e.user_id for e in edges]
    users = _users_map(other_ids)
    friends = [_public_user(users[uid]) for uid in other_ids if uid in users]
    return Response({"success": True, "friends": friends})


# ---------- Сообщества ----------
@api_view(["POST"])
@permission_classes([AllowAny])
def community_create(request):
    """Создать сообщество, создатель становится админом. body: { name, type, description, isPrivate, createdBy }"""
    name = text(request.data.get("name"), 200)
    ctype = text(request.data.get("type"), 50)
    if not name or not ctype:
        raise InvalidInput("Название и тип сообщества обязательны")
    created_by = require_uuid(request.data.get("createdBy"), "ID создателя обязателен")

    ensure_schema_once()
    with transaction.atomic():
        c = Community.objects.create(
            name=name,
            type=ctype,
            description=text(request.data.get("description")) or None,
            is_private=flag(request.data.get("isPrivate")),
            created_by=created_by,
        )
        CommunityMember.objects.create(community_id=c.id, user_id=created_by, role="admin")
    logger.info("Сообщество %s создано пользователем %s", c.id, created_by)
    return Response({"success": True, "community": _community_item(c, members_count=1)})


@api_view(["GET"])
@permission_classes([AllowAny])
def community_search(request):
    """Поиск сообществ: query по названию/описанию, type (all: любой), по числу участников"""
    query = text(request.GET.get("query"), 100)
    ctype = text(request.GET.get("type"), 50)
    members = (
        CommunityMember.objects.filter(community_id=OuterRef("pk"))
        .order_by()
        .values("community_id")
        .annotate(n=Count("id"))
        .values("n")
    )
    qs = Community.objects.annotate(
        members_count=Coalesce(Subquery(members, output_field=IntegerField()), 0)
    )
    if query:
        qs = qs.filter(Q(name__icontains=query) | Q(description__icontains=query))
    if ctype and ctype != "all":
        qs = qs.filter(type=ctype)
    qs = qs.order_by("-members_count", "-created_at")[:SEARCH_LIMIT]
    return Response({"success": True, "communities": [_community_item(c) for c in qs]})


@api_view(["POST"])
@permission_classes([AllowAny])
def community_join(request, community_id):
    """Вступить в сообщество. Повторное вступление ничего не меняет."""
    user_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    _get_community(community_id)
    member, created = CommunityMember.objects.get_or_create(
        community_id=community_id, user_id=user_id,
        defaults={"role": "member"},
    )
    return Response({"success": True, "joined": created, "member": _member_item(member)})


@api_view(["GET"])
@permission_classes([AllowAny])
def community_members(request, community_id):
    _get_community(community_id)
    members = list(CommunityMember.objects.filter(community_id=community_id).order_by("joined_at"))
    users = _users_map(m.user_id for m in members)
    return Response({"success": True, "members": [_member_item(m, users.get(m.user_id)) for m in members]})


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def community_messages(request, community_id):
    """GET: последние 50 сообщений (старые сверху); POST: отправить, заглушённым участникам 403"""
    c = _get_community(community_id)
    if request.method == "GET":
        latest = list(CommunityMessage.objects.filter(community_id=community_id).order_by("-created_at", "-id")[:MESSAGES_LIMIT])
        latest.reverse()
        users = _users_map(m.user_id for m in latest)
        return Response({"success": True, "messages": [_message_item(m, users.get(m.user_id)) for m in latest]})

    user_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    content = text(request.data.get("content"))
    if not content:
        raise InvalidInput("Сообщение не может быть пустым")
    member = CommunityMember.objects.filter(community_id=community_id, user_id=user_id).first()
    if member is None and c.is_private:
        raise Forbidden("Закрытое сообщество: сначала вступите")
    if member is not None and member.is_muted:
        raise Forbidden("Вы не можете писать в этом сообществе: " + (member.mute_reason or "мут"))
    msg = CommunityMessage.objects.create(community_id=community_id, user_id=user_id, content=content)
    return Response({"success": True, "message": _message_item(msg, User.objects.filter(id=user_id).first())})


def _moderation_target(request, community_id):
    """Проверка прав: adminId: admin/moderator этого сообщества, userId: его участник"""
    target_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    admin_id = require_uuid(request.data.get("adminId"), "ID администратора обязателен")
    _get_community(community_id)
    if not CommunityMember.objects.filter(
        community_id=community_id, user_id=admin_id, role__in=MODERATOR_ROLES
    ).exists():
        raise Forbidden("Только администратор или модератор может это сделать")
    if target_id == admin_id:
        raise InvalidInput("Нельзя модерировать самого себя")
    member = CommunityMember.objects.filter(community_id=community_id, user_id=target_id).first()
    if not member:
        raise NotFound("Участник не найден")
    return member, admin_id


@api_view(["POST"])
@permission_classes([AllowAny])
def community_mute(request, community_id):
    """Замутить участника. body: { userId, adminId, reason? }"""
    member, admin_id = _moderation_target(request, community_id)
    member.is_muted = True
    member.muted_by = admin_id
    member.mute_reason = text(request.data.get("reason")) or None
    member.save(update_fields=["is_muted", "muted_by", "mute_reason"])
    logger.info("Сообщество %s: %s замутил %s", community_id, admin_id, member.user_id)
    return Response({"success": True, "message": "Пользователь заглушён"})


@api_view(["POST"])
@permission_classes([AllowAny])
def community_unmute(request, community_id):
    """Снять мут. body: { userId, adminId }"""
    member, admin_id = _moderation_target(request, community_id)
    member.is_muted = False
    member.muted_by = None
    member.mute_reason = None
    member.save(update_fields=["is_muted", "muted_by", "mute_reason"])
    logger.info("Сообщество %s: %s снял мут с %s", community_id, admin_id, member.user_id)
    return Response({"success": True, "message": "Мут снят"})


# ---------- Лента VASTAPAE ----------
@api_view(["GET"])
@permission_classes([AllowAny])
def vastapae_feed(request):
    """20 последних постов с автором и названием сообщества"""
    posts = list(Post.objects.order_by("-created_at", "-id")[:FEED_LIMIT])
    users = _users_map(p.user_id for p in posts)
    community_ids = {p.community_id for p in posts if p.community_id}
    communities = {c.id: c.name for c in Community.objects.filter(id__in=community_ids)} if community_ids else {}
    items = []
    for p in posts:
        item = {
            "id": str(p.id),
            "user_id": str(p.user_id),
            "content": p.content,
            "community_id": str(p.community_id) if p.community_id else None,
            "community_name": communities.get(p.community_id),
            "created_at": p.created_at.isoformat() if p.created_at else None,
        }
        item.update(_author(users.get(p.user_id)))
        items.append(item)
    return Response({"success": True, "posts": items})


@api_view(["POST"])
@permission_classes([AllowAny])
def create_post(request):
    """Новый пост. body: { userId, content, communityId? }"""
    user_id = require_uuid(request.data.get("userId"), "ID пользователя обязателен")
    content = text(request.data.get("content"))
    if not content:
        raise InvalidInput("Текст поста обязателен")
    community_id = to_uuid(request.data.get("communityId"))
    if community_id:
        _get_community(community_id)
    ensure_schema_once()
    p = Post.objects.create(user_id=user_id, content=content, community_id=community_id)
    return Response({"success": True, "post": {
        "id": str(p.id),
        "user_id": str(p.user_id),
        "content": p.content,
        "community_id": str(p.community_id) if p.community_id else None,
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }})
