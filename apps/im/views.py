"""
Личные сообщения (в том числе анонимные) и LOVE-чаты на двоих
"""
import logging

from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.system.errors import Forbidden, InvalidInput, NotFound
from apps.system.params import flag, require_uuid, text
from apps.system.schema import ensure_schema_once

from .models import LoveChat, LoveMessage, PrivateMessage

logger = logging.getLogger(__name__)

CONVERSATION_LIMIT = 100


def _message_item(m):
    item = {
        "id": str(m.id),
        "sender_id": str(m.sender_id),
        "receiver_id": str(m.receiver_id),
        "content": m.content,
        "is_anonymous": m.is_anonymous,
        "created_at": m.created_at.isoformat() if m.created_at else None,
    }
    if m.is_anonymous:
        item["anonymous_name"] = m.anonymous_name
        item["anonymous_avatar"] = m.anonymous_avatar
    return item


def _chat_item(c):
    return {
        "id": str(c.id),
        "user1_id": str(c.user1_id),
        "user2_id": str(c.user2_id),
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }


def _love_item(m):
    return {
        "id": str(m.id),
        "love_chat_id": str(m.love_chat_id),
        "sender_id": str(m.sender_id),
        "content": m.content,
        "created_at": m.created_at.isoformat() if m.created_at else None,
    }


@api_view(["POST"])
@permission_classes([AllowAny])
def send_message(request):
    """body: { senderId, receiverId, content, isAnonymous?, anonymousName?, anonymousAvatar? }"""
    sender_id = require_uuid(request.data.get("senderId"), "ID отправителя обязателен")
    receiver_id = require_uuid(request.data.get("receiverId"), "ID получателя обязателен")
    content = text(request.data.get("content"))
    if not content:
        raise InvalidInput("Сообщение не может быть пустым")
    anonymous = flag(request.data.get("isAnonymous"))

    ensure_schema_once()
    m = PrivateMessage.objects.create(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        is_anonymous=anonymous,
        anonymous_name=(text(request.data.get("anonymousName"), 100) or None) if anonymous else None,
        anonymous_avatar=(text(request.data.get("anonymousAvatar")) or None) if anonymous else None,
    )
    return Response({"success": True, "message": _message_item(m)})


@api_view(["GET"])
@permission_classes([AllowAny])
def conversation(request, user_id, other_id):
    """Переписка двух пользователей в обе стороны, старые сверху"""
    latest = list(
        PrivateMessage.objects.filter(
            Q(sender_id=user_id, receiver_id=other_id) | Q(sender_id=other_id, receiver_id=user_id)
        ).order_by("-created_at", "-id")[:CONVERSATION_LIMIT]
    )
    latest.reverse()
    return Response({"success": True, "messages": [_message_item(m) for m in latest]})


@api_view(["POST"])
@permission_classes([AllowAny])
def love_create(request):
    """Создать LOVE-чат. body: { user1Id, user2Id }"""
    user1_id = require_uuid(request.data.get("user1Id"), "ID первого участника обязателен")
    user2_id = require_uuid(request.data.get("user2Id"), "ID второго участника обязателен")
    if user1_id == user2_id:
        raise InvalidInput("Участники чата должны различаться")
    ensure_schema_once()
    chat = LoveChat.objects.create(user1_id=user1_id, user2_id=user2_id)
    logger.info("LOVE-чат %s: %s + %s", chat.id, user1_id, user2_id)
    return Response({"success": True, "chat": _chat_item(chat)})


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def love_messages(request, chat_id):
    chat = LoveChat.objects.filter(id=chat_id).first()
    if not chat:
        raise NotFound("Чат не найден")
    if request.method == "GET":
        msgs = LoveMessage.objects.filter(love_chat_id=chat_id).order_by("created_at", "id")
        return Response({"success": True, "messages": [_love_item(m) for m in msgs]})

    sender_id = require_uuid(request.data.get("senderId"), "ID отправителя обязателен")
    if sender_id not in (chat.user1_id, chat.user2_id):
        raise Forbidden("Вы не участник этого чата")
    content = text(request.data.get("content"))
    if not content:
        raise InvalidInput("Сообщение не может быть пустым")
    m = LoveMessage.objects.create(love_chat_id=chat_id, sender_id=sender_id, content=content)
    return Response({"success": True, "message": _love_item(m)})
