# Таблицы создаёт apps.system.schema.ensure_schema, managed=False
import uuid

from django.db import models


class PrivateMessage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender_id = models.UUIDField()
    receiver_id = models.UUIDField()
    content = models.TextField()
    is_anonymous = models.BooleanField(default=False)
    anonymous_avatar = models.TextField(null=True, blank=True)
    anonymous_name = models.CharField(max_length=100, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "private_messages"
        managed = False


class LoveChat(models.Model):
    """LOVE-чат: ровно два участника"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user1_id = models.UUIDField()
    user2_id = models.UUIDField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "love_chats"
        managed = False


class LoveMessage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    love_chat_id = models.UUIDField()
    sender_id = models.UUIDField()
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "love_messages"
        managed = False
