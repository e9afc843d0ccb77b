# Таблицы создаёт apps.system.schema.ensure_schema, managed=False
import uuid

from django.db import models


class Friend(models.Model):
    """Заявка в друзья user_id -> friend_id; status pending / accepted"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField()
    friend_id = models.UUIDField()
    status = models.CharField(max_length=20, default="pending")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "friends"
        managed = False
        constraints = [
            models.UniqueConstraint(fields=["user_id", "friend_id"], name="uq_friends_user_friend"),
        ]


class Community(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    type = models.CharField(max_length=50)
    description = models.TextField(null=True, blank=True)
    is_private = models.BooleanField(default=False)
    created_by = models.UUIDField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "communities"
        managed = False


class CommunityMember(models.Model):
    """Участник сообщества. role: admin / moderator / member; мут ставят только admin и moderator"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    community_id = models.UUIDField()
    user_id = models.UUIDField()
    role = models.CharField(max_length=20, default="member")
    is_muted = models.BooleanField(default=False)
    mute_reason = models.TextField(null=True, blank=True)
    muted_by = models.UUIDField(null=True, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "community_members"
        managed = False
        constraints = [
            models.UniqueConstraint(fields=["community_id", "user_id"], name="uq_community_members_pair"),
        ]


class CommunityMessage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    community_id = models.UUIDField()
    user_id = models.UUIDField()
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "community_messages"
        managed = False


class Post(models.Model):
    """Пост ленты VASTAPAE, опционально привязан к сообществу"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField()
    content = models.TextField()
    community_id = models.UUIDField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "posts"
        managed = False
