# Таблицы создаёт apps.system.schema.ensure_schema, managed=False
import uuid

from django.db import models


class Reel(models.Model):
    """Короткое видео. likes_count: кэш, источник истины: число строк в reel_likes."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField()
    video_url = models.CharField(max_length=500, null=True, blank=True)
    video_filename = models.CharField(max_length=255, null=True, blank=True)
    video_data = models.TextField(null=True, blank=True)  # base64 без префикса data:
    video_size = models.BigIntegerField(null=True, blank=True)
    video_mime_type = models.CharField(max_length=100, null=True, blank=True)
    thumbnail_url = models.CharField(max_length=500, null=True, blank=True)
    caption = models.TextField(null=True, blank=True)
    music = models.CharField(max_length=255, null=True, blank=True)
    likes_count = models.IntegerField(default=0)
    views_count = models.IntegerField(default=0)
    duration = models.IntegerField(default=15)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "reels"
        managed = False
        indexes = [
            models.Index(fields=["-created_at"], name="idx_reels_created_at"),
            models.Index(fields=["user_id"], name="idx_reels_user_id"),
        ]


class ReelLike(models.Model):
    """Лайк: не больше одной строки на пару (reel_id, user_id)"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reel_id = models.UUIDField()
    user_id = models.UUIDField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "reel_likes"
        managed = False
        constraints = [
            models.UniqueConstraint(fields=["reel_id", "user_id"], name="uq_reel_likes_reel_user"),
        ]
