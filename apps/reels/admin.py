from django.contrib import admin
from django.utils.html import format_html

from .models import Reel


@admin.register(Reel)
class ReelAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user_id",
        "caption_display",
        "storage_display",
        "likes_count",
        "views_count",
        "duration",
        "created_at",
    )
    search_fields = ("caption", "music", "video_filename")
    ordering = ("-created_at",)
    date_hierarchy = "created_at"
    list_per_page = 20
    # base64 видео в форме не показываем
    exclude = ("video_data",)
    readonly_fields = ("likes_count", "views_count", "video_size", "video_mime_type")

    fieldsets = (
        (None, {"fields": ("user_id", "caption", "music", "duration")}),
        ("Видео", {"fields": ("video_url", "video_filename", "video_size", "video_mime_type", "thumbnail_url")}),
        ("Счётчики", {"fields": ("likes_count", "views_count")}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).defer("video_data")

    def caption_display(self, obj):
        caption = obj.caption or ""
        return caption if len(caption) <= 40 else caption[:40] + "…"

    caption_display.short_description = "Подпись"

    def storage_display(self, obj):
        if obj.video_url:
            return format_html('<a href="{}" target="_blank">ссылка</a>', obj.video_url)
        return format_html('<span style="color: gray;">в БД</span>')

    storage_display.short_description = "Видео"
