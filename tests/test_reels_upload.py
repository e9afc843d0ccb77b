import base64

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.reels.models import Reel

from .conftest import SAMPLE_VIDEO

pytestmark = pytest.mark.django_db


def test_upload_json_base64(api, make_user):
    user = make_user("Alice")
    resp = api.post("/api/reels/upload", {
        "userId": str(user.id),
        "videoData": SAMPLE_VIDEO,
        "mimeType": "video/mp4",
        "filename": "clip.mp4",
        "caption": "hello",
        "music": "lofi",
    }, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Reel успешно загружен"
    reel = body["reel"]
    assert reel["caption"] == "hello"
    assert reel["likes_count"] == 0
    assert reel["views_count"] == 0
    assert reel["duration"] == 15
    assert reel["user_name"] == "Alice"
    assert reel["video_url"] == f"/api/reels/{reel['id']}/video"

    stored = Reel.objects.get(id=reel["id"])
    assert stored.video_size == 1024
    assert stored.video_mime_type == "video/mp4"


def test_upload_data_url_takes_mime_from_header(api, make_user):
    user = make_user()
    resp = api.post("/api/reels/upload", {
        "userId": str(user.id),
        "videoData": "data:video/webm;base64," + SAMPLE_VIDEO,
    }, format="json")
    assert resp.status_code == 200
    assert resp.json()["reel"]["video_mime_type"] == "video/webm"


def test_upload_multipart(api, make_user):
    user = make_user()
    video = SimpleUploadedFile("clip.mp4", b"\x00" * 2048, content_type="video/mp4")
    resp = api.post("/api/reels/upload", {"userId": str(user.id), "video": video, "duration": "30"}, format="multipart")
    assert resp.status_code == 200
    reel = Reel.objects.get(id=resp.json()["reel"]["id"])
    assert reel.video_size == 2048
    assert reel.duration == 30
    assert base64.b64decode(reel.video_data) == b"\x00" * 2048


def test_upload_requires_user(api):
    resp = api.post("/api/reels/upload", {"videoData": SAMPLE_VIDEO, "mimeType": "video/mp4"}, format="json")
    assert resp.status_code == 400
    assert not Reel.objects.exists()


def test_upload_requires_video(api, make_user):
    user = make_user()
    resp = api.post("/api/reels/upload", {"userId": str(user.id)}, format="json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Видео файл обязателен"


def test_upload_rejects_non_video(api, make_user):
    user = make_user()
    resp = api.post("/api/reels/upload", {
        "userId": str(user.id), "videoData": SAMPLE_VIDEO, "mimeType": "image/png",
    }, format="json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Только видео файлы разрешены"
    assert not Reel.objects.exists()


def test_upload_rejects_measured_size_over_limit(api, make_user, settings):
    settings.REELS_MAX_VIDEO_BYTES = 512
    user = make_user()
    resp = api.post("/api/reels/upload", {
        "userId": str(user.id), "videoData": SAMPLE_VIDEO, "mimeType": "video/mp4",
    }, format="json")
    assert resp.status_code == 400
    assert "слишком большое" in resp.json()["error"]
    assert not Reel.objects.exists()


def test_upload_rejects_broken_base64(api, make_user):
    user = make_user()
    resp = api.post("/api/reels/upload", {
        "userId": str(user.id), "videoData": "not base64 at all!", "mimeType": "video/mp4",
    }, format="json")
    assert resp.status_code == 400
    assert not Reel.objects.exists()


def test_video_endpoint_returns_data_url(api, make_user, upload_reel):
    reel = upload_reel(make_user())
    resp = api.get(f"/api/reels/{reel['id']}/video")
    assert resp.status_code == 200
    body = resp.json()
    assert body["mimeType"] == "video/mp4"
    assert body["filename"] == "clip.mp4"
    assert body["video"] == "data:video/mp4;base64," + SAMPLE_VIDEO


def test_video_endpoint_unknown_reel(api):
    resp = api.get("/api/reels/00000000-0000-0000-0000-000000000000/video")
    assert resp.status_code == 404


def test_upload_rejects_declared_size_over_limit(api, make_user):
    user = make_user()
    resp = api.post("/api/reels/upload", {
        "userId": str(user.id),
        "videoData": SAMPLE_VIDEO,
        "mimeType": "video/mp4",
        "fileSize": 50 * 1024 * 1024,
    }, format="json")
    assert resp.status_code == 400
    assert "слишком большое" in resp.json()["error"]
    assert not Reel.objects.exists()


def test_upload_rejects_large_multipart_file(api, make_user, settings):
    settings.REELS_MAX_VIDEO_BYTES = 1024
    user = make_user()
    video = SimpleUploadedFile("big.mp4", b"\x00" * 4096, content_type="video/mp4")
    resp = api.post("/api/reels/upload", {"userId": str(user.id), "video": video}, format="multipart")
    assert resp.status_code == 400
    assert "слишком большое" in resp.json()["error"]
    assert not Reel.objects.exists()
