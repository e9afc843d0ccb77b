import base64

import pytest
from rest_framework.test import APIClient

from apps.account.models import User
from apps.system.schema import ensure_schema, mark_schema_stale

# 1 KB "видео": содержимое не проверяется, важны размер и MIME
SAMPLE_VIDEO = base64.b64encode(b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 1012).decode("ascii")


@pytest.fixture(scope="session")
def django_db_setup(django_db_setup, django_db_blocker):
    # таблицы managed=False миграции не создают
    with django_db_blocker.unblock():
        ensure_schema()


@pytest.fixture(autouse=True)
def _fresh_schema_flag():
    mark_schema_stale()
    yield


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name="Alice", phone=None, **extra):
        counter["n"] += 1
        return User.objects.create(phone=phone or f"+7000000{counter['n']:04d}", name=name, **extra)

    return _make


@pytest.fixture
def upload_reel(api):
    def _upload(user, caption="", **extra):
        body = {
            "userId": str(user.id),
            "videoData": SAMPLE_VIDEO,
            "mimeType": "video/mp4",
            "filename": "clip.mp4",
            "caption": caption,
        }
        body.update(extra)
        resp = api.post("/api/reels/upload", body, format="json")
        assert resp.status_code == 200, resp.json()
        return resp.json()["reel"]

    return _upload
