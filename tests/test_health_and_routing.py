import pytest
from django.contrib import admin

from apps.reels.models import Reel

pytestmark = pytest.mark.django_db


def test_health_counts(api, make_user, upload_reel):
    upload_reel(make_user())
    resp = api.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["database"] == "Connected"
    assert body["cache"] == "Connected"
    assert (body["users_count"], body["reels_count"]) == (1, 1)
    assert body["timestamp"]


def test_health_when_store_is_down(api, monkeypatch):
    monkeypatch.setattr("apps.account.views.store_available", lambda *a, **kw: False)
    body = api.get("/api/health").json()
    assert body["database"] == "Disconnected"
    assert body["reels_count"] == 0


@pytest.mark.parametrize("method", ["get", "post", "delete"])
def test_unknown_api_route(api, method):
    resp = getattr(api, method)("/api/nope/deeper")
    assert resp.status_code == 404
    assert resp.json() == {"error": "API route not found: /api/nope/deeper"}


def test_wrong_method_is_json(api):
    resp = api.get("/api/reels/upload")
    assert resp.status_code == 405
    assert "error" in resp.json()


def test_landing_page_fallback(client, settings, tmp_path):
    settings.PUBLIC_DIR = tmp_path
    resp = client.get("/some/page")
    assert resp.status_code == 200
    assert "Coolpep" in resp.content.decode()


def test_landing_serves_public_file(client, settings, tmp_path):
    (tmp_path / "reels-feed.html").write_text("<h1>reels</h1>", encoding="utf-8")
    settings.PUBLIC_DIR = tmp_path
    resp = client.get("/reels-feed")
    assert resp.status_code == 200
    assert b"".join(resp.streaming_content) == b"<h1>reels</h1>"


def test_landing_refuses_path_traversal(client, settings, tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (tmp_path / "secret.txt").write_text("TOPSECRET", encoding="utf-8")
    settings.PUBLIC_DIR = public
    resp = client.get("/../secret.txt")
    assert b"TOPSECRET" not in resp.content
    assert b"Coolpep" in resp.content


def test_reel_admin_registered():
    assert admin.site.is_registered(Reel)


def test_root_serves_launch_page(client, settings, tmp_path):
    (tmp_path / "launch.html").write_text("launch", encoding="utf-8")
    settings.PUBLIC_DIR = tmp_path
    resp = client.get("/")
    assert b"".join(resp.streaming_content) == b"launch"
