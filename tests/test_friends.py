import pytest

from apps.community.models import Friend

pytestmark = pytest.mark.django_db


def _request(api, a, b):
    return api.post("/api/friends/request", {"userId": str(a.id), "friendId": str(b.id)}, format="json")


def test_request_and_accept(api, make_user):
    alice, bob = make_user("Alice"), make_user("Bob")
    resp = _request(api, alice, bob)
    assert resp.status_code == 200
    assert Friend.objects.get(user_id=alice.id, friend_id=bob.id).status == "pending"
    assert api.get(f"/api/friends/{alice.id}").json()["friends"] == []

    resp = api.post("/api/friends/accept", {"userId": str(bob.id), "friendId": str(alice.id)}, format="json")
    assert resp.status_code == 200
    assert [f["name"] for f in api.get(f"/api/friends/{alice.id}").json()["friends"]] == ["Bob"]
    assert [f["name"] for f in api.get(f"/api/friends/{bob.id}").json()["friends"]] == ["Alice"]


def test_duplicate_request_in_either_direction(api, make_user):
    alice, bob = make_user("Alice"), make_user("Bob")
    _request(api, alice, bob)
    assert _request(api, alice, bob).status_code == 400
    assert _request(api, bob, alice).status_code == 400
    assert Friend.objects.count() == 1


def test_self_request_rejected(api, make_user):
    alice = make_user()
    assert _request(api, alice, alice).status_code == 400


def test_accept_without_request(api, make_user):
    alice, bob = make_user("Alice"), make_user("Bob")
    resp = api.post("/api/friends/accept", {"userId": str(bob.id), "friendId": str(alice.id)}, format="json")
    assert resp.status_code == 404


def test_search_people(api, make_user):
    make_user("Alice", surname="Smith")
    make_user("Bob", surname="Alison")
    make_user("Carol")
    found = api.get("/api/friends/search", {"query": "ali"}).json()["users"]
    assert sorted(u["name"] for u in found) == ["Alice", "Bob"]
    assert "phone" not in found[0]
    assert api.get("/api/friends/search").json()["users"] == []
