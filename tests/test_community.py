import uuid

import pytest

from apps.community.models import Community, CommunityMember

pytestmark = pytest.mark.django_db


@pytest.fixture
def community(api, make_user):
    owner = make_user("Owner")
    resp = api.post("/api/communities", {
        "name": "Runners", "type": "sport", "description": "Morning runs", "createdBy": str(owner.id),
    }, format="json")
    assert resp.status_code == 200
    return owner, resp.json()["community"]


def _join(api, community_id, user):
    return api.post(f"/api/communities/{community_id}/join", {"userId": str(user.id)}, format="json")


def _say(api, community_id, user, content="hi"):
    return api.post(f"/api/communities/{community_id}/messages",
                    {"userId": str(user.id), "content": content}, format="json")


def _moderate(api, action, community_id, target, admin, **extra):
    body = {"userId": str(target.id), "adminId": str(admin.id)}
    body.update(extra)
    return api.post(f"/api/communities/{community_id}/{action}", body, format="json")


def test_creator_becomes_admin(community):
    owner, c = community
    assert c["members_count"] == 1
    member = CommunityMember.objects.get(community_id=c["id"], user_id=owner.id)
    assert member.role == "admin"


def test_create_requires_name_and_type(api, make_user):
    resp = api.post("/api/communities", {"name": "x", "createdBy": str(make_user().id)}, format="json")
    assert resp.status_code == 400
    assert not Community.objects.exists()


def test_join_is_idempotent(api, make_user, community):
    _, c = community
    user = make_user()
    assert _join(api, c["id"], user).json()["joined"] is True
    assert _join(api, c["id"], user).json()["joined"] is False
    assert CommunityMember.objects.filter(community_id=c["id"]).count() == 2


def test_join_unknown_community(api, make_user):
    assert _join(api, uuid.uuid4(), make_user()).status_code == 404


def test_search_by_type_and_query(api, make_user, community):
    owner, _ = community
    api.post("/api/communities", {"name": "Chess club", "type": "games", "createdBy": str(owner.id)}, format="json")
    names = [c["name"] for c in api.get("/api/communities/search", {"type": "all"}).json()["communities"]]
    assert sorted(names) == ["Chess club", "Runners"]
    names = [c["name"] for c in api.get("/api/communities/search", {"type": "sport"}).json()["communities"]]
    assert names == ["Runners"]
    names = [c["name"] for c in api.get("/api/communities/search", {"query": "chess"}).json()["communities"]]
    assert names == ["Chess club"]


def test_search_orders_by_members(api, make_user, community):
    owner, c = community
    api.post("/api/communities", {"name": "Quiet", "type": "sport", "createdBy": str(owner.id)}, format="json")
    _join(api, c["id"], make_user())
    found = api.get("/api/communities/search").json()["communities"]
    assert [(x["name"], x["members_count"]) for x in found] == [("Runners", 2), ("Quiet", 1)]


def test_members_list(api, make_user, community):
    _, c = community
    _join(api, c["id"], make_user("Bob"))
    members = api.get(f"/api/communities/{c['id']}/members").json()["members"]
    assert [m["name"] for m in members] == ["Owner", "Bob"]
    assert [m["role"] for m in members] == ["admin", "member"]


def test_messages_oldest_first(api, community):
    owner, c = community
    _say(api, c["id"], owner, "first")
    _say(api, c["id"], owner, "second")
    messages = api.get(f"/api/communities/{c['id']}/messages").json()["messages"]
    assert [m["content"] for m in messages] == ["first", "second"]
    assert messages[0]["name"] == "Owner"


def test_empty_message_rejected(api, community):
    owner, c = community
    assert _say(api, c["id"], owner, "   ").status_code == 400


def test_mute_blocks_posting_until_unmuted(api, make_user, community):
    owner, c = community
    user = make_user("Bob")
    _join(api, c["id"], user)
    assert _say(api, c["id"], user).status_code == 200

    assert _moderate(api, "mute", c["id"], user, owner, reason="spam").status_code == 200
    blocked = _say(api, c["id"], user)
    assert blocked.status_code == 403
    assert "spam" in blocked.json()["error"]

    assert _moderate(api, "unmute", c["id"], user, owner).status_code == 200
    assert _say(api, c["id"], user).status_code == 200
    member = CommunityMember.objects.get(community_id=c["id"], user_id=user.id)
    assert (member.is_muted, member.muted_by, member.mute_reason) == (False, None, None)


def test_moderator_can_mute(api, make_user, community):
    _, c = community
    moderator, user = make_user("Mod"), make_user("Bob")
    _join(api, c["id"], moderator)
    _join(api, c["id"], user)
    CommunityMember.objects.filter(community_id=c["id"], user_id=moderator.id).update(role="moderator")
    assert _moderate(api, "mute", c["id"], user, moderator).status_code == 200


def test_plain_member_cannot_mute(api, make_user, community):
    owner, c = community
    user = make_user("Bob")
    _join(api, c["id"], user)
    assert _moderate(api, "mute", c["id"], owner, user).status_code == 403
    assert not CommunityMember.objects.get(community_id=c["id"], user_id=owner.id).is_muted


def test_mute_non_member(api, make_user, community):
    owner, c = community
    assert _moderate(api, "mute", c["id"], make_user(), owner).status_code == 404


def test_cannot_mute_self(api, community):
    owner, c = community
    assert _moderate(api, "mute", c["id"], owner, owner).status_code == 400


def test_private_community_requires_membership(api, make_user):
    owner = make_user("Owner")
    c = api.post("/api/communities", {
        "name": "Secret", "type": "club", "isPrivate": True, "createdBy": str(owner.id),
    }, format="json").json()["community"]
    assert c["is_private"] is True
    outsider = make_user("Eve")
    assert _say(api, c["id"], outsider).status_code == 403
    _join(api, c["id"], outsider)
    assert _say(api, c["id"], outsider).status_code == 200


def test_open_community_accepts_non_members(api, make_user, community):
    _, c = community
    assert _say(api, c["id"], make_user()).status_code == 200
