"""Profiles, avatars, dashboards and collaboration requests."""
import pytest

from ideahub.api import users as users_api
from ideahub.db.models import User


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


class TestProfile:

    async def test_update_profile(self, client, make_user, fetch):
        user, headers = await make_user()
        resp = await client.patch(
            "/users/me",
            json={"username": "renamed", "bio": "Tinkerer", "wallet_address": "0xabc"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["username"] == "renamed"

        stored = await fetch(User, user.id)
        assert stored.bio == "Tinkerer"
        assert stored.wallet_address == "0xabc"

    async def test_public_profile_hides_email(self, client, make_user):
        user, _ = await make_user(username="public_pat")
        body = (await client.get(f"/users/{user.id}")).json()
        assert body["username"] == "public_pat"
        assert "email" not in body

        assert (await client.get("/users/nobody")).status_code == 404

    async def test_user_ideas_and_owned_ideas(self, client, make_user, make_idea):
        creator, creator_headers = await make_user()
        investor, investor_headers = await make_user(role="investor")
        bought = await make_idea(creator, title="bought", minted_by=investor.id)
        await make_idea(creator, title="kept")
        # self-minted ideas are not "owned" purchases
        await make_idea(investor, title="self", minted_by=investor.id)

        listed = (await client.get(f"/users/{creator.id}/ideas")).json()
        assert {i["title"] for i in listed} == {"bought", "kept"}

        owned = (await client.get("/users/me/owned-ideas", headers=investor_headers)).json()
        assert [i["id"] for i in owned] == [bought.id]
        assert (await client.get("/users/me/owned-ideas", headers=creator_headers)).json() == []

    async def test_user_ideas_paging_is_bounded(self, client, make_user):
        user, _ = await make_user()
        assert (await client.get(f"/users/{user.id}/ideas", params={"offset": -1})).status_code == 422
        assert (await client.get(f"/users/{user.id}/ideas", params={"limit": 0})).status_code == 422
        assert (await client.get(f"/users/{user.id}/ideas", params={"limit": 500})).status_code == 422


class TestAvatar:

    @pytest.fixture
    def fake_s3(self, monkeypatch):
        deleted = []

        async def save(file_obj, filename, content_type, user_id):
            assert file_obj.read() == b"\x89PNG fake"
            return f"avatars/{user_id}/new.png"

        async def delete(key):
            deleted.append(key)

        monkeypatch.setattr(users_api, "save_user_avatar_to_s3", save)
        monkeypatch.setattr(users_api, "delete_file_from_s3", delete)
        return deleted

    async def test_upload_replaces_old_avatar(self, client, db, make_user, fake_s3):
        user, headers = await make_user()
        user.avatar_url = f"https://ideahub-uploads.s3.us-east-1.amazonaws.com/avatars/{user.id}/old.png"
        await db.commit()

        resp = await client.post(
            "/users/me/avatar",
            files={"file": ("me.png", b"\x89PNG fake", "image/png")},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["avatar_url"].endswith(f"/avatars/{user.id}/new.png")
        assert fake_s3 == [f"avatars/{user.id}/old.png"]

    async def test_rejects_non_image(self, client, make_user, fake_s3):
        _, headers = await make_user()
        resp = await client.post(
            "/users/me/avatar",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )
        assert resp.status_code == 400


class TestDashboards:

    async def test_creator_dashboard_totals(self, client, make_user, make_idea):
        creator, headers = await make_user()
        _, fan_headers = await make_user(role="investor")
        first = await make_idea(creator, is_nft=True, minted_by=creator.id)
        await make_idea(creator)

        await client.post(f"/ideas/{first.id}/upvote", headers=fan_headers)
        await client.post(f"/ideas/{first.id}/comments", json={"comment_text": "nice"}, headers=fan_headers)

        body = (await client.get("/dashboard/creator", headers=headers)).json()
        assert body["total_ideas"] == 2
        assert body["total_upvotes"] == 1
        assert body["total_comments"] == 1
        assert body["nfts_minted"] == 1
        assert len(body["recent_ideas"]) == 2

    async def test_investor_dashboard(self, client, make_user, make_idea):
        creator, _ = await make_user()
        investor, headers = await make_user(role="investor")
        _, fan_headers = await make_user(role="investor")
        await make_idea(creator, title="owned", is_nft=True, minted_by=investor.id)
        quiet = await make_idea(creator, title="quiet")
        popular = await make_idea(creator, title="popular")
        await client.post(f"/ideas/{popular.id}/upvote", headers=fan_headers)

        body = (await client.get("/dashboard/investor", headers=headers)).json()
        assert body["total_purchased"] == 1
        assert body["nfts_owned"] == 1
        assert [i["title"] for i in body["owned_ideas"]] == ["owned"]
        assert [i["id"] for i in body["trending_ideas"]] == [popular.id, quiet.id]

    async def test_dashboards_are_role_gated(self, client, make_user):
        _, creator_headers = await make_user(role="creator")
        _, investor_headers = await make_user(role="investor")
        assert (await client.get("/dashboard/investor", headers=creator_headers)).status_code == 403
        assert (await client.get("/dashboard/creator", headers=investor_headers)).status_code == 403


class TestCollabRequests:

    async def test_request_and_accept(self, client, make_user, make_idea):
        creator, creator_headers = await make_user()
        investor, investor_headers = await make_user(role="investor")
        idea = await make_idea(creator)

        payload = {
            "name": "Jane",
            "email": "jane@fund.example",
            "linkedin_url": "https://linkedin.com/in/jane",
            "message": "Keen to talk",
            "nda_agreed": True,
        }
        sent = await client.post(f"/ideas/{idea.id}/collab-requests", json=payload, headers=investor_headers)
        assert sent.status_code == 201
        assert sent.json()["accepted"] is False

        incoming = (await client.get("/collab-requests/incoming", headers=creator_headers)).json()
        assert [r["investor_id"] for r in incoming] == [investor.id]

        request_id = sent.json()["id"]
        denied = await client.put(f"/collab-requests/{request_id}/accept", headers=investor_headers)
        assert denied.status_code == 403

        accepted = await client.put(f"/collab-requests/{request_id}/accept", headers=creator_headers)
        assert accepted.json()["accepted"] is True

    async def test_nda_and_own_idea_rules(self, client, make_user, make_idea):
        creator, creator_headers = await make_user()
        _, investor_headers = await make_user(role="investor")
        idea = await make_idea(creator)
        payload = {"name": "Jane", "email": "jane@fund.example", "message": "hi", "nda_agreed": False}

        no_nda = await client.post(f"/ideas/{idea.id}/collab-requests", json=payload, headers=investor_headers)
        assert no_nda.status_code == 400

        own = await client.post(
            f"/ideas/{idea.id}/collab-requests", json=dict(payload, nda_agreed=True), headers=creator_headers
        )
        assert own.status_code == 400
