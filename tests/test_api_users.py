"""
Tests for the user routes: profile, administration and item members.
"""

import pytest

SECRET_FIELDS = {"password_hash", "refresh_token_hash"}


@pytest.fixture
async def owner(create_user):
    return await create_user()


@pytest.fixture
async def item(owner, create_item):
    return await create_item(owner)


@pytest.fixture
async def admin(create_user):
    return await create_user(email="root@example.com", name="Root", is_admin=True)


@pytest.fixture
async def member(services, item):
    return (await services.relationships.invite(item, "bob@example.com")).user


# =============================================================================
# Current User
# =============================================================================


class TestMe:
    async def test_get(self, client, services, owner, auth_headers):
        await services.tokens.issue_refresh_token(owner)

        response = await client.get("/api/users/me", headers=auth_headers(owner))

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "alice@example.com"
        assert body["is_registered"] is True
        assert not SECRET_FIELDS & set(body)

    async def test_deleted_user(self, client, services, owner, auth_headers):
        headers = auth_headers(owner)
        await services.users.delete(owner.id)

        assert (await client.get("/api/users/me", headers=headers)).status_code == 404

    async def test_update_profile(self, client, services, owner, auth_headers):
        response = await client.patch(
            "/api/users/me",
            json={"name": "Alice L.", "email": "Alice.L@Example.com", "profile_image": "a.png"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        stored = await services.users.get(owner.id)
        assert (stored.name, stored.email, stored.profile_image) == ("Alice L.", "alice.l@example.com", "a.png")

    async def test_blank_name_ignored(self, client, services, owner, auth_headers):
        await client.patch("/api/users/me", json={"name": ""}, headers=auth_headers(owner))

        assert (await services.users.get(owner.id)).name == "Alice"

    async def test_change_password(self, client, services, owner, auth_headers):
        await client.patch(
            "/api/users/me", json={"password": "another-password"}, headers=auth_headers(owner),
        )

        assert (await services.users.get(owner.id)).verify_password("another-password")

    async def test_email_taken(self, client, owner, create_user, auth_headers):
        await create_user(email="taken@example.com")

        response = await client.patch(
            "/api/users/me", json={"email": "taken@example.com"}, headers=auth_headers(owner),
        )

        assert response.status_code == 422
        assert response.json()["errors"][0] == {
            "message": "Email is already taken.", "type": "unique", "path": "email",
        }


# =============================================================================
# Administration
# =============================================================================


class TestAdministration:
    async def test_admin_updates_user(self, client, services, admin, owner, auth_headers):
        response = await client.patch(
            f"/api/users/{owner.id}", json={"is_admin": True}, headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert (await services.users.get(owner.id)).is_admin

    async def test_admin_sets_password(self, client, services, admin, create_user, auth_headers):
        invited = await create_user(email="bob@example.com", password=None)

        response = await client.patch(
            f"/api/users/{invited.id}", json={"password": "set-by-admin"}, headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["is_registered"] is True
        assert not SECRET_FIELDS & set(response.json())
        assert (await services.users.get(invited.id)).verify_password("set-by-admin")

    async def test_admin_password_too_short(self, client, admin, owner, auth_headers):
        response = await client.patch(
            f"/api/users/{owner.id}", json={"password": "short"}, headers=auth_headers(admin),
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["path"] == "password"

    async def test_non_admin_forbidden(self, client, owner, create_user, auth_headers):
        other = await create_user(email="bob@example.com")

        response = await client.patch(
            f"/api/users/{other.id}", json={"name": "Hacked"}, headers=auth_headers(owner),
        )

        assert response.status_code == 403

    async def test_unknown_user(self, client, admin, auth_headers):
        response = await client.delete("/api/users/user_missing", headers=auth_headers(admin))

        assert response.status_code == 404

    async def test_delete_member(self, client, services, admin, item, auth_headers):
        helper = (await services.relationships.invite(item, "helper@example.com", as_manager=True)).user

        response = await client.delete(f"/api/users/{helper.id}", headers=auth_headers(admin))

        assert response.status_code == 204
        assert await services.users.get(helper.id) is None
        assert helper.id not in (await services.items.get(item.id)).managers

    async def test_owner_cannot_be_deleted(self, client, services, admin, owner, item, auth_headers):
        response = await client.delete(f"/api/users/{owner.id}", headers=auth_headers(admin))

        assert response.status_code == 422
        assert response.json()["errors"][0]["path"] == "items"
        assert await services.users.get(owner.id) is not None


# =============================================================================
# Item Members
# =============================================================================


class TestMembers:
    async def test_list(self, client, item, owner, member, auth_headers):
        response = await client.get(f"/api/items/{item.slug}/users", headers=auth_headers(owner))

        assert response.status_code == 200
        members = {m["email"]: m for m in response.json()}
        assert members["alice@example.com"]["is_owner"]
        assert members["alice@example.com"]["is_manager"]
        assert not members["bob@example.com"]["is_manager"]
        assert not members["bob@example.com"]["is_registered"]
        assert all(not SECRET_FIELDS & set(m) for m in members.values())

    async def test_list_requires_manager(self, client, item, member, auth_headers):
        response = await client.get(f"/api/items/{item.slug}/users", headers=auth_headers(member))

        assert response.status_code == 403

    async def test_invite(self, client, services, item, owner, outbox, auth_headers):
        response = await client.post(
            f"/api/items/{item.slug}/users",
            json={"email": "new@example.com", "manager": True},
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["created"] and body["granted_access"] and body["granted_manager"]
        assert body["notified"]
        assert body["user"]["id"] in (await services.items.get(item.id)).managers
        assert len(outbox) == 1

    async def test_invite_twice(self, client, item, owner, outbox, auth_headers):
        for _ in range(2):
            response = await client.post(
                f"/api/items/{item.slug}/users",
                json={"email": "new@example.com"},
                headers=auth_headers(owner),
            )

        assert response.json()["created"] is False
        assert response.json()["notified"] is False
        assert len(outbox) == 1

    async def test_invite_requires_manager(self, client, item, member, auth_headers):
        response = await client.post(
            f"/api/items/{item.slug}/users", json={"email": "x@example.com"}, headers=auth_headers(member),
        )

        assert response.status_code == 403

    async def test_invite_validates_email(self, client, item, owner, auth_headers):
        response = await client.post(
            f"/api/items/{item.slug}/users", json={"email": "not-an-email"}, headers=auth_headers(owner),
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["path"] == "email"

    async def test_manager_unregisters_member(self, client, services, item, owner, member, auth_headers):
        response = await client.delete(
            f"/api/items/{item.slug}/users/{member.id}", headers=auth_headers(owner),
        )

        assert response.status_code == 204
        assert (await services.users.get(member.id)).items == []

    async def test_member_leaves(self, client, services, item, member, auth_headers):
        response = await client.delete(
            f"/api/items/{item.slug}/users/{member.id}", headers=auth_headers(member),
        )

        assert response.status_code == 204

    async def test_owner_cannot_be_unregistered(self, client, services, item, owner, auth_headers):
        helper = (await services.relationships.invite(item, "helper@example.com", as_manager=True)).user

        response = await client.delete(
            f"/api/items/{item.slug}/users/{owner.id}", headers=auth_headers(helper),
        )

        assert response.status_code == 403
        assert item.id in (await services.users.get(owner.id)).items

    async def test_unknown_member(self, client, item, owner, auth_headers):
        response = await client.delete(
            f"/api/items/{item.slug}/users/user_missing", headers=auth_headers(owner),
        )

        assert response.status_code == 404
