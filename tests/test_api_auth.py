"""
Tests for the auth routes: login, refresh, logout, register, password
reset and the browser session bridge.
"""

import pytest

from private_booking.core.errors import MailDeliveryError

# Default password of the create_user fixture
PASSWORD = "correct-horse-battery"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


async def login(client, email="alice@example.com", password=PASSWORD):
    return await client.post("/auth/login", json={"email": email, "password": password})


async def test_ping(client):
    response = await client.get("/api/ping")

    assert response.status_code == 200
    assert response.json() == "pong"


# =============================================================================
# Login
# =============================================================================


class TestLogin:
    async def test_returns_token_pair(self, client, services, create_user):
        user = await create_user()

        response = await login(client)

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["expires_in"] == services.settings.access_token_lifespan - 1
        assert services.tokens.verify_access_token(body["access_token"]).sub == user.id

    async def test_email_is_case_insensitive(self, client, create_user):
        await create_user()

        assert (await login(client, email="ALICE@example.com")).status_code == 200

    async def test_wrong_password(self, client, create_user):
        await create_user()

        response = await login(client, password="wrong-password")

        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_unknown_email_looks_the_same(self, client, create_user):
        await create_user()

        wrong_password = await login(client, password="wrong-password")
        unknown = await login(client, email="nobody@example.com")

        assert unknown.status_code == wrong_password.status_code == 401
        assert unknown.json() == wrong_password.json()

    async def test_unregistered_user_cannot_log_in(self, client, create_user):
        await create_user(password=None)

        assert (await login(client, password="")).status_code == 401

    async def test_malformed_body(self, client):
        response = await client.post("/auth/login", content=b"not json")

        assert response.status_code == 401


# =============================================================================
# Refresh & Logout
# =============================================================================


class TestRefresh:
    async def test_rotates(self, client, create_user):
        await create_user()
        first = (await login(client)).json()

        response = await client.post("/auth/refresh-token", headers=bearer(first["refresh_token"]))
        assert response.status_code == 200
        second = response.json()

        # the old refresh token is dead, the new one works
        stale = await client.post("/auth/refresh-token", headers=bearer(first["refresh_token"]))
        assert stale.status_code == 401
        fresh = await client.post("/auth/refresh-token", headers=bearer(second["refresh_token"]))
        assert fresh.status_code == 200

    async def test_new_login_invalidates_other_device(self, client, create_user):
        await create_user()
        device_a = (await login(client)).json()
        await login(client)

        response = await client.post("/auth/refresh-token", headers=bearer(device_a["refresh_token"]))

        assert response.status_code == 401

    async def test_access_token_rejected(self, client, create_user):
        await create_user()
        pair = (await login(client)).json()

        response = await client.post("/auth/refresh-token", headers=bearer(pair["access_token"]))

        assert response.status_code == 401

    async def test_missing_token(self, client):
        response = await client.post("/auth/refresh-token")

        assert response.status_code == 401


class TestLogout:
    async def test_revokes_refresh_tokens(self, client, create_user):
        await create_user()
        pair = (await login(client)).json()

        response = await client.post("/auth/logout", headers=bearer(pair["access_token"]))
        assert response.status_code == 204

        refresh = await client.post("/auth/refresh-token", headers=bearer(pair["refresh_token"]))
        assert refresh.status_code == 401

    async def test_requires_access_token(self, client):
        assert (await client.post("/auth/logout")).status_code == 401


# =============================================================================
# Register
# =============================================================================


class TestRegister:
    async def test_completes_invitation(self, client, services, create_user, create_item, outbox, mail_token):
        owner = await create_user()
        item = await create_item(owner)
        await services.relationships.invite(item, "bob@example.com")
        token = mail_token(outbox[-1])

        response = await client.post(
            "/auth/register",
            json={"name": "Bob", "password": "bobs-new-password"},
            headers=bearer(token),
        )

        assert response.status_code == 200
        assert "access_token" in response.json()
        user = await services.users.find_by_email("bob@example.com")
        assert user.name == "Bob"
        assert user.is_registered
        assert (await login(client, "bob@example.com", "bobs-new-password")).status_code == 200

    async def test_token_spent_after_registration(self, client, services, create_user, create_item, outbox, mail_token):
        owner = await create_user()
        item = await create_item(owner)
        await services.relationships.invite(item, "bob@example.com")
        token = mail_token(outbox[-1])

        first = await client.post(
            "/auth/register", json={"name": "Bob", "password": "bobs-new-password"}, headers=bearer(token),
        )
        again = await client.post(
            "/auth/register", json={"name": "Mallory", "password": "mallorys-password"}, headers=bearer(token),
        )

        assert first.status_code == 200
        assert again.status_code == 401
        user = await services.users.find_by_email("bob@example.com")
        assert user.name == "Bob"
        assert user.verify_password("bobs-new-password")

    async def test_registered_user_cannot_register(self, client, services, create_user):
        user = await create_user()
        token = services.tokens.issue_action_token(user, "register")

        response = await client.post(
            "/auth/register", json={"name": "Eve", "password": "eves-password"}, headers=bearer(token),
        )

        assert response.status_code == 401
        assert (await services.users.get(user.id)).verify_password(PASSWORD)

    async def test_reset_token_cannot_register(self, client, services, create_user):
        user = await create_user()
        token = services.tokens.issue_action_token(user, "password-reset")

        response = await client.post(
            "/auth/register",
            json={"name": "Eve", "password": "eves-password"},
            headers=bearer(token),
        )

        assert response.status_code == 401

    async def test_validation(self, client, services, create_user):
        user = await create_user(password=None)
        token = services.tokens.issue_action_token(user, "register")

        response = await client.post(
            "/auth/register", json={"password": "short"}, headers=bearer(token),
        )

        assert response.status_code == 422
        errors = {e["path"]: e["type"] for e in response.json()["errors"]}
        assert errors["name"] == "required"
        assert "password" in errors

    async def test_token_checked_before_body(self, client):
        response = await client.post("/auth/register", json={})

        assert response.status_code == 401


# =============================================================================
# Password Reset
# =============================================================================


class TestPasswordReset:
    async def test_full_flow(self, client, services, create_user, outbox, mail_token):
        await create_user()
        old_pair = (await login(client)).json()

        response = await client.post(
            "/auth/request-password-reset", json={"email": "alice@example.com"},
        )
        assert response.status_code == 200
        assert "https://booking.test/reset-password?token=" in outbox[-1].html

        response = await client.post(
            "/auth/reset-password",
            json={"password": "a-brand-new-password"},
            headers=bearer(mail_token(outbox[-1])),
        )
        assert response.status_code == 200

        assert (await login(client)).status_code == 401
        assert (await login(client, password="a-brand-new-password")).status_code == 200
        stale = await client.post("/auth/refresh-token", headers=bearer(old_pair["refresh_token"]))
        assert stale.status_code == 401

    async def test_unknown_email_same_response(self, client, create_user, outbox):
        await create_user()

        known = await client.post("/auth/request-password-reset", json={"email": "alice@example.com"})
        unknown = await client.post("/auth/request-password-reset", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(outbox) == 1

    async def test_mail_failure_is_a_server_error(self, client, services, create_user, monkeypatch):
        await create_user()

        async def broken(*args, **kwargs):
            raise MailDeliveryError()

        monkeypatch.setattr(services.email, "send_mail", broken)

        response = await client.post(
            "/auth/request-password-reset", json={"email": "alice@example.com"},
        )

        assert response.status_code == 500
        assert response.json() == {"message": "Something went wrong"}

    async def test_register_token_cannot_reset(self, client, services, create_user):
        user = await create_user()
        token = services.tokens.issue_action_token(user, "register")

        response = await client.post(
            "/auth/reset-password", json={"password": "whatever-pass"}, headers=bearer(token),
        )

        assert response.status_code == 401


# =============================================================================
# Browser Session
# =============================================================================


class TestWebLogin:
    async def test_session_login_and_token_bridge(self, client, services, create_user):
        user = await create_user()

        response = await client.post(
            "/login", data={"email": "alice@example.com", "password": PASSWORD},
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/"

        response = await client.post("/auth/session-token")
        assert response.status_code == 200
        assert services.tokens.verify_access_token(response.json()["access_token"]).sub == user.id

    async def test_failed_login_redirects_back(self, client, create_user):
        await create_user()

        response = await client.post(
            "/login", data={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 303
        assert response.headers["location"].startswith("/login")
        assert (await client.post("/auth/session-token")).status_code == 401

    async def test_logout_clears_session(self, client, create_user):
        await create_user()
        await client.post("/login", data={"email": "alice@example.com", "password": PASSWORD})

        response = await client.post("/logout")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        assert (await client.post("/auth/session-token")).status_code == 401


@pytest.mark.parametrize("path", ["/auth/session-token", "/api/users/me", "/api/items"])
async def test_no_credentials(client, path):
    response = await client.request("GET" if path.startswith("/api") else "POST", path)

    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized"}
