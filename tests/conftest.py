"""
Shared fixtures.

Every test gets its own settings, in-memory store, recording email
service and app, so nothing leaks between tests.
"""

import re

import pytest
from httpx import ASGITransport, AsyncClient

from private_booking.api.app import create_app
from private_booking.config import Settings
from private_booking.core.models import User
from private_booking.services import build_services

TOKEN_IN_LINK = re.compile(r"token=([\w\-\.]+)")

PASSWORD = "correct-horse-battery"


# =============================================================================
# Settings & Services
# =============================================================================


@pytest.fixture
def settings():
    """Isolated settings: no .env, no SES, no Sentry, no bootstrap admin."""
    return Settings(
        _env_file=None,
        environment="test",
        debug=False,
        log_level="WARNING",
        app_key="test-app-key",
        app_url="https://booking.test",
        cors_origins="http://testserver",
        admin_email="",
        admin_password="",
        mail_from_address="",
        aws_access_key_id="",
        aws_secret_access_key="",
        sentry_dsn="",
    )


@pytest.fixture
def services(settings):
    return build_services(settings)


@pytest.fixture
def outbox(services):
    """Mails handed to the email service during the test."""
    return services.email.outbox


# =============================================================================
# App & Client
# =============================================================================


@pytest.fixture
def app(settings, services):
    return create_app(settings, services)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


# =============================================================================
# Data Helpers
# =============================================================================


@pytest.fixture
def create_user(services):
    """Factory for stored users. `password=None` leaves the user unregistered."""
    async def _create(email="alice@example.com", name="Alice", password=PASSWORD, is_admin=False):
        user = User(email=email, name=name, is_admin=is_admin)
        if password is not None:
            user.set_password(password, rounds=services.settings.bcrypt_rounds)
        return await services.users.save(user)
    return _create


@pytest.fixture
def create_item(services):
    """Factory for stored items; the owner gets access like through the API."""
    async def _create(owner, name="Lake Cabin", **fields):
        item = await services.items.create(owner, name=name, **fields)
        owner.items.append(item.id)
        await services.users.save(owner)
        return item
    return _create


@pytest.fixture
def auth_headers(services):
    """Bearer headers carrying a fresh access token for `user`."""
    def _headers(user):
        return {"Authorization": f"Bearer {services.tokens.issue_access_token(user)}"}
    return _headers


@pytest.fixture
def mail_token():
    """Extracts the action token embedded in a mailed link."""
    def _token(mail) -> str:
        match = TOKEN_IN_LINK.search(mail.html)
        assert match, "no token link in mail"
        return match.group(1)
    return _token
