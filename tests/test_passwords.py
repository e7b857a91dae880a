"""
Tests for password hashing and the user credential methods.
"""

import pytest

from private_booking.core.errors import ValidationError
from private_booking.core.models import User
from private_booking.core.passwords import hash_password, verify_password


class TestHashing:
    def test_round_trip(self):
        hashed = hash_password("hunter2-hunter2")

        assert hashed != "hunter2-hunter2"
        assert hashed.startswith("$2b$10$")
        assert verify_password("hunter2-hunter2", hashed)
        assert not verify_password("hunter2-hunter2x", hashed)

    def test_salted(self):
        assert hash_password("same-password") != hash_password("same-password")

    def test_cost_factor_floor(self):
        with pytest.raises(ValueError):
            hash_password("whatever-pass", rounds=4)

    def test_too_long(self):
        with pytest.raises(ValueError):
            hash_password("x" * 73)

    def test_no_hash_never_matches(self):
        assert not verify_password("anything", None)
        assert not verify_password("anything", "")

    def test_malformed_hash(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestUserCredentials:
    def test_set_and_verify(self):
        user = User(email="bob@example.com")
        assert not user.is_registered

        user.set_password("a-long-password")

        assert user.is_registered
        assert user.password_hash != "a-long-password"
        assert user.verify_password("a-long-password")
        assert not user.verify_password("a-long-passwordx")

    def test_unregistered_user_cannot_verify(self):
        assert not User(email="bob@example.com").verify_password("")

    def test_overlong_password_is_a_validation_error(self):
        user = User(email="bob@example.com")

        with pytest.raises(ValidationError) as exc:
            user.set_password("é" * 40)

        assert exc.value.errors[0].path == "password"
        assert user.password_hash is None
