"""Unit tests for password hashing and the password policy."""

import pytest

from iam.application.security import (
    hash_password,
    password_policy_errors,
    verify_password,
)


class TestPasswordPolicy:
    """Tests for password_policy_errors."""

    def test_accepts_strong_password(self):
        assert password_policy_errors("Passw0rd!") == []

    @pytest.mark.parametrize(
        "password, fragment",
        [
            ("Pa0!", "at least 8"),
            ("password0!", "uppercase"),
            ("PASSWORD0!", "lowercase"),
            ("Password!!", "digit"),
            ("Password00", "non-alphanumeric"),
            ("Pa0!" + "x" * 80, "at most 72"),
        ],
    )
    def test_reports_each_violation(self, password, fragment):
        errors = password_policy_errors(password)

        assert any(fragment in error for error in errors)

    def test_reports_all_violations_at_once(self):
        assert len(password_policy_errors("abc")) == 4


class TestHashing:
    """Tests for bcrypt hashing."""

    def test_hash_verifies(self):
        hashed = hash_password("Passw0rd!")

        assert hashed != "Passw0rd!"
        assert verify_password("Passw0rd!", hashed)
        assert not verify_password("Passw0rd?", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("Passw0rd!") != hash_password("Passw0rd!")

    def test_malformed_hash_does_not_verify(self):
        assert not verify_password("Passw0rd!", "not-a-bcrypt-hash")
