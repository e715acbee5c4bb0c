"""Unit tests for password hashing."""

import pytest

from src.core.passwords import hash_password, is_hashed, verify_password


@pytest.mark.unit
class TestPasswords:
    """Tests for hash_password and verify_password."""

    def test_hash_is_salted_bcrypt(self):
        """Test the same password hashes differently each time."""
        first = hash_password("secret1")
        second = hash_password("secret1")

        assert first != second
        assert first.startswith("$2b$04$")
        assert is_hashed(first)
        assert "secret1" not in first

    def test_verify_hashed_password(self):
        """Test hashed passwords verify only against the original."""
        stored = hash_password("secret1")

        assert verify_password(stored, "secret1")
        assert not verify_password(stored, "secret2")

    def test_long_passwords_are_not_truncated(self):
        """Test passwords differing only after 72 bytes are distinguished."""
        stored = hash_password("x" * 80 + "a")

        assert verify_password(stored, "x" * 80 + "a")
        assert not verify_password(stored, "x" * 80 + "b")

    def test_verify_legacy_plain_password(self):
        """Test records holding the plain secret are still accepted."""
        assert verify_password("right", "right")
        assert not verify_password("right", "wrong")

    @pytest.mark.parametrize("stored", [None, ""])
    def test_missing_secret_never_verifies(self, stored):
        """Test a record without a secret never verifies."""
        assert not verify_password(stored, "")
        assert not verify_password(stored, "anything")

    @pytest.mark.parametrize("stored", ["$2b$garbage", "$2b$04$tooshort"])
    def test_malformed_hash_never_verifies(self, stored):
        """Test a corrupt hash is rejected instead of raising."""
        assert not verify_password(stored, "secret1")

    def test_foreign_hash_format_is_compared_as_plain_secret(self):
        """Test a value in an unknown format only matches itself."""
        stored = "pbkdf2_sha256$0$AAAA$AAAA"

        assert not verify_password(stored, "whatever")
        assert verify_password(stored, stored)
