"""Unit tests for user_service module."""

import pytest

from src.core.config import constants
from src.core.errors import DuplicateError, NotFoundError, TransportError, ValidationError
from src.core.passwords import is_hashed, verify_password
from src.services import user_service


@pytest.mark.unit
class TestRegisterUser:
    """Tests for register_user function."""

    async def test_register_creates_active_user(self, in_memory_gateway):
        """Test successful registration stores an active user with a hashed password."""
        user = await user_service.register_user(
            in_memory_gateway, email="new@x.com", username="  newbie  ", password="secret1"
        )

        assert user.email == "new@x.com"
        assert user.username == "newbie"
        assert user.is_active is True
        assert user.id.isdigit()
        assert user.created_at is not None

        stored = next(r for r in in_memory_gateway.records(constants.USERS_COLLECTION) if r["email"] == "new@x.com")
        assert is_hashed(stored["password"])
        assert verify_password(stored["password"], "secret1")

    async def test_register_duplicate_email(self, in_memory_gateway):
        """Test registering a taken email fails without creating a record."""
        with pytest.raises(DuplicateError, match="User with this email already exists"):
            await user_service.register_user(in_memory_gateway, email="a@x.com", username="other", password="secret1")

        assert len(in_memory_gateway.records(constants.USERS_COLLECTION)) == 1

    async def test_register_duplicate_username(self, in_memory_gateway):
        """Test registering a taken username fails."""
        with pytest.raises(DuplicateError, match="Username is already taken"):
            await user_service.register_user(in_memory_gateway, email="b@x.com", username="alice", password="secret1")

    @pytest.mark.parametrize(
        ("email", "username", "password", "message"),
        [
            ("bad-email", "newbie", "secret1", "Please enter a valid email address"),
            ("new@x.com", "ab", "secret1", "Username must be at least 3 characters long"),
            ("new@x.com", "newbie", "12345", "Password must be at least 6 characters long"),
        ],
    )
    async def test_register_validation(self, in_memory_gateway, email, username, password, message):
        """Test invalid registration input never reaches the gateway."""
        with pytest.raises(ValidationError, match=message):
            await user_service.register_user(in_memory_gateway, email=email, username=username, password=password)

        assert in_memory_gateway.calls == []

    async def test_register_gateway_failure(self, in_memory_gateway):
        """Test gateway failures propagate as TransportError."""
        in_memory_gateway.fail_verbs.add("create")

        with pytest.raises(TransportError):
            await user_service.register_user(in_memory_gateway, email="new@x.com", username="newbie", password="secret1")


@pytest.mark.unit
class TestUserLookups:
    """Tests for lookups and activation changes."""

    async def test_get_user_by_email(self, in_memory_gateway):
        """Test lookup by email returns the record or None."""
        user = await user_service.get_user_by_email(in_memory_gateway, email="a@x.com")

        assert user is not None
        assert user.id == "u1"
        assert await user_service.get_user_by_email(in_memory_gateway, email="none@x.com") is None

    async def test_get_user_by_username(self, in_memory_gateway):
        """Test lookup by username returns the record or None."""
        assert (await user_service.get_user_by_username(in_memory_gateway, username="alice")).id == "u1"
        assert await user_service.get_user_by_username(in_memory_gateway, username="bob") is None

    async def test_set_user_active(self, in_memory_gateway):
        """Test deactivating and reactivating an account."""
        user = await user_service.set_user_active(in_memory_gateway, email="a@x.com", is_active=False)
        assert user.is_active is False
        assert in_memory_gateway.records(constants.USERS_COLLECTION)[0]["isActive"] is False

        user = await user_service.set_user_active(in_memory_gateway, email="a@x.com", is_active=True)
        assert user.is_active is True

    async def test_set_user_active_unknown_email(self, in_memory_gateway):
        """Test changing activation of an unknown account fails."""
        with pytest.raises(NotFoundError, match="none@x.com"):
            await user_service.set_user_active(in_memory_gateway, email="none@x.com", is_active=False)

    async def test_list_users(self, in_memory_gateway):
        """Test listing every user."""
        users = await user_service.list_users(in_memory_gateway)

        assert [u.username for u in users] == ["alice"]

    async def test_malformed_user_record(self, in_memory_gateway):
        """Test a gateway user record that fails validation is reported as a transport failure."""
        in_memory_gateway.seed(
            constants.USERS_COLLECTION,
            [{"id": "u9", "email": "n@x.com", "username": None, "isActive": True}],
        )

        with pytest.raises(TransportError, match="malformed user record"):
            await user_service.get_user_by_email(in_memory_gateway, email="n@x.com")
        with pytest.raises(TransportError, match="malformed user record"):
            await user_service.list_users(in_memory_gateway)
