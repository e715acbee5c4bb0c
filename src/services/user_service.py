"""User service for registration and account lookups."""

import logging
from datetime import UTC, datetime
from typing import Any

import pydantic

from src.core.config import constants
from src.core.errors import DuplicateError, NotFoundError, TransportError, ValidationError
from src.core.gateway import DataGateway
from src.core.logging import span
from src.core.passwords import hash_password
from src.domain.create_models import UserCreate
from src.domain.update_models import UserActiveUpdate
from src.domain.user import UserRecord


logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _parse_user(record: dict[str, Any]) -> UserRecord:
    try:
        return UserRecord.model_validate(record)
    except pydantic.ValidationError as e:
        msg = f"Gateway returned a malformed user record: {e.errors()[0]['msg']}"
        raise TransportError(msg) from e


_last_user_id = 0


def _generate_user_id() -> str:
    """Client-side user id: millisecond timestamp, bumped to stay unique within this process.

    Registrations from separate processes in the same millisecond can still collide.
    """
    global _last_user_id  # noqa: PLW0603
    candidate = int(datetime.now(UTC).timestamp() * 1000)
    _last_user_id = max(candidate, _last_user_id + 1)
    return str(_last_user_id)


async def get_user_by_email(gateway: DataGateway, *, email: str) -> UserRecord | None:
    """Get user by email.

    Args:
        gateway: Remote data gateway
        email: Login email

    Returns:
        First matching user record or None if not found

    Raises:
        TransportError: If the gateway request fails or returns a malformed record
    """
    records = await gateway.list_records(collection=constants.USERS_COLLECTION, filters={"email": email})
    return _parse_user(records[0]) if records else None


async def get_user_by_username(gateway: DataGateway, *, username: str) -> UserRecord | None:
    """Get user by username, or None if not found."""
    records = await gateway.list_records(collection=constants.USERS_COLLECTION, filters={"username": username})
    return _parse_user(records[0]) if records else None


async def register_user(gateway: DataGateway, *, email: str, username: str, password: str) -> UserRecord:
    """Register a new, active user account.

    Email and username must both be unused. The password is stored as a salted hash.

    Args:
        gateway: Remote data gateway
        email: Login email
        username: Display username (at least 3 characters)
        password: Password (at least 6 characters)

    Returns:
        Created user record

    Raises:
        ValidationError: If any field fails local validation
        DuplicateError: If the email or username is already taken
        TransportError: If the gateway request fails
    """
    with span("user_service.register_user"):
        try:
            form = UserCreate(email=email, username=username, password=password)
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        # Guard: email must be unused
        if await get_user_by_email(gateway, email=form.email):
            logger.warning("Registration rejected: email taken", extra={"operation": "register"})
            raise DuplicateError("User with this email already exists")

        # Guard: username must be unused
        if await get_user_by_username(gateway, username=form.username):
            logger.warning("Registration rejected: username taken", extra={"operation": "register"})
            raise DuplicateError("Username is already taken")

        user_data: dict[str, Any] = {
            "id": _generate_user_id(),
            "email": form.email,
            "username": form.username,
            "password": hash_password(form.password),
            "createdAt": _now_iso(),
            "isActive": True,
        }

        record = await gateway.create_record(collection=constants.USERS_COLLECTION, data=user_data)
        logger.info("Registered user %s", form.username, extra={"user_id": record.get("id")})

        return _parse_user(record)


async def set_user_active(gateway: DataGateway, *, email: str, is_active: bool) -> UserRecord:
    """Activate or deactivate the account registered under an email.

    Raises:
        NotFoundError: If no user has this email
        TransportError: If the gateway request fails
    """
    with span("user_service.set_user_active"):
        user = await get_user_by_email(gateway, email=email)
        if user is None:
            raise NotFoundError(f"User with email {email} not found")

        updated = await gateway.update_record(
            collection=constants.USERS_COLLECTION,
            record_id=user.id,
            data=UserActiveUpdate(is_active=is_active).model_dump(by_alias=True),
        )
        logger.info("Set user %s active=%s", user.id, is_active)

        return _parse_user(updated)


async def list_users(gateway: DataGateway) -> list[UserRecord]:
    """List every registered user."""
    records = await gateway.list_records(collection=constants.USERS_COLLECTION)
    return [_parse_user(record) for record in records]
