"""Session gate: the authenticated principal and its persisted session entries."""

import json
import logging
from datetime import UTC, datetime
from enum import StrEnum

import pydantic

from src.core.config import constants
from src.core.errors import NotAuthenticatedError, StorageError, ValidationError
from src.core.gateway import DataGateway
from src.core.logging import log_with_user_context, span
from src.core.passwords import verify_password
from src.core.session_storage import SessionStorage
from src.domain.create_models import Credentials
from src.domain.user import Principal
from src.services import user_service


logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Result of an authentication attempt."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    DEACTIVATED = "deactivated"
    WRONG_PASSWORD = "wrong_password"


class SessionGate:
    """Holds the current principal and decides whether task operations may run.

    The persisted session is two independent entries: ``user`` (JSON principal) and
    ``isAuthenticated`` (the string ``"true"``). It is read once by ``restore`` and
    written only by ``authenticate`` and ``logout``.
    """

    def __init__(self, *, gateway: DataGateway, storage: SessionStorage) -> None:
        self._gateway = gateway
        self._storage = storage
        self._principal: Principal | None = None

    @property
    def principal(self) -> Principal | None:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    def require_owner_id(self) -> str:
        """Return the principal's id.

        Raises:
            NotAuthenticatedError: If no principal is signed in
        """
        if self._principal is None:
            raise NotAuthenticatedError("No authenticated user; task operations are unavailable")
        return self._principal.id

    async def restore(self) -> Principal | None:
        """Restore the persisted session without contacting the gateway.

        Returns:
            The restored principal, or None if the persisted session is absent or invalid
        """
        with span("session_gate.restore"):
            try:
                stored_user = await self._storage.get(constants.SESSION_USER_KEY)
                auth_flag = await self._storage.get(constants.SESSION_AUTH_KEY)
            except StorageError as e:
                logger.warning("Could not read persisted session", extra={"error": str(e)})
                self._principal = None
                return None

            if stored_user is None and auth_flag is None:
                self._principal = None
                return None

            principal = None
            if stored_user is not None and auth_flag == constants.SESSION_AUTH_TRUE:
                try:
                    principal = Principal.model_validate(json.loads(stored_user))
                except (json.JSONDecodeError, pydantic.ValidationError):
                    principal = None

            if principal is None:
                logger.warning("Discarding invalid persisted session", extra={"operation": "restore"})
                self._principal = None
                await self._clear_storage()
                return None

            self._principal = principal
            log_with_user_context(logger, "info", "Session restored", user_id=principal.id)
            return principal

    async def authenticate(self, email: str, password: str) -> AuthOutcome:
        """Sign in by email and password.

        Looks the user up by email, checks the account is active, then verifies the
        password. Only a successful attempt changes state.

        Returns:
            AuthOutcome describing the result

        Raises:
            ValidationError: If the email is malformed or the password empty
            TransportError: If the gateway request fails
            StorageError: If the session could not be persisted
        """
        with span("session_gate.authenticate"):
            try:
                credentials = Credentials(email=email, password=password)
            except pydantic.ValidationError as e:
                raise ValidationError.from_pydantic(e) from e

            user = await user_service.get_user_by_email(self._gateway, email=credentials.email)
            if user is None:
                logger.info("Login failed: unknown email", extra={"outcome": AuthOutcome.NOT_FOUND})
                return AuthOutcome.NOT_FOUND

            if not user.is_active:
                log_with_user_context(
                    logger, "info", "Login failed: account deactivated", user_id=user.id, outcome=AuthOutcome.DEACTIVATED
                )
                return AuthOutcome.DEACTIVATED

            if not verify_password(user.password, credentials.password):
                log_with_user_context(
                    logger, "info", "Login failed: wrong password", user_id=user.id, outcome=AuthOutcome.WRONG_PASSWORD
                )
                return AuthOutcome.WRONG_PASSWORD

            principal = Principal(
                id=user.id,
                email=user.email,
                username=user.username,
                login_time=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            )
            await self._persist(principal)
            self._principal = principal

            log_with_user_context(logger, "info", "Login succeeded", user_id=principal.id)
            return AuthOutcome.SUCCESS

    async def logout(self) -> None:
        """Clear the session. In-memory state is cleared even if persistence fails."""
        with span("session_gate.logout"):
            user_id = self._principal.id if self._principal else None
            self._principal = None
            await self._clear_storage()
            log_with_user_context(logger, "info", "Logged out", user_id=user_id)

    async def _persist(self, principal: Principal) -> None:
        try:
            await self._storage.set(constants.SESSION_USER_KEY, principal.model_dump_json(by_alias=True))
            await self._storage.set(constants.SESSION_AUTH_KEY, constants.SESSION_AUTH_TRUE)
        except StorageError:
            logger.error("Failed to persist session", extra={"user_id": principal.id})
            await self._clear_storage()
            raise

    async def _clear_storage(self) -> None:
        try:
            await self._storage.delete(constants.SESSION_USER_KEY, constants.SESSION_AUTH_KEY)
        except StorageError as e:
            logger.warning("Failed to clear persisted session", extra={"error": str(e)})
