"""Task board: the UI-facing facade over the session gate, task store, filters and inline edit."""

import logging
from collections.abc import Awaitable
from datetime import date
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from src.core.errors import (
    DeactivatedError,
    ErrorResponse,
    NotAuthenticatedError,
    NotFoundError,
    TaskTrackerError,
    TransportError,
    ValidationError,
    classify_error_with_response,
)
from src.core.gateway import DataGateway
from src.core.session_storage import SessionStorage
from src.domain.task import Task, TaskImportance, TaskStatus
from src.domain.user import Principal
from src.services import user_service
from src.services.edit_session import EditDraft, EditSession
from src.services.session_gate import AuthOutcome, SessionGate
from src.services.task_filter import (
    ALL,
    ImportanceFilter,
    StatusFilter,
    TaskFilter,
    parse_importance_filter,
    parse_status_filter,
    project,
)
from src.services.task_store import TaskStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

# User-facing messages
MSG_LOGIN_SUCCESS = "Login successful!"
MSG_LOGOUT = "You have been signed out."
MSG_REGISTERED = "Registration successful! Please sign in."
MSG_TASK_CREATED = "Task created successfully!"
MSG_TASK_UPDATED = "Task updated successfully!"
MSG_TASK_DELETED = "Task deleted successfully!"

AUTH_FAILURE_MESSAGES: dict[AuthOutcome, str] = {
    AuthOutcome.NOT_FOUND: "User not found. Please check your email or sign up.",
    AuthOutcome.DEACTIVATED: "Account is deactivated. Please contact support.",
    AuthOutcome.WRONG_PASSWORD: "Invalid password. Please try again.",
}

AUTH_FAILURE_ERRORS: dict[AuthOutcome, type[TaskTrackerError]] = {
    AuthOutcome.NOT_FOUND: NotFoundError,
    AuthOutcome.DEACTIVATED: DeactivatedError,
    AuthOutcome.WRONG_PASSWORD: ValidationError,
}


class BoardResult(BaseModel):
    """Outcome of a board action, ready to be shown to the user."""

    ok: bool
    message: str | None = None
    error: ErrorResponse | None = None
    auth_outcome: AuthOutcome | None = Field(default=None, description="Set by login attempts")


class TaskBoard:
    """Wires the core components together for one UI session.

    Every action is recovered at its own boundary: failures come back as a
    BoardResult carrying an ErrorResponse, never as an exception. A new TaskStore
    is opened for each signed-in principal and closed on logout, so responses that
    arrive after logout are ignored.
    """

    def __init__(self, *, gateway: DataGateway, storage: SessionStorage) -> None:
        self._gateway = gateway
        self.gate = SessionGate(gateway=gateway, storage=storage)
        self.store: TaskStore | None = None
        self.edit: EditSession | None = None
        self.filter = TaskFilter()

    @property
    def principal(self) -> Principal | None:
        return self.gate.principal

    @property
    def tasks(self) -> list[Task]:
        return self.store.tasks if self.store else []

    @property
    def visible_tasks(self) -> list[Task]:
        """Tasks matching the current filters, recomputed on every read."""
        return project(self.tasks, self.filter.status, self.filter.importance)

    async def start(self) -> BoardResult:
        """Restore a persisted session and, if one is found, load its tasks."""
        try:
            principal = await self.gate.restore()
        except Exception as e:
            return self._failure(e, "Could not restore your session.")
        if principal is None:
            return BoardResult(ok=True)
        return await self._open_store()

    async def login(self, email: str, password: str) -> BoardResult:
        """Authenticate, then load the principal's tasks."""
        try:
            outcome = await self.gate.authenticate(email, password)
        except Exception as e:
            return self._failure(e, "Login failed. Please try again.")

        if outcome != AuthOutcome.SUCCESS:
            error = AUTH_FAILURE_ERRORS[outcome](AUTH_FAILURE_MESSAGES[outcome])
            return BoardResult(
                ok=False,
                message=AUTH_FAILURE_MESSAGES[outcome],
                error=classify_error_with_response(error),
                auth_outcome=outcome,
            )

        result = await self._open_store()
        result.auth_outcome = outcome
        if result.ok:
            result.message = MSG_LOGIN_SUCCESS
        return result

    async def register(self, email: str, username: str, password: str) -> BoardResult:
        """Create a new account; the user signs in separately afterwards."""
        return await self._run(
            user_service.register_user(self._gateway, email=email, username=username, password=password),
            success_message=MSG_REGISTERED,
            failure_message="Registration failed. Please try again.",
        )

    async def logout(self) -> BoardResult:
        """Sign out and discard the task store and any draft."""
        self._close_store()
        self.filter = TaskFilter()
        try:
            await self.gate.logout()
        except Exception as e:
            return self._failure(e, "Signed out, but the saved session could not be cleared.")
        return BoardResult(ok=True, message=MSG_LOGOUT)

    async def refresh(self) -> BoardResult:
        """Reload the task collection from the gateway."""
        try:
            store = self._require_store()
            owner_id = self.gate.require_owner_id()
        except Exception as e:
            return self._failure(e, "Failed to fetch tasks. Please try again.")
        return await self._run(store.load(owner_id), failure_message="Failed to fetch tasks. Please try again.")

    async def create_task(
        self,
        title: str,
        status: TaskStatus | str = TaskStatus.PENDING,
        importance: TaskImportance | str = TaskImportance.MEDIUM,
        due_date: date | str | None = None,
    ) -> BoardResult:
        """Create a task from form input."""
        fields: dict[str, Any] = {"title": title, "status": status, "importance": importance, "due_date": due_date}
        try:
            store = self._require_store()
        except Exception as e:
            return self._failure(e, "Failed to create task. Please try again.")
        return await self._run(
            store.create(fields),
            success_message=MSG_TASK_CREATED,
            failure_message="Failed to create task. Please try again.",
        )

    async def delete_task(self, task_id: str) -> BoardResult:
        """Delete a task; an inline edit of the same task is discarded."""
        try:
            store = self._require_store()
        except Exception as e:
            return self._failure(e, "Failed to delete task. Please try again.")
        return await self._run(
            store.delete(task_id),
            success_message=MSG_TASK_DELETED,
            failure_message="Failed to delete task. Please try again.",
        )

    def begin_edit(self, task_id: str) -> BoardResult:
        try:
            self._require_edit().begin(task_id)
        except Exception as e:
            return self._failure(e, "Could not start editing.")
        return BoardResult(ok=True)

    def update_draft(self, **changes: Any) -> BoardResult:
        try:
            self._require_edit().update_draft(**changes)
        except Exception as e:
            return self._failure(e, "Could not change the draft.")
        return BoardResult(ok=True)

    def cancel_edit(self) -> BoardResult:
        if self.edit is not None:
            self.edit.cancel()
        return BoardResult(ok=True)

    @property
    def draft(self) -> EditDraft | None:
        return self.edit.draft if self.edit else None

    async def commit_edit(self) -> BoardResult:
        """Save the inline edit; on failure the draft stays open for retry or cancel."""
        try:
            edit = self._require_edit()
        except Exception as e:
            return self._failure(e, "Failed to update task. Please try again.")
        return await self._run(
            edit.commit(),
            success_message=MSG_TASK_UPDATED,
            failure_message="Failed to update task. Please try again.",
        )

    def set_filters(
        self,
        *,
        status: StatusFilter | str | None = None,
        importance: ImportanceFilter | str | None = None,
    ) -> BoardResult:
        """Change one or both filters; ``"All"`` clears an axis."""
        try:
            new_status = parse_status_filter(status) if status is not None else self.filter.status
            new_importance = parse_importance_filter(importance) if importance is not None else self.filter.importance
        except Exception as e:
            return self._failure(e, "Invalid filter.")
        self.filter = TaskFilter(status=new_status, importance=new_importance)
        return BoardResult(ok=True)

    def clear_filters(self) -> BoardResult:
        return self.set_filters(status=ALL, importance=ALL)

    async def _open_store(self) -> BoardResult:
        self._close_store()
        store = TaskStore(gateway=self._gateway, session_gate=self.gate)
        self.store = store
        self.edit = EditSession(store)
        try:
            owner_id = self.gate.require_owner_id()
        except Exception as e:
            return self._failure(e, "Failed to fetch tasks. Please try again.")
        return await self._run(store.load(owner_id), failure_message="Failed to fetch tasks. Please try again.")

    def _close_store(self) -> None:
        if self.edit is not None:
            self.edit.cancel()
        if self.store is not None:
            self.store.close()
        self.store = None
        self.edit = None

    def _require_store(self) -> TaskStore:
        if self.store is None:
            raise NotAuthenticatedError("Sign in to manage tasks")
        return self.store

    def _require_edit(self) -> EditSession:
        if self.edit is None:
            raise NotAuthenticatedError("Sign in to manage tasks")
        return self.edit

    async def _run(
        self,
        operation: Awaitable[T],
        *,
        success_message: str | None = None,
        failure_message: str,
    ) -> BoardResult:
        try:
            await operation
        except Exception as e:
            return self._failure(e, failure_message)
        return BoardResult(ok=True, message=success_message)

    @staticmethod
    def _failure(error: Exception, failure_message: str) -> BoardResult:
        """Turn a failure into a result; must be called from the handling ``except`` block."""
        response = classify_error_with_response(error)
        message = failure_message if isinstance(error, TransportError) else response.message
        if isinstance(error, TaskTrackerError):
            logger.info("Board action failed", extra={"code": response.code, "error": str(error)})
        else:
            logger.exception("Unexpected failure in board action", extra={"code": response.code})
        return BoardResult(ok=False, message=message, error=response)
