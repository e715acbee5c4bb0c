"""Inline edit state machine: at most one task draft at a time."""

import logging
from datetime import date
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from src.core.errors import EditConflictError, NotFoundError, TaskTrackerError, ValidationError
from src.core.logging import span
from src.domain.task import Task, TaskFields, TaskImportance, TaskStatus
from src.services.task_store import StoreEvent, StoreEventKind, TaskStore


logger = logging.getLogger(__name__)


class EditDraft(BaseModel):
    """Scratch copy of one task's mutable fields; the title may be blank until commit."""

    model_config = ConfigDict(validate_assignment=True)

    task_id: str
    title: str
    status: TaskStatus
    importance: TaskImportance
    due_date: date | None = None

    @classmethod
    def from_task(cls, task: Task) -> "EditDraft":
        return cls(
            task_id=task.id,
            title=task.title,
            status=task.status,
            importance=task.importance,
            due_date=task.due_date,
        )

    def to_fields(self) -> TaskFields:
        """Validate the draft into the field set sent to the store."""
        try:
            return TaskFields(
                title=self.title,
                status=self.status,
                importance=self.importance,
                due_date=self.due_date,
            )
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e


class Idle(BaseModel):
    """No edit in progress."""

    model_config = ConfigDict(frozen=True)


class Editing(BaseModel):
    """An edit of ``task_id`` is in progress."""

    task_id: str
    draft: EditDraft
    error: str | None = Field(default=None, description="Last commit failure, shown next to the draft")


EditState = Idle | Editing

_EDITABLE_FIELDS = frozenset({"title", "status", "importance", "due_date"})


class EditSession:
    """Governs the single in-progress inline edit layered on a TaskStore.

    Deleting the edited task (directly, or by a reload that no longer contains it)
    forces the session back to Idle and drops the draft.
    """

    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._state: EditState = Idle()
        store.add_listener(self._on_store_event)

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def is_editing(self) -> bool:
        return isinstance(self._state, Editing)

    @property
    def draft(self) -> EditDraft | None:
        return self._state.draft if isinstance(self._state, Editing) else None

    def begin(self, task_id: str) -> EditDraft:
        """Start editing ``task_id`` with a draft copied from the current task.

        Beginning the task already being edited keeps the existing draft.

        Raises:
            EditConflictError: If a different task is being edited
            NotFoundError: If the task is not in the store
        """
        if isinstance(self._state, Editing):
            if self._state.task_id == task_id:
                return self._state.draft
            msg = f"Task {self._state.task_id} is already being edited"
            raise EditConflictError(msg)

        task = self._store.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")

        draft = EditDraft.from_task(task)
        self._state = Editing(task_id=task_id, draft=draft)
        logger.info("Edit started", extra={"task_id": task_id})
        return draft

    def update_draft(self, **changes: Any) -> EditDraft:
        """Change draft fields; the store is not touched.

        Raises:
            ValidationError: If no edit is in progress, a field is unknown, or a value has the wrong type
        """
        if not isinstance(self._state, Editing):
            raise ValidationError("No task is being edited")

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown draft field(s): {', '.join(sorted(unknown))}")

        draft = self._state.draft.model_copy()
        try:
            for name, value in changes.items():
                setattr(draft, name, None if name == "due_date" and value == "" else value)
        except pydantic.ValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        self._state = Editing(task_id=self._state.task_id, draft=draft)
        return draft

    def cancel(self) -> None:
        """Discard the draft unconditionally."""
        if isinstance(self._state, Editing):
            logger.info("Edit cancelled", extra={"task_id": self._state.task_id})
        self._state = Idle()

    async def commit(self) -> Task | None:
        """Validate the draft and apply it through the store.

        On success the session returns to Idle. On a validation or gateway failure it
        stays in Editing so the user can retry or cancel.

        Returns:
            The updated task, or None if the completion was discarded by the store

        Raises:
            ValidationError: If the title is blank or no edit is in progress
            TransportError: If the gateway request fails
        """
        if not isinstance(self._state, Editing):
            raise ValidationError("No task is being edited")

        editing = self._state
        with span("edit_session.commit"):
            try:
                fields = editing.draft.to_fields()
                updated = await self._store.update(editing.task_id, fields)
            except TaskTrackerError as e:
                if self._state is editing:
                    self._state = Editing(task_id=editing.task_id, draft=editing.draft, error=str(e))
                logger.warning("Edit commit failed", extra={"task_id": editing.task_id, "error": str(e)})
                raise

            # A delete or another transition may have ended this edit while the update was in flight.
            if self._state is editing:
                self._state = Idle()
            logger.info("Edit committed", extra={"task_id": editing.task_id})
            return updated

    def _on_store_event(self, event: StoreEvent) -> None:
        if not isinstance(self._state, Editing):
            return

        task_id = self._state.task_id
        deleted = event.kind == StoreEventKind.DELETED and event.task_id == task_id
        vanished = event.kind == StoreEventKind.LOADED and self._store.get(task_id) is None
        if deleted or vanished:
            logger.info("Edited task removed; discarding draft", extra={"task_id": task_id})
            self._state = Idle()
