"""Task store: the authoritative in-memory task collection of the signed-in user."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import pydantic
from pydantic import BaseModel

from src.core.config import constants
from src.core.errors import NotAuthenticatedError, NotFoundError, TaskTrackerError, TransportError, ValidationError
from src.core.gateway import DataGateway
from src.core.logging import log_with_context, span
from src.domain.task import Task, TaskFields
from src.services.session_gate import SessionGate


logger = logging.getLogger(__name__)


class StoreEventKind(StrEnum):
    """Kinds of change applied to the collection."""

    LOADED = "loaded"
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class StoreEvent(BaseModel):
    """Notification emitted after a change has been applied in memory."""

    kind: StoreEventKind
    task_id: str | None = None


StoreListener = Callable[[StoreEvent], None]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _coerce_fields(fields: TaskFields | dict[str, Any]) -> TaskFields:
    if isinstance(fields, TaskFields):
        return fields
    try:
        return TaskFields.model_validate(fields)
    except pydantic.ValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def _parse_task(record: dict[str, Any]) -> Task:
    try:
        return Task.model_validate(record)
    except pydantic.ValidationError as e:
        msg = f"Gateway returned a malformed task: {e.errors()[0]['msg']}"
        raise TransportError(msg) from e


class TaskStore:
    """Owns the current principal's tasks and keeps them in sync with the gateway.

    Operations are serialized on a FIFO ``asyncio.Lock``: each one waits for every
    earlier-issued operation to complete, so completions are applied in issuance
    order and never overtake one another. After ``close`` any late response is
    ignored.
    """

    def __init__(self, *, gateway: DataGateway, session_gate: SessionGate) -> None:
        self._gateway = gateway
        self._gate = session_gate
        self._tasks: list[Task] = []
        self._lock = asyncio.Lock()
        self._listeners: list[StoreListener] = []
        self._closed = False
        self.last_error: TaskTrackerError | None = None

    @property
    def tasks(self) -> list[Task]:
        """Snapshot of the collection in insertion order."""
        return list(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, task_id: str) -> Task | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def close(self) -> None:
        """Discard the store; responses still in flight will not be applied."""
        self._closed = True
        self._listeners.clear()
        logger.info("Task store closed", extra={"operation": "close"})

    async def load(self, owner_id: str) -> list[Task]:
        """Replace the collection with every task the gateway holds for ``owner_id``.

        Raises:
            NotAuthenticatedError: If the gate has no principal or ``owner_id`` is not theirs
            TransportError: If the gateway request fails or returns a malformed task (collection unchanged)
        """
        async with self._lock:
            with span("task_store.load"):
                self._require_owner(owner_id)
                try:
                    records = await self._gateway.list_records(
                        collection=constants.TASKS_COLLECTION,
                        filters={"userId": owner_id},
                    )
                    tasks = [_parse_task(record) for record in records]
                except TaskTrackerError as e:
                    self._record_failure(e, "load")
                    raise

                if self._discarded("load"):
                    return []

                foreign = [task.id for task in tasks if task.owner_id != owner_id]
                if foreign:
                    logger.warning("Dropping tasks owned by another user", extra={"task_ids": foreign})

                self._tasks = [task for task in tasks if task.owner_id == owner_id]
                self.last_error = None

                log_with_context(logger, "info", "Loaded tasks", user_id=owner_id, count=len(self._tasks))
                self._emit(StoreEvent(kind=StoreEventKind.LOADED))
                return self.tasks

    async def create(self, fields: TaskFields | dict[str, Any]) -> Task | None:
        """Create a task for the current principal.

        The task is appended only once the gateway confirms it, using the gateway's
        representation (and therefore its id).

        Returns:
            The created task, or None if the store was closed before the response arrived

        Raises:
            ValidationError: If the title is blank
            NotAuthenticatedError: If no principal is signed in
            TransportError: If the gateway request fails (collection unchanged)
        """
        task_fields = _coerce_fields(fields)
        async with self._lock:
            with span("task_store.create"):
                owner_id = self._require_owner()
                now = _now_iso()
                payload = {**task_fields.to_payload(), "userId": owner_id, "createdAt": now, "updatedAt": now}

                try:
                    record = await self._gateway.create_record(collection=constants.TASKS_COLLECTION, data=payload)
                    task = _parse_task({**payload, **record})
                except TaskTrackerError as e:
                    self._record_failure(e, "create")
                    raise

                if self._discarded("create"):
                    return None

                if self.get(task.id) is not None:
                    logger.warning("Gateway returned an id already held; replacing", extra={"task_id": task.id})
                    self._tasks = [task if existing.id == task.id else existing for existing in self._tasks]
                else:
                    self._tasks.append(task)
                self.last_error = None

                log_with_context(logger, "info", "Created task", task_id=task.id, user_id=owner_id)
                self._emit(StoreEvent(kind=StoreEventKind.CREATED, task_id=task.id))
                return task

    async def update(self, task_id: str, fields: TaskFields | dict[str, Any]) -> Task | None:
        """Send the full mutable field set for ``task_id`` and merge the gateway's answer.

        Fields returned by the gateway take precedence over the locally held record.

        Returns:
            The merged task, or None if the completion was discarded (store closed)

        Raises:
            ValidationError: If the title is blank
            NotAuthenticatedError: If no principal is signed in
            NotFoundError: If the task is not in the collection
            TransportError: If the gateway request fails (record unchanged)
        """
        task_fields = _coerce_fields(fields)
        async with self._lock:
            with span("task_store.update"):
                owner_id = self._require_owner()
                current = self.get(task_id)
                if current is None:
                    raise NotFoundError(f"Task {task_id} not found")

                payload = {**task_fields.to_payload(), "updatedAt": _now_iso()}
                try:
                    response = await self._gateway.update_record(
                        collection=constants.TASKS_COLLECTION,
                        record_id=task_id,
                        data=payload,
                    )
                    merged = _parse_task({**current.to_record(), **payload, **response, "id": task_id})
                except TaskTrackerError as e:
                    self._record_failure(e, "update")
                    raise

                if self._discarded("update"):
                    return None

                if merged.owner_id != owner_id:
                    logger.warning("Gateway reassigned task to another owner; dropping", extra={"task_id": task_id})
                    self._tasks = [task for task in self._tasks if task.id != task_id]
                    self._emit(StoreEvent(kind=StoreEventKind.DELETED, task_id=task_id))
                    raise NotFoundError(f"Task {task_id} no longer belongs to the current user")

                self._tasks = [merged if task.id == task_id else task for task in self._tasks]
                self.last_error = None

                log_with_context(logger, "info", "Updated task", task_id=task_id, user_id=owner_id)
                self._emit(StoreEvent(kind=StoreEventKind.UPDATED, task_id=task_id))
                return merged

    async def delete(self, task_id: str) -> None:
        """Delete a task on the gateway, then drop it from the collection.

        Raises:
            NotAuthenticatedError: If no principal is signed in
            NotFoundError: If the task is not in the collection
            TransportError: If the gateway request fails (record retained)
        """
        async with self._lock:
            with span("task_store.delete"):
                owner_id = self._require_owner()
                if self.get(task_id) is None:
                    raise NotFoundError(f"Task {task_id} not found")

                try:
                    await self._gateway.delete_record(collection=constants.TASKS_COLLECTION, record_id=task_id)
                except TaskTrackerError as e:
                    self._record_failure(e, "delete")
                    raise

                if self._discarded("delete"):
                    return

                self._tasks = [task for task in self._tasks if task.id != task_id]
                self.last_error = None

                log_with_context(logger, "info", "Deleted task", task_id=task_id, user_id=owner_id)
                self._emit(StoreEvent(kind=StoreEventKind.DELETED, task_id=task_id))

    def _require_owner(self, owner_id: str | None = None) -> str:
        if self._closed:
            raise NotAuthenticatedError("Task store has been closed")
        current = self._gate.require_owner_id()
        if owner_id is not None and owner_id != current:
            raise NotAuthenticatedError(f"Cannot load tasks of user {owner_id} while signed in as {current}")
        return current

    def _record_failure(self, error: TaskTrackerError, operation: str) -> None:
        if self._closed:
            return
        self.last_error = error
        logger.error("Task store %s failed", operation, extra={"operation": operation, "error": str(error)})

    def _discarded(self, operation: str) -> bool:
        if self._closed:
            logger.info("Ignoring late response for closed store", extra={"operation": operation})
            return True
        return False

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
