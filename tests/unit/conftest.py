"""Pytest configuration and fixtures for unit tests."""

from typing import Any

import pytest

from src.core.config import constants
from src.core.session_storage import InMemorySessionStorage
from src.services.edit_session import EditSession
from src.services.session_gate import SessionGate
from src.services.task_store import TaskStore
from tests.unit.mocks import InMemoryGateway, make_task, make_user


PRINCIPAL_EMAIL = "a@x.com"
PRINCIPAL_PASSWORD = "right"


@pytest.fixture
def in_memory_gateway() -> InMemoryGateway:
    """Provides a fresh InMemoryGateway seeded with user u1."""
    gateway = InMemoryGateway()
    gateway.seed(
        constants.USERS_COLLECTION,
        [make_user(user_id="u1", email=PRINCIPAL_EMAIL, username="alice", password=PRINCIPAL_PASSWORD)],
    )
    return gateway


@pytest.fixture
def session_storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def session_gate(in_memory_gateway: InMemoryGateway, session_storage: InMemorySessionStorage) -> SessionGate:
    return SessionGate(gateway=in_memory_gateway, storage=session_storage)


@pytest.fixture
async def authenticated_gate(session_gate: SessionGate) -> SessionGate:
    """Session gate signed in as u1."""
    await session_gate.authenticate(PRINCIPAL_EMAIL, PRINCIPAL_PASSWORD)
    return session_gate


@pytest.fixture
def sample_tasks(in_memory_gateway: InMemoryGateway) -> list[dict[str, Any]]:
    """Seeds t1 and t2 for u1 plus one task owned by u2."""
    tasks = [
        make_task(task_id="t1", status="Pending", importance="High"),
        make_task(task_id="t2", status="Completed", importance="Low"),
    ]
    in_memory_gateway.seed(constants.TASKS_COLLECTION, [*tasks, make_task(task_id="x1", owner_id="u2")])
    return tasks


@pytest.fixture
async def task_store(in_memory_gateway: InMemoryGateway, authenticated_gate: SessionGate) -> TaskStore:
    return TaskStore(gateway=in_memory_gateway, session_gate=authenticated_gate)


@pytest.fixture
async def loaded_store(task_store: TaskStore, sample_tasks: list[dict[str, Any]]) -> TaskStore:
    """Task store holding t1 and t2."""
    await task_store.load("u1")
    return task_store


@pytest.fixture
def edit_session(loaded_store: TaskStore) -> EditSession:
    return EditSession(loaded_store)
