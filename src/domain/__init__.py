"""Domain models and DTOs."""

from src.domain.create_models import Credentials, UserCreate
from src.domain.task import Task, TaskFields, TaskImportance, TaskStatus
from src.domain.update_models import UserActiveUpdate
from src.domain.user import Principal, UserRecord


__all__ = [
    "Credentials",
    "Principal",
    "Task",
    "TaskFields",
    "TaskImportance",
    "TaskStatus",
    "UserActiveUpdate",
    "UserCreate",
    "UserRecord",
]
