"""Filter projection: the status/importance view over the task collection."""

from collections.abc import Iterable
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict

from src.core.errors import ValidationError
from src.domain.task import Task, TaskImportance, TaskStatus


ALL: Final = "All"

StatusFilter = TaskStatus | Literal["All"]
ImportanceFilter = TaskImportance | Literal["All"]


class TaskFilter(BaseModel):
    """Current filter selection; ``"All"`` disables an axis."""

    model_config = ConfigDict(frozen=True)

    status: StatusFilter = ALL
    importance: ImportanceFilter = ALL

    def matches(self, task: Task) -> bool:
        return (self.status == ALL or task.status == self.status) and (
            self.importance == ALL or task.importance == self.importance
        )


def project(
    tasks: Iterable[Task],
    status_filter: StatusFilter = ALL,
    importance_filter: ImportanceFilter = ALL,
) -> list[Task]:
    """Return the tasks matching both filters, in their original order."""
    selection = TaskFilter(status=status_filter, importance=importance_filter)
    return [task for task in tasks if selection.matches(task)]


def parse_status_filter(value: str) -> StatusFilter:
    """Parse ``"All"`` or a status value (e.g. ``"In Progress"``)."""
    if value == ALL:
        return ALL
    try:
        return TaskStatus(value)
    except ValueError as e:
        raise ValidationError(f"Unknown status filter: {value}", field="status") from e


def parse_importance_filter(value: str) -> ImportanceFilter:
    """Parse ``"All"`` or an importance value (e.g. ``"High"``)."""
    if value == ALL:
        return ALL
    try:
        return TaskImportance(value)
    except ValueError as e:
        raise ValidationError(f"Unknown importance filter: {value}", field="importance") from e
