"""Task domain models and enums."""

from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(StrEnum):
    """Task progress status."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskImportance(StrEnum):
    """Task importance level."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def _blank_to_none(value: Any) -> Any:
    """Treat an empty due date (as sent by date inputs) as no due date."""
    if value == "":
        return None
    return value


class TaskFields(BaseModel):
    """Mutable task fields accepted by create and update."""

    title: str = Field(..., description="Task title")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Progress status")
    importance: TaskImportance = Field(default=TaskImportance.MEDIUM, description="Importance level")
    due_date: date | None = Field(default=None, description="Optional due date")

    @field_validator("title")
    @classmethod
    def validate_title_present(cls, v: str) -> str:
        """Validate title is not blank."""
        v = v.strip()
        if not v:
            raise ValueError("Task title is required")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the gateway's field names."""
        return {
            "title": self.title,
            "status": self.status.value,
            "importance": self.importance.value,
            "due": self.due_date.isoformat() if self.due_date else None,
        }


class Task(BaseModel):
    """Task data transfer object, as stored by the gateway."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(..., description="Unique task ID assigned by the gateway")
    title: str = Field(..., description="Task title")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Progress status")
    importance: TaskImportance = Field(default=TaskImportance.MEDIUM, description="Importance level")
    due_date: date | None = Field(default=None, alias="due", description="Optional due date")
    owner_id: str = Field(..., alias="userId", description="ID of the owning user")
    created_at: str | None = Field(default=None, alias="createdAt", description="Creation timestamp (ISO format)")
    updated_at: str | None = Field(default=None, alias="updatedAt", description="Last update timestamp (ISO format)")

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def coerce_id_to_str(cls, v: Any) -> Any:
        """Gateways that use integer keys still yield string IDs."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def to_record(self) -> dict[str, Any]:
        """Serialize using the gateway's field names."""
        return self.model_dump(by_alias=True, mode="json")
