"""Update models for gateway operations."""

from pydantic import BaseModel, Field


class UserActiveUpdate(BaseModel):
    """Update payload for toggling whether an account may sign in."""

    is_active: bool = Field(..., serialization_alias="isActive")
