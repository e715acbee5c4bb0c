"""User domain models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Principal(BaseModel):
    """Authenticated identity of the current session."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="Login email")
    username: str = Field(..., description="Display username")
    login_time: str | None = Field(default=None, alias="loginTime", description="Login timestamp (ISO format)")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_str(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v


class UserRecord(BaseModel):
    """User record as stored by the gateway."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., description="Unique user ID")
    email: str = Field(..., description="Login email")
    username: str = Field(default="", description="Display username")
    password: str | None = Field(default=None, description="Stored secret (hashed for new accounts)")
    created_at: str | None = Field(default=None, alias="createdAt", description="Registration timestamp")
    is_active: bool = Field(default=True, alias="isActive", description="Whether the account may sign in")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_str(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v
