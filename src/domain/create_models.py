"""Pydantic models for creating records through the gateway."""

import re

from pydantic import BaseModel, Field, field_validator

from src.core.config import constants


def _validate_email(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Email is required")
    if not re.match(constants.EMAIL_PATTERN, v):
        raise ValueError("Please enter a valid email address")
    return v


class Credentials(BaseModel):
    """Login form input."""

    email: str = Field(..., description="Login email")
    password: str = Field(..., description="Password as typed")

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        return _validate_email(v)

    @field_validator("password")
    @classmethod
    def validate_password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserCreate(BaseModel):
    """Registration form input."""

    email: str = Field(..., description="Login email")
    username: str = Field(..., description="Display username")
    password: str = Field(..., description="Password as typed")

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        """Validate email shape (something@domain.tld)."""
        return _validate_email(v)

    @field_validator("username")
    @classmethod
    def validate_username_length(cls, v: str) -> str:
        """Validate username is at least MIN_USERNAME_LENGTH characters."""
        v = v.strip()
        if len(v) < constants.MIN_USERNAME_LENGTH:
            raise ValueError(f"Username must be at least {constants.MIN_USERNAME_LENGTH} characters long")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password is at least MIN_PASSWORD_LENGTH characters."""
        if len(v) < constants.MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {constants.MIN_PASSWORD_LENGTH} characters long")
        return v
