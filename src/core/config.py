"""Configuration management for tasktrack."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote Data Gateway Configuration
    gateway_url: str = Field(default="http://localhost:3000", description="Base URL of the task/user REST gateway")
    gateway_timeout_seconds: float = Field(default=10.0, description="Timeout applied to every gateway request")

    # Session persistence
    session_file: str = Field(
        default=".tasktrack/session.json",
        description="Path of the file holding the persisted session entries",
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to Logfire")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required setting is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The setting value

        Raises:
            ValueError: If the setting is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_CREATED: int = 201
    HTTP_NOT_FOUND: int = 404

    # Gateway collections
    USERS_COLLECTION: str = "users"
    TASKS_COLLECTION: str = "tasks"

    # Persisted session entries
    SESSION_USER_KEY: str = "user"
    SESSION_AUTH_KEY: str = "isAuthenticated"
    SESSION_AUTH_TRUE: str = "true"

    # Registration validation
    MIN_USERNAME_LENGTH: int = 3
    MIN_PASSWORD_LENGTH: int = 6
    EMAIL_PATTERN: str = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

    # Password hashing
    BCRYPT_ROUNDS: int = 12
    BCRYPT_HASH_PREFIXES: tuple[str, ...] = ("$2a$", "$2b$", "$2y$")

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
