"""
Configuration module for smolpaste.

Settings are read from environment variables (and an optional ``.env`` file).
``BASE_URL``, ``DATABASE_URL`` and ``SMOLPASTE_ADDR`` keep their historical
unprefixed names; everything else is prefixed with ``SMOLPASTE_``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Largest byte count the ``pastes.size`` column can represent.
MAX_PASTE_SIZE = 2**32 - 1


class Settings(BaseSettings):
    """Configuration settings for the paste service."""

    SERVICE_NAME: str = "smolpaste"
    LOG_LEVEL: str = "INFO"

    BASE_URL: str = Field(
        default="http://127.0.0.1:3001",
        validation_alias="BASE_URL",
        description="Public URL prefix returned to clients",
    )
    DATABASE_URL: str = Field(
        default="smolpaste.sqlite",
        validation_alias="DATABASE_URL",
        description="Path or sqlite URL of the metadata database",
    )
    ADDR: str = Field(
        default="127.0.0.1:3001",
        validation_alias="SMOLPASTE_ADDR",
        description="host:port the HTTP listener binds to",
    )

    PASTE_DIRECTORY: Path = Path("pastes")
    MAX_UPLOAD_BYTES: int = MAX_PASTE_SIZE
    WRITE_BUFFER_BYTES: int = 64 * 1024
    ALLOWED_EXTENSIONS: list[str] = []

    DB_POOL_SIZE: int = 5
    DB_POOL_TIMEOUT_SECONDS: float = 3.0
    BODY_TIMEOUT_SECONDS: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="SMOLPASTE_",
        populate_by_name=True,
    )

    @field_validator("MAX_UPLOAD_BYTES")
    @classmethod
    def cap_upload_size(cls, v: int) -> int:
        """Uploads can never exceed what the size column can hold."""
        if v <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be positive")
        return min(v, MAX_PASTE_SIZE)

    @field_validator("ALLOWED_EXTENSIONS")
    @classmethod
    def normalise_extensions(cls, v: list[str]) -> list[str]:
        normalised = (ext.strip().lower().lstrip(".") for ext in v)
        return [ext for ext in normalised if ext]

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """Return DATABASE_URL as an aiosqlite SQLAlchemy URL.

        Accepts a bare filesystem path (``smolpaste.sqlite``), a ``sqlite:``
        or ``sqlite://`` URL, or an already async ``sqlite+aiosqlite:`` URL.
        """
        url = self.DATABASE_URL
        if url.startswith("sqlite+aiosqlite:"):
            return url
        if url.startswith("sqlite:"):
            path = url.removeprefix("sqlite:").removeprefix("//")
        else:
            path = url
        return f"sqlite+aiosqlite:///{path}"


# Create a single instance for the application to use
settings = Settings()
