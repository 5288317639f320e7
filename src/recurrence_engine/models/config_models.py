"""Configuration models for the recurrence engine."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["pretty", "json", "yaml", "table"] = Field(default="pretty")
    color: bool = Field(default=True)


class StorageConfig(BaseModel):
    """Storage configuration for the local SQLite database."""

    database_path: str = Field(..., description="Path to the SQLite database")
    max_write_attempts: int = Field(
        default=3,
        ge=1,
        description="Lookup-then-insert attempts before giving up on a conflict",
    )

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        """Reject empty database paths."""
        if not v or not v.strip():
            raise ValueError("database_path cannot be empty")
        return v.strip()


class AppConfig(BaseModel):
    """Main recurrence engine configuration."""

    storage: StorageConfig
    default_timezone: str = Field(default="UTC", description="IANA timezone name")
    owner_id: str | None = Field(
        default=None, description="Local owner id, created on first use"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
