"""Configuration models for commentctl."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(default="", description="Database URL; COMMENTCTL_DATABASE_URL wins over it.")
    echo: bool = Field(default=False)
    pool_size: int = Field(default=5, ge=1, le=100)


class OutputConfig(BaseModel):
    """Terminal output configuration."""

    color: bool = Field(default=True)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING")


class CommentCtlConfig(BaseSettings):
    """Root configuration model for commentctl."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="COMMENTCTL_",
        env_nested_delimiter="__",
        extra="ignore",
    )
