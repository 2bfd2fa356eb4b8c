"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("clusterideas", description="Database name")
    user: str = Field("clusterideas", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(
        "CLUSTERIDEAS_DB_PASSWORD", description="Environment variable for password"
    )


class DisplayConfig(BaseModel):
    """Item list display settings."""

    preview_separator: str = Field(" • ", description="Joins preview values")
    preview_placeholder: str = Field("No fields", description="Preview when no value is stored")
    preview_limit: int = Field(2, description="Values shown in a preview", ge=1, le=10)


class ConfigModel(BaseModel):
    """Main configuration model."""

    log_level: str = Field("WARNING", description="Logging level")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level
