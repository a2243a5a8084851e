"""Pydantic models for database and builder configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution
    schema_name: str | None = None  # Database schema to inspect (default: connection's)


class BuilderSettings(BaseModel):
    """Table builder settings from the ``[builder]`` section of db.toml."""

    namespace: str = ""  # Table name prefix without the trailing underscore
    migrations_dir: str = "migrations"


class DatabaseConfig(BaseModel):
    """Complete configuration from db.toml."""

    profiles: dict[str, DatabaseProfile]
    builder: BuilderSettings = Field(default_factory=BuilderSettings)
