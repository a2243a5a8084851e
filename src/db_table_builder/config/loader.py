"""Configuration loading from db.toml."""

import tomllib
from pathlib import Path

from db_table_builder.config.models import BuilderSettings, DatabaseConfig, DatabaseProfile

DEFAULT_CONFIG_FILE = "db.toml"


def load_db_config(config_path: str | Path | None = None) -> DatabaseConfig:
    """Load database configuration from TOML file.

    Expected layout::

        [profiles.local]
        url = "postgresql://localhost/app"
        description = "Local development"

        [builder]
        namespace = "acme"
        migrations_dir = "migrations"

    Args:
        config_path: Path to db.toml (default: ./db.toml)

    Returns:
        DatabaseConfig with all profiles and builder settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with at least one [profiles.<name>] section."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        if not isinstance(profile_data, dict) or "url" not in profile_data:
            raise ValueError(f"Profile '{name}' in {config_path.name} must define a url")
        profiles[name] = DatabaseProfile(**profile_data)

    # Parse builder settings
    builder_settings = data.get("builder", {})

    return DatabaseConfig(
        profiles=profiles,
        builder=BuilderSettings(**builder_settings),
    )
