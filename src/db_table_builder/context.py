"""Builder context: the explicit handle to introspection and migration storage.

A ``BuilderContext`` is created by the caller and passed to ``TableModel``.
It owns a lazily created ``SchemaInspector`` (created once, on first use,
even when several threads ask for it at the same time), the migration
store and the namespace prefix tables must use.

Supports two ways of construction:
1. From a URL: ``BuilderContext.from_url("postgresql://...", namespace="acme")``
2. From db.toml: ``BuilderContext.from_config(load_db_config(), "local")``

Usage:
    from db_table_builder.context import BuilderContext
    from db_table_builder.table_model import TableModel

    context = BuilderContext.from_url("sqlite:///app.db", namespace="acme")
    model = TableModel(context)
"""

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote

from db_table_builder.config.models import DatabaseConfig, DatabaseProfile
from db_table_builder.errors import ConfigurationError
from db_table_builder.migrations.store import DirectoryMigrationStore, MigrationStore
from db_table_builder.schema.introspector import SchemaInspector, SqlAlchemySchemaInspector

logger = logging.getLogger(__name__)

PROFILE_ENV_VAR = "DB_PROFILE"


# ============================================================================
# Profile Resolution
# ============================================================================


class ProfileNotFoundError(ConfigurationError):
    """Raised when no database profile is configured."""

    pass


def get_active_profile_name(env_prefix: str = "") -> str:
    """Get active profile name from the environment.

    Reads ``{env_prefix}DB_PROFILE`` (e.g. ``APP_DB_PROFILE`` with
    ``env_prefix="APP_"``).

    Raises:
        ProfileNotFoundError: If no profile is configured
    """
    env_var = f"{env_prefix}{PROFILE_ENV_VAR}"
    profile_name = os.environ.get(env_var)
    if profile_name:
        return profile_name

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {env_var}=<name> or pass --profile <name>."
    )


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config

    Returns:
        Connection URL with password substituted
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


# ============================================================================
# Context
# ============================================================================


class BuilderContext:
    """Caller-owned handles shared by table operations.

    Args:
        inspector_factory: Zero-argument callable creating the inspector.
            Called at most once.
        store: Migration store used for versions and persistence.
        namespace: Namespace prefix of managed tables (``"acme"`` for
            ``acme_*`` tables).
    """

    def __init__(
        self,
        inspector_factory: Callable[[], SchemaInspector],
        store: MigrationStore | None = None,
        namespace: str = "",
    ):
        self._inspector_factory = inspector_factory
        self._inspector: SchemaInspector | None = None
        self._lock = threading.Lock()
        self.store = store
        self.namespace = namespace

    @classmethod
    def from_url(
        cls,
        database_url: str,
        *,
        schema: str | None = None,
        store: MigrationStore | None = None,
        namespace: str = "",
    ) -> "BuilderContext":
        return cls(
            lambda: SqlAlchemySchemaInspector(database_url, schema=schema),
            store=store,
            namespace=namespace,
        )

    @classmethod
    def from_config(
        cls,
        config: DatabaseConfig,
        profile_name: str,
        base_dir: str | Path | None = None,
    ) -> "BuilderContext":
        """Create a context for a profile of a loaded db.toml.

        ``migrations_dir`` is resolved relative to ``base_dir`` (default:
        the current directory).

        Raises:
            ProfileNotFoundError: If the profile is not defined.
        """
        if profile_name not in config.profiles:
            available = ", ".join(config.profiles.keys()) or "none"
            raise ProfileNotFoundError(
                f"Profile '{profile_name}' not found. Available: {available}"
            )
        profile = config.profiles[profile_name]
        migrations_dir = Path(base_dir or Path.cwd()) / config.builder.migrations_dir
        return cls.from_url(
            resolve_url(profile),
            schema=profile.schema_name,
            store=DirectoryMigrationStore(migrations_dir),
            namespace=config.builder.namespace,
        )

    @property
    def inspector(self) -> SchemaInspector:
        """The schema inspector, created on first access."""
        if self._inspector is None:
            with self._lock:
                if self._inspector is None:
                    logger.debug("Creating schema inspector")
                    self._inspector = self._inspector_factory()
        return self._inspector

    def require_store(self) -> MigrationStore:
        """Return the migration store.

        Raises:
            ConfigurationError: If the context has no store.
        """
        if self.store is None:
            raise ConfigurationError("No migration store is configured for this context.")
        return self.store
