"""db-table-builder: declarative table definitions to reviewable migrations.

Validates a table definition (a name plus an ordered list of column
descriptors), compares it with the live table and emits the minimal
create-or-alter migration as Alembic-style Python source.

Usage:
    from db_table_builder import BuilderContext, TableModel, NO_CHANGES
    from db_table_builder import DirectoryMigrationStore, ValidationError
    from db_table_builder import SchemaBuilder, generate
"""

__version__ = "0.1.0"

# Errors
from db_table_builder.errors import (
    ConfigurationError,
    NotFoundError,
    ReasonCode,
    TableBuilderError,
    TypeConstraintError,
    ValidationError,
    ValidationIssue,
)

# Config
from db_table_builder.config.loader import load_db_config
from db_table_builder.config.models import BuilderSettings, DatabaseConfig, DatabaseProfile

# Context
from db_table_builder.context import BuilderContext, ProfileNotFoundError

# Schema
from db_table_builder.schema.builder import SchemaBuilder
from db_table_builder.schema.codegen import NO_CHANGES, MigrationCode, NoChanges, generate
from db_table_builder.schema.differ import diff_tables
from db_table_builder.schema.introspector import SchemaInspector, SqlAlchemySchemaInspector
from db_table_builder.schema.models import ColumnDescriptor, MigrationArtifact, TableSchema
from db_table_builder.schema.types import ColumnTypeRegistry, registry
from db_table_builder.schema.validator import SchemaValidator

# Migrations
from db_table_builder.migrations.store import DirectoryMigrationStore, MigrationStore

# Orchestrator
from db_table_builder.table_model import TableModel

__all__ = [
    # Errors
    "TableBuilderError",
    "ConfigurationError",
    "NotFoundError",
    "TypeConstraintError",
    "ValidationError",
    "ValidationIssue",
    "ReasonCode",
    # Config
    "load_db_config",
    "BuilderSettings",
    "DatabaseConfig",
    "DatabaseProfile",
    # Context
    "BuilderContext",
    "ProfileNotFoundError",
    # Schema
    "ColumnDescriptor",
    "TableSchema",
    "MigrationArtifact",
    "ColumnTypeRegistry",
    "registry",
    "SchemaValidator",
    "SchemaBuilder",
    "diff_tables",
    "generate",
    "MigrationCode",
    "NoChanges",
    "NO_CHANGES",
    "SchemaInspector",
    "SqlAlchemySchemaInspector",
    # Migrations
    "MigrationStore",
    "DirectoryMigrationStore",
    # Orchestrator
    "TableModel",
]
