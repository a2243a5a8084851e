"""Table schema model, validation, introspection and migration generation.

Provides the column type registry (``registry``), table definition models
(``ColumnDescriptor``, ``TableSchema``), rule-based validation
(``SchemaValidator``), canonical schema building (``SchemaBuilder``),
live introspection (``SqlAlchemySchemaInspector``) and diff-based code
generation (``diff_tables``, ``generate``).

Usage:
    from db_table_builder.schema import SchemaBuilder, SchemaValidator, generate
"""

from db_table_builder.schema.builder import SchemaBuilder
from db_table_builder.schema.codegen import NO_CHANGES, MigrationCode, NoChanges, generate
from db_table_builder.schema.differ import (
    AddColumn,
    AddPrimaryKey,
    CreateTable,
    DropColumn,
    DropPrimaryKey,
    ModifyColumn,
    diff_tables,
)
from db_table_builder.schema.introspector import SchemaInspector, SqlAlchemySchemaInspector
from db_table_builder.schema.models import (
    ColumnDescriptor,
    MigrationArtifact,
    PhysicalColumn,
    PhysicalTable,
    PrimaryKeyInfo,
    TableSchema,
)
from db_table_builder.schema.types import ColumnType, ColumnTypeRegistry, LengthDomain, registry
from db_table_builder.schema.validator import SchemaValidator

__all__ = [
    "registry",
    "ColumnType",
    "ColumnTypeRegistry",
    "LengthDomain",
    "ColumnDescriptor",
    "TableSchema",
    "PhysicalColumn",
    "PhysicalTable",
    "PrimaryKeyInfo",
    "MigrationArtifact",
    "SchemaValidator",
    "SchemaBuilder",
    "SchemaInspector",
    "SqlAlchemySchemaInspector",
    "diff_tables",
    "CreateTable",
    "DropPrimaryKey",
    "AddColumn",
    "ModifyColumn",
    "DropColumn",
    "AddPrimaryKey",
    "generate",
    "MigrationCode",
    "NoChanges",
    "NO_CHANGES",
]
