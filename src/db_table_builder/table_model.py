"""Table model: load, validate and generate migrations for one table.

``TableModel`` is the entry point used by callers (CLI, UI controllers).
It runs the steps strictly in order (validate, build, diff, version)
and stops at the first failing step, so nothing is versioned or persisted
for an invalid definition.

Usage:
    from db_table_builder import BuilderContext, TableModel, NO_CHANGES

    context = BuilderContext.from_url(url, store=store, namespace="acme")
    model = TableModel(context)
    if model.table_exists("acme_posts"):
        model.load("acme_posts")

    model.validate(columns, name="acme_posts")
    result = model.generate_create_or_update_migration()
    if result is not NO_CHANGES:
        model.save_migration(result)
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from db_table_builder.context import BuilderContext
from db_table_builder.errors import (
    NotFoundError,
    ReasonCode,
    ValidationError,
    ValidationIssue,
)
from db_table_builder.schema.builder import SchemaBuilder, coerce_column
from db_table_builder.schema.codegen import NO_CHANGES, NoChanges, generate
from db_table_builder.schema.models import ColumnDescriptor, MigrationArtifact, TableSchema
from db_table_builder.schema.validator import SchemaValidator, table_prefix

logger = logging.getLogger(__name__)

CREATED_DESCRIPTION = "Created table {name}"
UPDATED_DESCRIPTION = "Updated table {name}"


class TableModel:
    """Manages one table of a namespace.

    Attributes:
        name: Table name.
        columns: Current column definitions (loaded or validated).
        existing: Schema of the live table, when one was loaded.
    """

    def __init__(
        self,
        context: BuilderContext,
        namespace: str | None = None,
        validator: SchemaValidator | None = None,
        builder: SchemaBuilder | None = None,
    ):
        self.context = context
        self.namespace = context.namespace if namespace is None else namespace
        self.validator = validator or SchemaValidator()
        self.builder = builder or SchemaBuilder()
        self.name: str = ""
        self.columns: list[ColumnDescriptor] = []
        self.existing: TableSchema | None = None

    @property
    def exists(self) -> bool:
        return self.existing is not None

    def list_tables(self) -> list[str]:
        """Names of the namespace's tables, sorted."""
        return sorted(self.context.inspector.list_tables(table_prefix(self.namespace)))

    def table_exists(self, name: str) -> bool:
        return self.context.inspector.table_exists(name)

    def load(self, name: str) -> TableSchema:
        """Load an existing table from the database.

        Raises:
            NotFoundError: If the table does not exist.
        """
        inspector = self.context.inspector
        if not inspector.table_exists(name):
            raise NotFoundError(name)

        existing = self.builder.from_introspected(inspector.describe_table(name))
        self.name = name
        self.existing = existing
        self.columns = list(existing.columns)
        logger.debug("Loaded table %s with %d columns", name, len(self.columns))
        return existing

    def validate(
        self,
        columns: Iterable[ColumnDescriptor | Mapping[str, Any]] | None = None,
        namespace_prefix: str | None = None,
        *,
        name: str | None = None,
    ) -> TableSchema:
        """Validate a proposed table definition and adopt it.

        Args:
            columns: Proposed columns (default: the model's current columns).
            namespace_prefix: Namespace prefix (default: the model's).
            name: Proposed table name (default: the model's current name).

        Returns:
            The validated (not yet canonical) table definition.

        Raises:
            ConfigurationError: If the namespace prefix is empty.
            ValidationError: If any rule fails.  The model is left unchanged.
        """
        prefix = self.namespace if namespace_prefix is None else namespace_prefix
        table_name = (self.name if name is None else name).strip()
        descriptors = _coerce_columns(self.columns if columns is None else columns)

        if self.existing is not None and table_name != self.existing.name:
            raise ValidationError.single(
                "name", ReasonCode.TABLE_RENAME, existing=self.existing.name, name=table_name
            )

        table = TableSchema(name=table_name, columns=tuple(descriptors))
        self.validator.validate(table, prefix)

        self.name = table_name
        self.columns = descriptors
        return table

    def generate_create_or_update_migration(self) -> MigrationArtifact | NoChanges:
        """Generate the migration that brings the live table in line with the model.

        Returns:
            ``MigrationArtifact`` with code, version and description, or
            ``NO_CHANGES`` when the live table already matches (no version
            is requested in that case).

        Raises:
            ConfigurationError: If the namespace prefix or the migration
                store is missing.
            ValidationError: If the current definition is invalid.
        """
        self.validate()
        target = self.builder.build(self.name, self.columns)

        code = generate(target, self.existing)
        if code is NO_CHANGES:
            logger.info("Table %s is up to date, no migration generated", self.name)
            return NO_CHANGES

        template = UPDATED_DESCRIPTION if self.exists else CREATED_DESCRIPTION
        description = template.format(name=self.name)
        version = self.context.require_store().next_version()
        logger.info("Generated migration %s: %s", version, description)

        return MigrationArtifact(
            code=code.render(description),
            version=version,
            description=description,
            table=self.name,
            created=not self.exists,
        )

    def save_migration(self, artifact: MigrationArtifact) -> Path:
        """Hand a generated migration to the store."""
        return self.context.require_store().save(artifact)


def _coerce_columns(
    columns: Iterable[ColumnDescriptor | Mapping[str, Any]],
) -> list[ColumnDescriptor]:
    """Convert column input to descriptors, reporting every malformed entry.

    Raises:
        ValidationError: On field ``columns`` with reason ``malformed_column``.
    """
    descriptors: list[ColumnDescriptor] = []
    issues: list[ValidationIssue] = []
    for index, column in enumerate(columns):
        try:
            descriptors.append(coerce_column(column))
        except (PydanticValidationError, TypeError, ValueError) as e:
            issues.append(
                ValidationIssue(
                    ReasonCode.MALFORMED_COLUMN,
                    {"index": index, "detail": _describe(e)},
                    cause=e,
                )
            )
    if issues:
        raise ValidationError({"columns": issues})
    return descriptors


def _describe(error: Exception) -> str:
    if isinstance(error, PydanticValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
            for item in error.errors()
        )
    return str(error)
