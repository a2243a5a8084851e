"""Build canonical table schemas from column input and from introspection.

Pure transformation with no I/O.  ``build`` turns caller-supplied columns
into the canonical ``TableSchema`` used for diffing; ``from_introspected``
and ``to_physical`` translate between that form and the physical
representation reported by the database.

Canonical form:
- ``length`` is validated and the type's default length is filled in
  (``string`` -> ``"255"``, ``decimal`` -> ``"8,2"``).
- ``id`` defaults to the column name.
- Primary key columns are never nullable.
- Boolean defaults are ``"1"`` or ``"0"``.

Usage:
    from db_table_builder.schema.builder import SchemaBuilder

    target = SchemaBuilder().build("acme_posts", [
        {"name": "id", "type": "integer", "primary_key": True, "auto_increment": True},
        {"name": "title", "type": "string", "length": 191},
    ])
"""

from collections.abc import Iterable, Mapping
from typing import Any

from db_table_builder.schema.models import (
    ColumnDescriptor,
    PhysicalColumn,
    PhysicalTable,
    PrimaryKeyInfo,
    TableSchema,
)
from db_table_builder.schema.types import ColumnTypeRegistry, registry as default_registry


class SchemaBuilder:
    """Converts between column input, canonical schemas and physical tables."""

    def __init__(self, registry: ColumnTypeRegistry = default_registry):
        self.registry = registry

    def build(
        self, name: str, columns: Iterable[ColumnDescriptor | Mapping[str, Any]]
    ) -> TableSchema:
        """Build the canonical target schema, keeping the caller's column order.

        Raises:
            pydantic.ValidationError: If a column mapping has malformed values.
            TypeConstraintError: If a column type is unknown or its length is
                malformed or out of range.
        """
        return TableSchema(
            name=name.strip(),
            columns=tuple(self._canonical(coerce_column(column)) for column in columns),
        )

    def _canonical(self, column: ColumnDescriptor) -> ColumnDescriptor:
        return column.model_copy(
            update={
                "length": self.registry.normalize_length(column.type, column.length),
                "allow_null": column.allow_null and not column.primary_key,
                "default": self.registry.normalize_default(column.type, column.default),
                "id": column.effective_id,
            }
        )

    def from_introspected(self, table: PhysicalTable) -> TableSchema:
        """Translate an introspected table into a canonical schema.

        Every column gets ``id = name``.  Flags the backend did not report
        (``PhysicalColumn.unsigned`` or ``autoincrement`` set to ``None``) are
        read as ``False`` and listed in ``unobserved``, so the differ never
        treats them as changes.

        Raises:
            TypeConstraintError: If a column has a physical type with no
                canonical counterpart.
        """
        key_columns = set(table.primary_key.columns)
        columns = []
        for physical in table.columns:
            type_name = self.registry.from_physical(physical.type_name)
            columns.append(
                ColumnDescriptor(
                    name=physical.name,
                    type=type_name,
                    length=self.registry.length_from_physical(
                        type_name, physical.length, physical.precision, physical.scale
                    ),
                    unsigned=bool(physical.unsigned),
                    allow_null=physical.nullable,
                    auto_increment=bool(physical.autoincrement),
                    primary_key=physical.name in key_columns,
                    default=self.registry.normalize_default(type_name, physical.default),
                    id=physical.name,
                    unobserved=_unobserved(physical),
                )
            )
        return TableSchema(
            name=table.name,
            columns=tuple(columns),
            primary_key_name=table.primary_key.name,
        )

    def to_physical(self, table: TableSchema) -> PhysicalTable:
        """Translate a canonical schema into its physical representation."""
        columns = []
        for column in table.columns:
            length, precision, scale = self.registry.length_to_physical(column.type, column.length)
            columns.append(
                PhysicalColumn(
                    name=column.name,
                    type_name=self.registry.to_physical(column.type),
                    length=length,
                    precision=precision,
                    scale=scale,
                    nullable=column.allow_null,
                    autoincrement=column.auto_increment,
                    unsigned=column.unsigned,
                    default=column.default,
                )
            )
        return PhysicalTable(
            name=table.name,
            columns=columns,
            primary_key=PrimaryKeyInfo(
                name=table.primary_key_name,
                columns=[column.name for column in table.primary_key_columns],
            ),
        )


def _unobserved(physical: PhysicalColumn) -> tuple[str, ...]:
    unobserved = []
    if physical.unsigned is None:
        unobserved.append("unsigned")
    if physical.autoincrement is None:
        unobserved.append("auto_increment")
    return tuple(unobserved)


def coerce_column(column: ColumnDescriptor | Mapping[str, Any]) -> ColumnDescriptor:
    """Return ``column`` as a ``ColumnDescriptor``, validating mappings."""
    if isinstance(column, ColumnDescriptor):
        return column
    return ColumnDescriptor.model_validate(dict(column))
