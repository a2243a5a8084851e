"""Pydantic models for table definitions and migration artifacts.

This module contains the schema-domain models:
- Table definition models: ColumnDescriptor, TableSchema
- Introspection models: PhysicalColumn, PrimaryKeyInfo, PhysicalTable
- Output model: MigrationArtifact

Table definition models are frozen: the differ and code generator never
mutate them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Attributes compared between a target column and an existing column.
COLUMN_ATTRIBUTES: tuple[str, ...] = (
    "name",
    "type",
    "length",
    "unsigned",
    "allow_null",
    "auto_increment",
    "primary_key",
    "default",
)


# ============================================================================
# Table Definition Models
# ============================================================================


class ColumnDescriptor(BaseModel):
    """One column of a table definition.

    ``length`` holds the canonical textual form of the length parameter
    (``"191"`` for strings, ``"8,2"`` for decimals).  ``default`` holds the
    default value as text; numeric and textual defaults with the same text
    compare equal.  An empty string is a real default; only an empty
    ``length`` means "no length".

    Example:
        >>> col = ColumnDescriptor(name="title", type="string", length=191)
        >>> col.length
        '191'
        >>> col.effective_id
        'title'
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    type: str
    length: str | None = None
    unsigned: bool = False
    allow_null: bool = False
    auto_increment: bool = False
    primary_key: bool = False
    default: str | None = None
    id: str | None = None
    # Attributes the database could not report; never compared.
    unobserved: tuple[str, ...] = ()

    @field_validator("length", "default", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if isinstance(value, bool):
            value = int(value)
        if isinstance(value, (int, float)):
            value = str(value)
        return value

    @field_validator("length", mode="after")
    @classmethod
    def _strip_length(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @property
    def effective_id(self) -> str:
        """Identifier used to correlate the column across edits."""
        return self.id or self.name

    def attributes(self) -> dict[str, Any]:
        """Comparable attributes of the column (everything except ``id`` and
        ``unobserved``)."""
        return {name: getattr(self, name) for name in COLUMN_ATTRIBUTES}


class TableSchema(BaseModel):
    """A table name plus its ordered columns.

    ``primary_key_name`` is the constraint name reported by introspection;
    it only affects the code emitted to drop an existing primary key.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[ColumnDescriptor, ...] = ()
    primary_key_name: str | None = None

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def primary_key_columns(self) -> list[ColumnDescriptor]:
        return [column for column in self.columns if column.primary_key]

    def get_column(self, column_id: str) -> ColumnDescriptor | None:
        """Find a column by its identifier."""
        for column in self.columns:
            if column.effective_id == column_id:
                return column
        return None

    def same_structure(self, other: "TableSchema") -> bool:
        """True if both tables have the same name and column attributes, in order.

        Column identifiers and the primary key constraint name are ignored.
        """
        if self.name != other.name or len(self.columns) != len(other.columns):
            return False
        return all(
            mine.attributes() == theirs.attributes()
            for mine, theirs in zip(self.columns, other.columns)
        )


# ============================================================================
# Introspection Models
# ============================================================================


class PhysicalColumn(BaseModel):
    """A column as reported by database introspection.

    Example:
        >>> col = PhysicalColumn(name="id", type_name="integer")
        >>> col.nullable
        True
    """

    name: str
    type_name: str
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    nullable: bool = True
    # None when the backend does not report the attribute.
    autoincrement: bool | None = False
    unsigned: bool | None = False
    default: str | None = None


class PrimaryKeyInfo(BaseModel):
    """Primary key constraint of a physical table."""

    name: str | None = None
    columns: list[str] = Field(default_factory=list)


class PhysicalTable(BaseModel):
    """A table as reported by database introspection."""

    name: str
    columns: list[PhysicalColumn] = Field(default_factory=list)
    primary_key: PrimaryKeyInfo = Field(default_factory=PrimaryKeyInfo)


# ============================================================================
# Migration Artifact
# ============================================================================


class MigrationArtifact(BaseModel):
    """Generated migration code plus the metadata needed to persist it.

    Example:
        >>> artifact = MigrationArtifact(
        ...     code="...", version="1.0.1", description="Created table acme_posts",
        ...     table="acme_posts", created=True,
        ... )
        >>> artifact.description
        'Created table acme_posts'
    """

    code: str
    version: str
    description: str
    table: str
    created: bool = False
