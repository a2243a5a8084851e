"""Column-level diff between a target table and an existing table.

Pure logic: neither schema is mutated.  The result is an ordered list of
instructions that the code generator renders as migration source.

Instruction order is fixed so identical inputs always produce identical
output:

1. ``CreateTable`` (only when there is no existing table)
2. ``DropPrimaryKey``
3. ``AddColumn``
4. ``ModifyColumn``
5. ``DropColumn``
6. ``AddPrimaryKey``

Each group follows target column order; dropped columns follow the
existing table's order.  Columns are matched by ``effective_id`` so a
renamed column shows up as a ``name`` change on ``ModifyColumn``.

Usage:
    from db_table_builder.schema.differ import diff_tables

    instructions = diff_tables(target, existing)
    if not instructions:
        print("Nothing to do")
"""

from dataclasses import dataclass, field

from db_table_builder.schema.models import COLUMN_ATTRIBUTES, ColumnDescriptor, TableSchema

# Attributes that ModifyColumn can change; primary key membership is a
# table-level constraint handled by DropPrimaryKey/AddPrimaryKey.
MODIFIABLE_ATTRIBUTES: tuple[str, ...] = tuple(a for a in COLUMN_ATTRIBUTES if a != "primary_key")


# ------------------------------------------------------------------
# Instruction data classes
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CreateTable:
    """Create a table with all target columns.

    Example:
        CreateTable(table="acme_posts", columns=(id_col, title_col), primary_key=("id",))
    """

    table: str
    columns: tuple[ColumnDescriptor, ...]
    primary_key: tuple[str, ...] = ()


@dataclass(frozen=True)
class DropPrimaryKey:
    """Drop the existing primary key constraint."""

    table: str
    columns: tuple[str, ...]
    constraint_name: str


@dataclass(frozen=True)
class AddColumn:
    table: str
    column: ColumnDescriptor


@dataclass(frozen=True)
class ModifyColumn:
    """Change attributes of an existing column.

    Attributes:
        column: Target definition of the column.
        previous: Existing definition of the column.
        changes: Names of the attributes that differ, in
            ``MODIFIABLE_ATTRIBUTES`` order.
    """

    table: str
    column: ColumnDescriptor
    previous: ColumnDescriptor
    changes: tuple[str, ...] = field(default=())

    @property
    def renamed(self) -> bool:
        return "name" in self.changes


@dataclass(frozen=True)
class DropColumn:
    table: str
    column: ColumnDescriptor


@dataclass(frozen=True)
class AddPrimaryKey:
    table: str
    columns: tuple[str, ...]
    constraint_name: str


Instruction = CreateTable | DropPrimaryKey | AddColumn | ModifyColumn | DropColumn | AddPrimaryKey


# ------------------------------------------------------------------
# Diff
# ------------------------------------------------------------------


def default_primary_key_name(table: str) -> str:
    return f"{table}_pkey"


def changed_attributes(target: ColumnDescriptor, existing: ColumnDescriptor) -> tuple[str, ...]:
    """Names of the modifiable attributes that differ between two columns.

    Defaults are compared as text (``0`` and ``"0"`` are equal); both
    models already store defaults as strings.  Attributes the database did
    not report for ``existing`` are skipped.
    """
    return tuple(
        name
        for name in MODIFIABLE_ATTRIBUTES
        if name not in existing.unobserved and getattr(target, name) != getattr(existing, name)
    )


def diff_tables(target: TableSchema, existing: TableSchema | None) -> list[Instruction]:
    """Compute the instructions that turn ``existing`` into ``target``.

    Args:
        target: Canonical target schema (from ``SchemaBuilder.build``).
        existing: Canonical schema of the live table, or ``None`` if the
            table does not exist yet.

    Returns:
        Ordered list of instructions.  Empty when both schemas agree.

    Examples:
        >>> diff_tables(target, None)
        [CreateTable(table='acme_posts', ...)]

        >>> diff_tables(target, target)
        []
    """
    if existing is None:
        return [
            CreateTable(
                table=target.name,
                columns=target.columns,
                primary_key=tuple(c.name for c in target.primary_key_columns),
            )
        ]

    target_ids = {column.effective_id for column in target.columns}

    added: list[Instruction] = []
    modified: list[Instruction] = []
    for column in target.columns:
        previous = existing.get_column(column.effective_id)
        if previous is None:
            added.append(AddColumn(table=target.name, column=column))
            continue
        changes = changed_attributes(column, previous)
        if changes:
            modified.append(
                ModifyColumn(table=target.name, column=column, previous=previous, changes=changes)
            )

    dropped: list[Instruction] = [
        DropColumn(table=target.name, column=column)
        for column in existing.columns
        if column.effective_id not in target_ids
    ]

    drop_key: list[Instruction] = []
    add_key: list[Instruction] = []
    existing_key = existing.primary_key_columns
    target_key = target.primary_key_columns
    if [c.effective_id for c in existing_key] != [c.effective_id for c in target_key]:
        if existing_key:
            drop_key.append(
                DropPrimaryKey(
                    table=target.name,
                    columns=tuple(c.name for c in existing_key),
                    constraint_name=existing.primary_key_name
                    or default_primary_key_name(existing.name),
                )
            )
        if target_key:
            add_key.append(
                AddPrimaryKey(
                    table=target.name,
                    columns=tuple(c.name for c in target_key),
                    constraint_name=default_primary_key_name(target.name),
                )
            )

    return drop_key + added + modified + dropped + add_key
