"""Render schema diffs as migration source code.

Generated code is an Alembic-style migration module: ``upgrade()`` applies
the instructions from ``diff_tables`` through ``op.*`` calls over
SQLAlchemy column types, and ``downgrade()`` reverts them in reverse
order.  Nothing is executed here.

Usage:
    from db_table_builder.schema.codegen import NO_CHANGES, generate

    code = generate(target, existing)
    if code is NO_CHANGES:
        print("Table is up to date")
    else:
        print(code.render("Updated table acme_posts"))
"""

import json
from dataclasses import dataclass

from db_table_builder.schema.differ import (
    AddColumn,
    AddPrimaryKey,
    CreateTable,
    DropColumn,
    DropPrimaryKey,
    Instruction,
    ModifyColumn,
    diff_tables,
)
from db_table_builder.schema.models import ColumnDescriptor, TableSchema
from db_table_builder.schema.types import ColumnTypeRegistry, registry as default_registry

INDENT = "    "

# SQLAlchemy type expressions for types without a length parameter.
# ``timestamp`` carries a time zone so PostgreSQL keeps it apart from
# ``dateTime`` (both are TIMESTAMP there).
SA_TYPES: dict[str, str] = {
    "integer": "sa.Integer()",
    "smallInteger": "sa.SmallInteger()",
    "bigInteger": "sa.BigInteger()",
    "date": "sa.Date()",
    "time": "sa.Time()",
    "dateTime": "sa.DateTime()",
    "timestamp": "sa.TIMESTAMP(timezone=True)",
    "text": "sa.Text()",
    "binary": "sa.LargeBinary()",
    "boolean": "sa.Boolean()",
    "double": "sa.Double()",
}

# MySQL types used for the unsigned variant of integer columns.
MYSQL_UNSIGNED_TYPES: dict[str, str] = {
    "integer": "mysql.INTEGER",
    "smallInteger": "mysql.SMALLINT",
    "bigInteger": "mysql.BIGINT",
}


class NoChanges:
    """Signal returned by ``generate`` when the table is already up to date."""

    _instance: "NoChanges | None" = None

    def __new__(cls) -> "NoChanges":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CHANGES"


NO_CHANGES = NoChanges()


@dataclass(frozen=True)
class MigrationCode:
    """Rendered migration source plus the instructions it was built from."""

    instructions: tuple[Instruction, ...]
    upgrade: tuple[str, ...]
    downgrade: tuple[str, ...]
    uses_mysql: bool = False

    def render(self, description: str | None = None) -> str:
        """Return the complete migration module source."""
        lines: list[str] = []
        if description:
            lines += [f'"""{description}"""', ""]
        lines.append("import sqlalchemy as sa")
        lines.append("from alembic import op")
        if self.uses_mysql:
            lines.append("from sqlalchemy.dialects import mysql")
        lines += ["", "", "def upgrade():"]
        lines += [INDENT + line if line else "" for line in self.upgrade]
        lines += ["", "", "def downgrade():"]
        lines += [INDENT + line if line else "" for line in self.downgrade]
        return "\n".join(lines) + "\n"

    @property
    def source(self) -> str:
        return self.render()

    def __str__(self) -> str:
        return self.render()


def generate(
    target: TableSchema,
    existing: TableSchema | None,
    registry: ColumnTypeRegistry = default_registry,
) -> "MigrationCode | NoChanges":
    """Generate create-or-alter migration code for ``target``.

    Args:
        target: Canonical target schema.
        existing: Canonical schema of the live table, or ``None`` when the
            table has to be created.
        registry: Column type registry used to render types.

    Returns:
        ``MigrationCode`` with the rendered instructions, or ``NO_CHANGES``
        when ``target`` and ``existing`` are structurally identical.
    """
    instructions = diff_tables(target, existing)
    if not instructions:
        return NO_CHANGES

    renderer = _Renderer(registry)
    upgrade = renderer.block(renderer.apply(i) for i in instructions)
    downgrade = renderer.block(renderer.revert(i) for i in reversed(instructions))
    return MigrationCode(
        instructions=tuple(instructions),
        upgrade=tuple(upgrade),
        downgrade=tuple(downgrade),
        uses_mysql=renderer.uses_mysql,
    )


class _Renderer:
    """Turns instructions into lines of ``op.*`` calls."""

    def __init__(self, registry: ColumnTypeRegistry):
        self.registry = registry
        self.uses_mysql = False

    def block(self, statements) -> list[str]:
        lines: list[str] = []
        for statement in statements:
            lines.extend(statement)
        return lines

    # -- instruction dispatch ------------------------------------------------

    def apply(self, instruction: Instruction) -> list[str]:
        if isinstance(instruction, CreateTable):
            args = [_literal(instruction.table)]
            args += [self.column_expr(c) for c in instruction.columns]
            if instruction.primary_key:
                args.append(f"sa.PrimaryKeyConstraint({_literals(instruction.primary_key)})")
            return _call("op.create_table", args)
        if isinstance(instruction, DropPrimaryKey):
            return self._drop_key(instruction.table, instruction.constraint_name)
        if isinstance(instruction, AddColumn):
            return self._add_column(instruction.table, instruction.column)
        if isinstance(instruction, ModifyColumn):
            return self._alter_column(
                instruction.table, instruction.column, instruction.previous, instruction.changes
            )
        if isinstance(instruction, DropColumn):
            return self._drop_column(instruction.table, instruction.column.name)
        if isinstance(instruction, AddPrimaryKey):
            return self._create_key(
                instruction.table, instruction.constraint_name, instruction.columns
            )
        raise TypeError(f"Unknown instruction: {instruction!r}")

    def revert(self, instruction: Instruction) -> list[str]:
        if isinstance(instruction, CreateTable):
            return [f"op.drop_table({_literal(instruction.table)})"]
        if isinstance(instruction, DropPrimaryKey):
            return self._create_key(
                instruction.table, instruction.constraint_name, instruction.columns
            )
        if isinstance(instruction, AddColumn):
            return self._drop_column(instruction.table, instruction.column.name)
        if isinstance(instruction, ModifyColumn):
            return self._alter_column(
                instruction.table, instruction.previous, instruction.column, instruction.changes
            )
        if isinstance(instruction, DropColumn):
            return self._add_column(instruction.table, instruction.column)
        if isinstance(instruction, AddPrimaryKey):
            return self._drop_key(instruction.table, instruction.constraint_name)
        raise TypeError(f"Unknown instruction: {instruction!r}")

    # -- statements ------------------------------------------------------------

    def _add_column(self, table: str, column: ColumnDescriptor) -> list[str]:
        return _call("op.add_column", [_literal(table), self.column_expr(column)])

    def _drop_column(self, table: str, name: str) -> list[str]:
        return [f"op.drop_column({_literal(table)}, {_literal(name)})"]

    def _drop_key(self, table: str, constraint_name: str) -> list[str]:
        return [
            f'op.drop_constraint({_literal(constraint_name)}, {_literal(table)}, type_="primary")'
        ]

    def _create_key(self, table: str, constraint_name: str, columns: tuple[str, ...]) -> list[str]:
        return [
            f"op.create_primary_key({_literal(constraint_name)}, {_literal(table)}, "
            f"[{_literals(columns)}])"
        ]

    def _alter_column(
        self,
        table: str,
        column: ColumnDescriptor,
        previous: ColumnDescriptor,
        changes: tuple[str, ...],
    ) -> list[str]:
        args = [
            _literal(table),
            _literal(previous.name),
            f"existing_type={self.type_expr(previous)}",
        ]
        if {"type", "length", "unsigned"} & set(changes):
            args.append(f"type_={self.type_expr(column)}")
        if "allow_null" in changes:
            args.append(f"nullable={column.allow_null}")
        if "default" in changes:
            args.append(f"server_default={_literal(column.default)}")
        if "auto_increment" in changes:
            args.append(f"autoincrement={column.auto_increment}")
        if "name" in changes:
            args.append(f"new_column_name={_literal(column.name)}")
        args.append(f"existing_nullable={previous.allow_null}")
        return _call("op.alter_column", args)

    # -- expressions -----------------------------------------------------------

    def type_expr(self, column: ColumnDescriptor) -> str:
        length, precision, scale = self.registry.length_to_physical(column.type, column.length)
        if column.type == "string":
            expression = f"sa.String(length={length})"
        elif column.type == "decimal":
            expression = f"sa.Numeric(precision={precision}, scale={scale})"
        else:
            expression = SA_TYPES[column.type]

        if column.unsigned and column.type in MYSQL_UNSIGNED_TYPES:
            self.uses_mysql = True
            expression = (
                f"{expression}.with_variant("
                f'{MYSQL_UNSIGNED_TYPES[column.type]}(unsigned=True), "mysql")'
            )
        return expression

    def column_expr(self, column: ColumnDescriptor) -> str:
        args = [_literal(column.name), self.type_expr(column)]
        if column.auto_increment:
            args.append("autoincrement=True")
        elif column.primary_key and self.registry.is_integer(column.type):
            args.append("autoincrement=False")
        args.append(f"nullable={column.allow_null}")
        if column.default is not None:
            args.append(f"server_default={_literal(column.default)}")
        return f"sa.Column({', '.join(args)})"


def _call(function: str, args: list[str]) -> list[str]:
    lines = [f"{function}("]
    lines += [f"{INDENT}{arg}," for arg in args]
    lines.append(")")
    return lines


def _literal(value: str | None) -> str:
    if value is None:
        return "None"
    return json.dumps(value)


def _literals(values) -> str:
    return ", ".join(_literal(v) for v in values)
