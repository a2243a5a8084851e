"""Tests for migration code generation.

Generated modules are checked by exact text for the common cases and
parsed with ``ast`` to make sure every variant is valid Python.
"""

import ast
import textwrap

from db_table_builder.schema.builder import SchemaBuilder
from db_table_builder.schema.codegen import NO_CHANGES, MigrationCode, NoChanges, generate
from db_table_builder.schema.differ import AddColumn, CreateTable

builder = SchemaBuilder()

ID = {"name": "id", "type": "integer", "primary_key": True, "auto_increment": True, "unsigned": True}
TITLE = {"name": "title", "type": "string", "length": 191}


def _build(*columns: dict):
    return builder.build("acme_posts", columns)


def _function_calls(source: str, function: str) -> list[str]:
    """Names of the op.* calls made in a generated function, in order."""
    tree = ast.parse(source)
    (func,) = [n for n in tree.body if isinstance(n, ast.FunctionDef) and n.name == function]
    return [
        stmt.value.func.attr
        for stmt in func.body
        if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Call)
    ]


class TestCreateTable:
    def test_exact_output(self, posts_columns) -> None:
        code = generate(builder.build("acme_posts", posts_columns), None)

        assert code.render("Created table acme_posts") == textwrap.dedent(
            '''\
            """Created table acme_posts"""

            import sqlalchemy as sa
            from alembic import op
            from sqlalchemy.dialects import mysql


            def upgrade():
                op.create_table(
                    "acme_posts",
                    sa.Column("id", sa.Integer().with_variant(mysql.INTEGER(unsigned=True), "mysql"), autoincrement=True, nullable=False),
                    sa.Column("title", sa.String(length=191), nullable=False),
                    sa.PrimaryKeyConstraint("id"),
                )


            def downgrade():
                op.drop_table("acme_posts")
            '''
        )

    def test_instructions_exposed(self, posts_columns) -> None:
        code = generate(builder.build("acme_posts", posts_columns), None)
        (instruction,) = code.instructions
        assert isinstance(instruction, CreateTable)
        assert [c.name for c in instruction.columns] == ["id", "title"]

    def test_no_mysql_import_without_unsigned(self) -> None:
        code = generate(_build({"name": "body", "type": "text", "allow_null": True}), None)
        assert "mysql" not in code.render()
        assert 'sa.Column("body", sa.Text(), nullable=True)' in code.source

    def test_type_rendering(self) -> None:
        code = generate(
            _build(
                {"name": "id", "type": "bigInteger", "primary_key": True},
                {"name": "price", "type": "decimal"},
                {"name": "ratio", "type": "double"},
                {"name": "status", "type": "string", "default": "draft"},
                {"name": "active", "type": "boolean", "default": True},
                {"name": "stamp", "type": "timestamp", "allow_null": True},
            ),
            None,
        )
        source = code.render()
        assert 'sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False)' in source
        assert 'sa.Column("price", sa.Numeric(precision=8, scale=2), nullable=False)' in source
        assert 'sa.Column("ratio", sa.Double(), nullable=False)' in source
        assert (
            'sa.Column("status", sa.String(length=255), nullable=False, server_default="draft")'
            in source
        )
        assert 'server_default="1"' in source
        assert 'sa.Column("stamp", sa.TIMESTAMP(timezone=True), nullable=True)' in source

    def test_default_quotes_escaped(self) -> None:
        code = generate(_build({"name": "label", "type": "string", "default": 'say "hi"'}), None)
        ast.parse(code.render())
        assert r'server_default="say \"hi\""' in code.render()

    def test_empty_string_default(self) -> None:
        code = generate(_build({"name": "note", "type": "text", "default": ""}), None)
        assert 'sa.Column("note", sa.Text(), nullable=False, server_default="")' in code.source


class TestAlterTable:
    def test_add_column(self) -> None:
        code = generate(_build(ID, TITLE), _build(ID))
        assert [type(i) for i in code.instructions] == [AddColumn]
        assert code.upgrade == (
            "op.add_column(",
            '    "acme_posts",',
            '    sa.Column("title", sa.String(length=191), nullable=False),',
            ")",
        )
        assert code.downgrade == ('op.drop_column("acme_posts", "title")',)

    def test_modify_column_and_revert(self) -> None:
        code = generate(_build(ID, TITLE), _build(ID, {**TITLE, "length": 100}))
        assert code.upgrade == (
            "op.alter_column(",
            '    "acme_posts",',
            '    "title",',
            "    existing_type=sa.String(length=100),",
            "    type_=sa.String(length=191),",
            "    existing_nullable=False,",
            ")",
        )
        assert code.downgrade == (
            "op.alter_column(",
            '    "acme_posts",',
            '    "title",',
            "    existing_type=sa.String(length=191),",
            "    type_=sa.String(length=100),",
            "    existing_nullable=False,",
            ")",
        )

    def test_rename_column(self) -> None:
        code = generate(
            _build(ID, {**TITLE, "name": "headline", "id": "title"}), _build(ID, TITLE)
        )
        assert '    new_column_name="headline",' in code.upgrade
        assert '    "title",' in code.upgrade
        assert '    new_column_name="title",' in code.downgrade
        assert '    "headline",' in code.downgrade

    def test_nullability_and_default_change(self) -> None:
        code = generate(
            _build(ID, {**TITLE, "allow_null": True, "default": "untitled"}),
            _build(ID, TITLE),
        )
        assert "    nullable=True," in code.upgrade
        assert '    server_default="untitled",' in code.upgrade
        assert "    type_=" not in "\n".join(code.upgrade)
        assert "    nullable=False," in code.downgrade
        assert "    server_default=None," in code.downgrade

    def test_downgrade_reverses_order(self) -> None:
        target = _build(
            {"name": "id", "type": "integer"},
            {"name": "uuid", "type": "string", "length": 36, "primary_key": True},
            TITLE,
        )
        existing = _build(
            {"name": "id", "type": "integer", "primary_key": True},
            {"name": "legacy", "type": "text"},
            {**TITLE, "length": 100},
        )
        source = generate(target, existing).render("Updated table acme_posts")

        assert _function_calls(source, "upgrade") == [
            "drop_constraint",
            "add_column",
            "alter_column",
            "drop_column",
            "create_primary_key",
        ]
        assert _function_calls(source, "downgrade") == [
            "drop_constraint",
            "add_column",
            "alter_column",
            "drop_column",
            "create_primary_key",
        ]
        assert 'op.drop_constraint("acme_posts_pkey", "acme_posts", type_="primary")' in source
        assert 'op.create_primary_key("acme_posts_pkey", "acme_posts", ["uuid"])' in source
        assert 'op.create_primary_key("acme_posts_pkey", "acme_posts", ["id"])' in source


class TestNoChanges:
    def test_identical_tables(self, posts_columns) -> None:
        target = builder.build("acme_posts", posts_columns)
        assert generate(target, target) is NO_CHANGES

    def test_singleton_and_falsy(self) -> None:
        assert NoChanges() is NO_CHANGES
        assert not NO_CHANGES
        assert repr(NO_CHANGES) == "NO_CHANGES"


class TestRendering:
    def test_deterministic(self, posts_columns) -> None:
        target = builder.build("acme_posts", posts_columns)
        existing = _build(ID, {"name": "body", "type": "text"})
        first = generate(target, existing).render("Updated table acme_posts")
        second = generate(target, existing).render("Updated table acme_posts")
        assert first == second

    def test_source_has_no_docstring(self, posts_columns) -> None:
        code = generate(builder.build("acme_posts", posts_columns), None)
        assert isinstance(code, MigrationCode)
        assert code.source.startswith("import sqlalchemy as sa\n")
        assert str(code) == code.source
        ast.parse(code.source)
