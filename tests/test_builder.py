"""Tests for SchemaBuilder: canonical form and physical translation."""

import pydantic
import pytest

from db_table_builder.errors import ReasonCode, TypeConstraintError
from db_table_builder.schema.builder import SchemaBuilder, coerce_column
from db_table_builder.schema.models import (
    ColumnDescriptor,
    PhysicalColumn,
    PhysicalTable,
    PrimaryKeyInfo,
)


@pytest.fixture
def builder() -> SchemaBuilder:
    return SchemaBuilder()


class TestBuild:
    def test_keeps_column_order(self, builder, posts_columns) -> None:
        table = builder.build("acme_posts", posts_columns)
        assert table.name == "acme_posts"
        assert table.column_names == ["id", "title"]

    def test_fills_default_lengths(self, builder) -> None:
        table = builder.build(
            "acme_items",
            [
                {"name": "code", "type": "string"},
                {"name": "price", "type": "decimal"},
                {"name": "body", "type": "text"},
            ],
        )
        assert [c.length for c in table.columns] == ["255", "8,2", None]

    def test_normalizes_length_text(self, builder) -> None:
        table = builder.build(
            "acme_items",
            [
                {"name": "code", "type": "string", "length": "0064"},
                {"name": "price", "type": "decimal", "length": "10 , 3"},
            ],
        )
        assert [c.length for c in table.columns] == ["64", "10,3"]

    def test_primary_key_never_nullable(self, builder) -> None:
        table = builder.build(
            "acme_items", [{"name": "id", "type": "integer", "primary_key": True, "allow_null": True}]
        )
        assert table.columns[0].allow_null is False

    def test_id_defaults_to_name(self, builder) -> None:
        table = builder.build(
            "acme_items",
            [{"name": "code", "type": "string"}, {"name": "label", "type": "text", "id": "c7"}],
        )
        assert [c.id for c in table.columns] == ["code", "c7"]

    def test_accepts_descriptors(self, builder) -> None:
        table = builder.build("acme_items", [ColumnDescriptor(name="body", type="text")])
        assert table.columns[0].id == "body"

    def test_boolean_default_canonical(self, builder) -> None:
        table = builder.build(
            "acme_items",
            [
                {"name": "active", "type": "boolean", "default": "true"},
                {"name": "hidden", "type": "boolean", "default": False},
                {"name": "label", "type": "string", "default": "true"},
            ],
        )
        assert [c.default for c in table.columns] == ["1", "0", "true"]

    def test_strips_table_name(self, builder) -> None:
        assert builder.build(" acme_items ", []).name == "acme_items"

    def test_illegal_length_raises(self, builder) -> None:
        with pytest.raises(TypeConstraintError) as exc_info:
            builder.build("acme_items", [{"name": "code", "type": "string", "length": 0}])
        assert exc_info.value.code is ReasonCode.LENGTH_OUT_OF_RANGE

    def test_unknown_type_raises(self, builder) -> None:
        with pytest.raises(TypeConstraintError) as exc_info:
            builder.build("acme_items", [{"name": "data", "type": "jsonb"}])
        assert exc_info.value.code is ReasonCode.UNKNOWN_TYPE

    def test_malformed_mapping_raises(self, builder) -> None:
        with pytest.raises(pydantic.ValidationError):
            builder.build("acme_items", [{"type": "text"}])


class TestPhysicalTranslation:
    def test_from_introspected(self, builder) -> None:
        physical = PhysicalTable(
            name="acme_posts",
            columns=[
                PhysicalColumn(
                    name="id", type_name="integer", nullable=False, autoincrement=True
                ),
                PhysicalColumn(name="title", type_name="string", length=191, nullable=False),
                PhysicalColumn(name="price", type_name="decimal", precision=10, scale=2),
                PhysicalColumn(name="status", type_name="string", default="draft"),
                PhysicalColumn(name="ratio", type_name="float"),
            ],
            primary_key=PrimaryKeyInfo(name="acme_posts_pk", columns=["id"]),
        )
        table = builder.from_introspected(physical)

        assert table.primary_key_name == "acme_posts_pk"
        assert [c.type for c in table.columns] == ["integer", "string", "decimal", "string", "double"]
        assert [c.length for c in table.columns] == [None, "191", "10,2", "255", None]
        assert [c.id for c in table.columns] == table.column_names
        assert table.columns[0].primary_key is True
        assert table.columns[0].auto_increment is True
        assert table.columns[2].allow_null is True
        assert table.columns[3].default == "draft"

    def test_unreported_flags_are_unobserved(self, builder) -> None:
        """Flags the backend does not report are read as False and marked."""
        physical = PhysicalTable(
            name="acme_posts",
            columns=[
                PhysicalColumn(
                    name="id", type_name="integer", nullable=False, autoincrement=None, unsigned=None
                ),
                PhysicalColumn(name="views", type_name="integer", unsigned=False),
            ],
        )
        id_col, views = builder.from_introspected(physical).columns

        assert (id_col.unsigned, id_col.auto_increment) == (False, False)
        assert id_col.unobserved == ("unsigned", "auto_increment")
        assert views.unobserved == ()

    @pytest.mark.parametrize("reflected", ["true", "1", "t"])
    def test_boolean_default_normalized(self, builder, reflected: str) -> None:
        physical = PhysicalTable(
            name="acme_posts",
            columns=[PhysicalColumn(name="active", type_name="boolean", default=reflected)],
        )
        assert builder.from_introspected(physical).columns[0].default == "1"

    def test_unsupported_physical_type(self, builder) -> None:
        physical = PhysicalTable(
            name="acme_posts", columns=[PhysicalColumn(name="tags", type_name="array")]
        )
        with pytest.raises(TypeConstraintError) as exc_info:
            builder.from_introspected(physical)
        assert exc_info.value.code is ReasonCode.UNSUPPORTED_PHYSICAL_TYPE

    def test_to_physical(self, builder) -> None:
        table = builder.build(
            "acme_items",
            [
                {"name": "id", "type": "bigInteger", "primary_key": True, "unsigned": True},
                {"name": "price", "type": "decimal", "length": "12,4", "default": 0},
                {"name": "created_at", "type": "dateTime", "allow_null": True},
            ],
        )
        physical = builder.to_physical(table)

        id_col, price, created_at = physical.columns
        assert (id_col.type_name, id_col.unsigned, id_col.nullable) == ("bigint", True, False)
        assert (price.type_name, price.precision, price.scale, price.default) == (
            "decimal",
            12,
            4,
            "0",
        )
        assert (created_at.type_name, created_at.nullable) == ("datetime", True)
        assert physical.primary_key.columns == ["id"]

    def test_round_trip_keeps_attributes(self, builder, posts_columns) -> None:
        """build -> to_physical -> from_introspected preserves every attribute."""
        columns = posts_columns + [
            {"name": "price", "type": "decimal", "length": "10,2", "allow_null": True},
            {"name": "status", "type": "string", "default": "draft"},
            {"name": "published", "type": "boolean", "default": False},
        ]
        table = builder.build("acme_posts", columns)
        restored = builder.from_introspected(builder.to_physical(table))

        assert [c.attributes() for c in restored.columns] == [
            c.attributes() for c in table.columns
        ]
        assert restored.same_structure(table)


class TestCoerceColumn:
    def test_descriptor_passes_through(self) -> None:
        column = ColumnDescriptor(name="body", type="text")
        assert coerce_column(column) is column

    def test_mapping_is_validated(self) -> None:
        assert coerce_column({"name": "body", "type": "text"}) == ColumnDescriptor(
            name="body", type="text"
        )
