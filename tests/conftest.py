"""Shared fixtures: in-memory inspector and migration store doubles."""

import pytest

from db_table_builder.context import BuilderContext
from db_table_builder.errors import NotFoundError
from db_table_builder.schema.models import MigrationArtifact, PhysicalTable


class FakeInspector:
    """SchemaInspector over a dict of physical tables."""

    def __init__(self, tables: dict[str, PhysicalTable] | None = None):
        self.tables = dict(tables or {})
        self.describe_calls: list[str] = []

    def list_tables(self, prefix: str = "") -> set[str]:
        return {name for name in self.tables if name.startswith(prefix)}

    def table_exists(self, name: str) -> bool:
        return name in self.tables

    def describe_table(self, name: str) -> PhysicalTable:
        self.describe_calls.append(name)
        if name not in self.tables:
            raise NotFoundError(name)
        return self.tables[name]


class FakeStore:
    """MigrationStore that hands out sequential versions and keeps artifacts."""

    def __init__(self):
        self.version_requests = 0
        self.saved: list[MigrationArtifact] = []

    def next_version(self) -> str:
        self.version_requests += 1
        return f"1.0.{len(self.saved) + 1}"

    def save(self, artifact: MigrationArtifact):
        self.saved.append(artifact)
        return f"memory://{artifact.version}"


@pytest.fixture
def inspector() -> FakeInspector:
    return FakeInspector()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def context(inspector: FakeInspector, store: FakeStore) -> BuilderContext:
    return BuilderContext(lambda: inspector, store=store, namespace="acme")


@pytest.fixture
def posts_columns() -> list[dict]:
    """Column input for the acme_posts example table."""
    return [
        {
            "name": "id",
            "type": "integer",
            "primary_key": True,
            "auto_increment": True,
            "unsigned": True,
        },
        {"name": "title", "type": "string", "length": 191, "allow_null": False},
    ]
