"""Migration versioning and persistence.

Usage:
    from db_table_builder.migrations import DirectoryMigrationStore
"""

from db_table_builder.migrations.store import DirectoryMigrationStore, MigrationStore

__all__ = ["DirectoryMigrationStore", "MigrationStore"]
