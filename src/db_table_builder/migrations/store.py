"""Migration persistence.

``MigrationStore`` is the interface ``TableModel`` uses to obtain version
tokens and to persist generated migrations.  ``DirectoryMigrationStore``
keeps one Python module per migration in a directory, indexed by a
``versions.json`` file:

    {
      "1.0.1": {"description": "Created table acme_posts",
                "file": "builder_table_create_acme_posts.py",
                "table": "acme_posts"}
    }

Versions are ``major.minor.patch`` tokens; each new migration increments
the patch number of the highest recorded version.

Usage:
    store = DirectoryMigrationStore("migrations")
    version = store.next_version()     # '1.0.1' for an empty directory
    path = store.save(artifact)
"""

import json
import logging
import re
from pathlib import Path
from typing import Protocol

from db_table_builder.schema.models import MigrationArtifact

logger = logging.getLogger(__name__)

INDEX_FILE = "versions.json"
INITIAL_VERSION = "1.0.1"
_VERSION = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class MigrationStore(Protocol):
    """Versioning and persistence for generated migrations."""

    def next_version(self) -> str:
        """Return the next unused version token."""
        ...

    def save(self, artifact: MigrationArtifact) -> Path:
        """Persist ``artifact`` and return where it was written."""
        ...


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse a ``major.minor.patch`` version token.

    Raises:
        ValueError: If the token is malformed.
    """
    match = _VERSION.match(version.strip())
    if not match:
        raise ValueError(f"Invalid migration version: {version!r}")
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


class DirectoryMigrationStore:
    """Stores migrations as Python modules in a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    @property
    def index_path(self) -> Path:
        return self.directory / INDEX_FILE

    def versions(self) -> dict[str, dict[str, str]]:
        """Return the version index (empty when nothing was saved yet)."""
        if not self.index_path.exists():
            return {}
        data = json.loads(self.index_path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"Malformed migration index: {self.index_path}")
        return data

    def next_version(self) -> str:
        versions = self.versions()
        if not versions:
            return INITIAL_VERSION
        major, minor, patch = max(parse_version(v) for v in versions)
        return f"{major}.{minor}.{patch + 1}"

    def save(self, artifact: MigrationArtifact) -> Path:
        """Write the migration module and record it in the index.

        Raises:
            FileExistsError: If the artifact's version is already recorded.
        """
        parse_version(artifact.version)
        versions = self.versions()
        if artifact.version in versions:
            raise FileExistsError(f"Migration version {artifact.version} already exists")

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._free_path(artifact)
        path.write_text(artifact.code)

        versions[artifact.version] = {
            "description": artifact.description,
            "file": path.name,
            "table": artifact.table,
        }
        ordered = dict(sorted(versions.items(), key=lambda item: parse_version(item[0])))
        self.index_path.write_text(json.dumps(ordered, indent=2) + "\n")

        logger.info("Saved migration %s (%s) to %s", artifact.version, artifact.description, path)
        return path

    def _free_path(self, artifact: MigrationArtifact) -> Path:
        action = "create" if artifact.created else "update"
        stem = f"builder_table_{action}_{artifact.table}"
        path = self.directory / f"{stem}.py"
        counter = 2
        while path.exists():
            path = self.directory / f"{stem}_{counter}.py"
            counter += 1
        return path
