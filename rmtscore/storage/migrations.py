"""Schema migrations.

SQL files live in rmtscore/migrations/ as NNN_description.sql. Each file
records its own version in _schema_version and is applied once.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from pathlib import Path

from rmtscore.storage.database import Database

logger = logging.getLogger(__name__)

MIGRATION_DIR = Path(__file__).resolve().parent.parent / "migrations"
MIGRATION_PATTERN = re.compile(r"^(\d{3})_.*\.sql$")


class MigrationError(RuntimeError):
    """A migration script failed to apply."""


def discover_migrations(directory: Path = MIGRATION_DIR) -> list[tuple[int, str, str]]:
    """(version, filename, sql) for every migration file, ordered by version."""
    if not directory.exists():
        logger.warning("Migration directory not found: %s", directory)
        return []

    found = []
    for sql_file in directory.glob("*.sql"):
        match = MIGRATION_PATTERN.match(sql_file.name)
        if match is None:
            logger.debug("Ignoring non-migration file %s", sql_file.name)
            continue
        found.append((int(match.group(1)), sql_file.name, sql_file.read_text()))
    return sorted(found)


def ensure_schema(db: Database) -> int:
    """Apply pending migrations. Returns the resulting schema version."""
    current = db.schema_version()
    pending = [m for m in discover_migrations() if m[0] > current]

    for version, name, sql in pending:
        logger.info("Applying migration %s (v%d -> v%d)", name, current, version)
        try:
            db.executescript(sql)
        except sqlite3.Error as e:
            raise MigrationError(f"Migration {name} failed: {e}") from e
        current = version

    if pending:
        logger.info("Applied %d migration(s). Schema version: %d", len(pending), current)
    else:
        logger.debug("Schema up to date (version %d)", current)
    return current
