"""
PrivFinOS - Database Migration Runner

Applies schema migrations shipped in privfinos/migrations/ in order.
Migration files are named NNN_description.sql (001_add_index.sql, ...).

The schema_version table tracks which migrations have been applied.
"""

import re
import sqlite3
from pathlib import Path

from privfinos.logger import get_logger

log = get_logger(__name__)

MIGRATION_PATTERN = re.compile(r"^(\d{3})_(.+)\.sql$")


def get_migrations_path():
    """Return the path to the bundled migrations folder"""
    return Path(__file__).parent / "migrations"


def get_current_version(conn):
    """
    Get the current schema version from the database.

    Returns:
        int: The highest migration version applied, or 0 if no migrations
    """
    try:
        row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    except sqlite3.OperationalError:
        # schema_version table doesn't exist yet (fresh database)
        return 0
    return row[0] if row[0] is not None else 0


def get_all_migrations(migrations_path=None):
    """
    List every migration file in version order.

    Returns:
        list: Tuples of (version, filepath, description)
    """
    migrations_path = Path(migrations_path) if migrations_path else get_migrations_path()
    if not migrations_path.exists():
        return []

    migrations = []
    for file in sorted(migrations_path.glob("*.sql")):
        match = MIGRATION_PATTERN.match(file.name)
        if match:
            version = int(match.group(1))
            description = match.group(2).replace("_", " ")
            migrations.append((version, file, description))
    return migrations


def apply_migration(conn, version, filepath, description):
    """
    Apply a single migration file and record it in schema_version.

    Returns:
        bool: True if successful, False otherwise
    """
    sql = Path(filepath).read_text(encoding="utf-8")
    try:
        # executescript runs in autocommit mode, so wrap script + bookkeeping ourselves
        conn.executescript(f"BEGIN;\n{sql}\n")
        conn.execute(
            "INSERT INTO schema_version (version, description) VALUES (?, ?)",
            (version, description),
        )
        conn.commit()
    except sqlite3.Error as err:
        conn.rollback()
        log.error("migration_failed", version=version, description=description, error=str(err))
        return False

    log.info("migration_applied", version=version, description=description)
    return True


def run_all_pending(db, migrations_path=None):
    """
    Run all pending migrations, stopping at the first failure.

    Returns:
        int: Number of migrations applied
    """
    with db.connection() as conn:
        current_version = get_current_version(conn)
        pending = [m for m in get_all_migrations(migrations_path) if m[0] > current_version]

        applied = 0
        for version, filepath, description in pending:
            if not apply_migration(conn, version, filepath, description):
                break
            applied += 1

    return applied


def list_migrations(db, migrations_path=None):
    """
    Report every known migration and whether it has been applied.

    Returns:
        list: Dicts with version, description and status ("applied"/"pending")
    """
    with db.connection() as conn:
        current_version = get_current_version(conn)

    return [
        {
            "version": version,
            "description": description,
            "status": "applied" if version <= current_version else "pending",
        }
        for version, _, description in get_all_migrations(migrations_path)
    ]
