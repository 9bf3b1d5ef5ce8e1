"""
SQL schema for the command catalog.

`command` is the natural key: every write path upserts on it. `examples` and
`tags` are JSON arrays stored as TEXT.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from lsearch.observability.logging import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS commands (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        command TEXT NOT NULL UNIQUE,
        description TEXT NOT NULL,
        category TEXT NOT NULL DEFAULT 'system',
        subcategory TEXT,
        examples TEXT NOT NULL DEFAULT '[]',
        tags TEXT NOT NULL DEFAULT '[]',
        source_notebook_id TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE INDEX IF NOT EXISTS idx_commands_category
    ON commands(category);

    CREATE INDEX IF NOT EXISTS idx_commands_updated
    ON commands(updated_at);
"""

REQUIRED_COLUMNS: dict[str, list[str]] = {
    "commands": [
        "id",
        "command",
        "description",
        "category",
        "subcategory",
        "examples",
        "tags",
        "source_notebook_id",
        "created_at",
        "updated_at",
    ],
}


def init_database(db_path: Path) -> None:
    """
    Create the commands table and its indexes (idempotent).

    Args:
        db_path: Path to the database file

    Side Effects:
    - Creates the parent directory if needed
    - Runs CREATE TABLE/INDEX IF NOT EXISTS
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()

    logger.info("Database initialized: %s", db_path)


def validate_schema(conn: sqlite3.Connection) -> bool:
    """
    Validate the database has the expected tables and columns.

    Raises:
        ValueError: If a table or column is missing
    """
    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
    existing_tables = {row[0] for row in cursor.fetchall()}

    missing_tables = set(REQUIRED_COLUMNS) - existing_tables
    if missing_tables:
        raise ValueError(f"Database missing tables: {missing_tables}")

    for table, required_cols in REQUIRED_COLUMNS.items():
        # Identifiers cannot be bound as parameters; names come from REQUIRED_COLUMNS
        cursor.execute(f"PRAGMA table_info({table})")
        existing_cols = {row[1] for row in cursor.fetchall()}

        missing_cols = set(required_cols) - existing_cols
        if missing_cols:
            raise ValueError(f"Table '{table}' missing columns: {missing_cols}")

    return True
