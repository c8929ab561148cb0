"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a cursor context manager that commits on success
(``get_cursor``) and ``init_db``, which applies migrations on
application start.

Every studio resource lives in a single ``documents`` table, one row
per record, keyed by ``(collection, id)``.  The record body is stored
as JSON text and each row carries a ``version`` counter used for
optimistic concurrency control by ``core.store``.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: document table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            version INTEGER NOT NULL DEFAULT 1,
            data TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (collection, id)
        );
        """,
    ),
    # Migration 2: insertion order.  ``seq`` keeps collections listed in the
    # order their records were created, independent of id values.
    (
        2,
        """
        ALTER TABLE documents ADD COLUMN seq INTEGER NOT NULL DEFAULT 0;
        CREATE INDEX IF NOT EXISTS idx_documents_collection_seq ON documents(collection, seq);
        """,
    ),
]


def get_database_path() -> str:
    """Return the file that holds the studio documents.

    ``DATABASE_URL`` (``studio.db`` by default) is a plain file path; a
    relative one is taken from the repository root, next to ``run.py``,
    so the operator scripts and the server share one database.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Open a connection to the studio database.

    Rows come back as ``sqlite3.Row`` because ``core.store`` reads the
    ``data`` and ``version`` columns by name.  A writer waits up to ten
    seconds for a lock held by another request before giving up.
    """
    conn = sqlite3.connect(get_database_path(), timeout=10)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor, commits on success and always closes."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Bring the ``documents`` table up to the latest schema.

    Runs at application startup and at the top of every test.  The
    highest version recorded in ``migrations`` says where to resume;
    only the ``MIGRATIONS`` entries above it are executed, so calling
    this on an up-to-date database is a no-op.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
