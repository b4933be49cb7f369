"""Key-value blob stores for the persisted node collection."""

import sqlite3

from loguru import logger

from note_tree.models.node import now_ms

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at INTEGER NOT NULL
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the key-value table if it does not exist."""
    conn.executescript(_SCHEMA_SQL)
    conn.commit()


class SqliteBlobStore:
    """Blob store backed by a single SQLite table.

    The connection is owned by the caller; the schema is created on first use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        create_schema(conn)

    def load(self, key: str) -> str | None:
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def save(self, key: str, value: str) -> None:
        try:
            self.conn.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, now_ms()),
            )
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise
        logger.debug("Saved {} ({} bytes)", key, len(value))


class MemoryBlobStore:
    """In-process blob store. Contents are lost with the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self.values.get(key)

    def save(self, key: str, value: str) -> None:
        self.values[key] = value
