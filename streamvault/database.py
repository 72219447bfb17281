"""SQLite database for StreamVault local state."""
import sqlite3
from pathlib import Path
from contextlib import contextmanager
from typing import Generator

from streamvault.errors import PersistenceUnavailable

SCHEMA = """
-- Continue watching (one row per title, latest episode wins)
CREATE TABLE IF NOT EXISTS continue_watching (
    media_type TEXT NOT NULL,
    media_id INTEGER NOT NULL,
    season INTEGER,
    episode INTEGER,
    title TEXT NOT NULL DEFAULT '',
    poster_path TEXT,
    vote_average REAL DEFAULT 0,
    release_date TEXT,
    watched_seconds REAL DEFAULT 0,
    total_seconds REAL DEFAULT 0,
    last_watched_at INTEGER NOT NULL,
    PRIMARY KEY (media_type, media_id)
);

-- Watchlist and likes, distinguished by list_name
CREATE TABLE IF NOT EXISTS library_items (
    list_name TEXT NOT NULL,
    media_id INTEGER NOT NULL,
    media_type TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    poster_path TEXT,
    vote_average REAL DEFAULT 0,
    release_date TEXT,
    added_at INTEGER NOT NULL,
    PRIMARY KEY (list_name, media_type, media_id)
);

CREATE INDEX IF NOT EXISTS idx_continue_watching_recent ON continue_watching(last_watched_at);
CREATE INDEX IF NOT EXISTS idx_library_items_list ON library_items(list_name, added_at);
"""


class Database:
    """SQLite database connection manager for StreamVault."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._schema_ready = False
        try:
            self._init_schema()
        except PersistenceUnavailable as e:
            # Retried lazily on the next connection
            print(f"Database unavailable at {self.db_path}: {e}")

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections with auto-commit.
        Any sqlite failure is raised as PersistenceUnavailable.
        """
        if not self._schema_ready:
            self._init_schema()
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise PersistenceUnavailable(str(e)) from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceUnavailable(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            try:
                conn.executescript(SCHEMA)
                _migrate_library_key(conn)
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceUnavailable(str(e)) from e
        self._schema_ready = True


def _migrate_library_key(conn: sqlite3.Connection) -> None:
    """Rebuilds library_items from databases that keyed it on media_id alone."""
    columns = conn.execute("PRAGMA table_info(library_items)").fetchall()
    # Column 5 of table_info is the position within the primary key, 0 when not part of it
    if any(col[1] == "media_type" and col[5] > 0 for col in columns):
        return
    print("Migrating library_items to (list_name, media_type, media_id) keys")
    conn.executescript("""
        ALTER TABLE library_items RENAME TO library_items_old;
        DROP INDEX IF EXISTS idx_library_items_list;
    """)
    conn.executescript(SCHEMA)
    conn.execute("""
        INSERT OR IGNORE INTO library_items
        (list_name, media_id, media_type, title, poster_path, vote_average, release_date, added_at)
        SELECT list_name, media_id, media_type, title, poster_path, vote_average, release_date, added_at
        FROM library_items_old
    """)
    conn.execute("DROP TABLE library_items_old")
