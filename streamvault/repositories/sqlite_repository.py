"""SQLite repository implementation for StreamVault."""
from pathlib import Path
from typing import List, Optional

from streamvault.database import Database
from streamvault.domain import DisplayMetadata, LibraryItem, MediaRef, WatchProgressRecord
from streamvault.interfaces import IRepository

WATCHLIST = "watchlist"
LIKES = "likes"
LIBRARY_LISTS = (WATCHLIST, LIKES)


class SqliteRepository(IRepository):
    """SQLite-based repository for continue-watching progress and user lists."""

    def __init__(self, db_path: Path):
        self.db = Database(db_path)

    def _row_to_record(self, row) -> WatchProgressRecord:
        """Convert a database row to a WatchProgressRecord."""
        media_ref = MediaRef(
            media_type=row['media_type'],
            media_id=row['media_id'],
            season=row['season'],
            episode=row['episode'],
        )
        display = DisplayMetadata(
            title=row['title'] or "",
            poster_path=row['poster_path'],
            vote_average=row['vote_average'] or 0.0,
            release_date=row['release_date'],
        )
        return WatchProgressRecord(
            media_ref=media_ref,
            display=display,
            watched_seconds=row['watched_seconds'] or 0.0,
            total_seconds=row['total_seconds'] or 0.0,
            last_watched_at=row['last_watched_at'],
        )

    # === Continue Watching ===

    def upsert_progress(self, record: WatchProgressRecord) -> None:
        """
        Saves a progress record, replacing any row of the same title.
        For TV this retires the previously watched episode's row.
        """
        ref = record.media_ref
        with self.db.connection() as conn:
            # REPLACE assigns a fresh rowid so the row also moves to the top on ties
            conn.execute("""
                INSERT OR REPLACE INTO continue_watching
                (media_type, media_id, season, episode, title, poster_path,
                 vote_average, release_date, watched_seconds, total_seconds, last_watched_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                ref.media_type,
                ref.media_id,
                ref.season,
                ref.episode,
                record.display.title,
                record.display.poster_path,
                record.display.vote_average,
                record.display.release_date,
                record.watched_seconds,
                record.total_seconds,
                record.last_watched_at,
            ))

    def remove_progress(self, media_id: int, media_type: Optional[str] = None) -> None:
        with self.db.connection() as conn:
            if media_type is None:
                conn.execute("DELETE FROM continue_watching WHERE media_id = ?", (media_id,))
            else:
                conn.execute("DELETE FROM continue_watching WHERE media_type = ? AND media_id = ?",
                             (media_type, media_id))

    def list_progress(self) -> List[WatchProgressRecord]:
        with self.db.connection() as conn:
            rows = conn.execute("""
                SELECT media_type, media_id, season, episode, title, poster_path,
                       vote_average, release_date, watched_seconds, total_seconds, last_watched_at
                FROM continue_watching
                ORDER BY last_watched_at DESC, rowid DESC
            """).fetchall()
            return [self._row_to_record(row) for row in rows]

    # === Watchlist / Likes ===

    def add_library_item(self, list_name: str, item: LibraryItem) -> None:
        """Adds an item to a list. Adding an item already present is a no-op."""
        if list_name not in LIBRARY_LISTS:
            raise ValueError(f"Unknown list: {list_name}")
        with self.db.connection() as conn:
            conn.execute("""
                INSERT OR IGNORE INTO library_items
                (list_name, media_id, media_type, title, poster_path, vote_average, release_date, added_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                list_name,
                item.media_id,
                item.media_type,
                item.title,
                item.poster_path,
                item.vote_average,
                item.release_date,
                item.added_at,
            ))

    def remove_library_item(self, list_name: str, media_type: str, media_id: int) -> None:
        with self.db.connection() as conn:
            conn.execute(
                "DELETE FROM library_items WHERE list_name = ? AND media_type = ? AND media_id = ?",
                (list_name, media_type, media_id),
            )

    def list_library_items(self, list_name: str) -> List[LibraryItem]:
        """Returns a list's items, newest first."""
        with self.db.connection() as conn:
            rows = conn.execute("""
                SELECT media_id, media_type, title, poster_path, vote_average, release_date, added_at
                FROM library_items
                WHERE list_name = ?
                ORDER BY added_at DESC, rowid DESC
            """, (list_name,)).fetchall()
            return [
                LibraryItem(
                    media_id=row['media_id'],
                    media_type=row['media_type'],
                    title=row['title'] or "",
                    poster_path=row['poster_path'],
                    vote_average=row['vote_average'] or 0.0,
                    release_date=row['release_date'],
                    added_at=row['added_at'],
                )
                for row in rows
            ]

    def clear_all(self) -> None:
        """Deletes every continue-watching row and list entry."""
        with self.db.connection() as conn:
            conn.execute("DELETE FROM continue_watching")
            conn.execute("DELETE FROM library_items")
