"""
Feed repository - CRUD operations for feed sources.
"""

from datetime import datetime

from .connection import DatabaseConnection
from .converters import row_to_feed
from .models import DBFeed


class FeedRepository:
    """Repository for feed operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(self, name: str, url: str) -> int:
        """Add a new feed. Returns feed ID."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "INSERT INTO feeds (name, url) VALUES (?, ?)",
                (name, url)
            )
            feed_id = cursor.lastrowid
        self._db.notify_changed(["feeds"])
        return feed_id

    def get(self, feed_id: int) -> DBFeed | None:
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM feeds WHERE id = ?", (feed_id,)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_all(self) -> list[DBFeed]:
        """Get all feeds in creation order."""
        with self._db.conn() as conn:
            rows = conn.execute("SELECT * FROM feeds ORDER BY id").fetchall()
            return [row_to_feed(row) for row in rows]

    def update_fetched(self, feed_id: int, error: str | None = None):
        """Update feed's last fetched timestamp and error."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET last_fetched = ?, fetch_error = ? WHERE id = ?",
                (datetime.now().isoformat(), error, feed_id)
            )
        self._db.notify_changed(["feeds"])

    def delete(self, feed_id: int) -> bool:
        """Delete feed; its articles are removed by the foreign-key cascade."""
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            self._db.notify_changed(["feeds", "articles"])
        return deleted

    def count(self) -> int:
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) as cnt FROM feeds").fetchone()["cnt"]
