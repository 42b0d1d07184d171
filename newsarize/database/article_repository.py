"""
Article repository - CRUD operations for articles.
"""

from .connection import DatabaseConnection
from .converters import row_to_article, to_epoch_millis
from .models import DBArticle, NewArticle, ReadFilter

UNPROCESSED = "(summary IS NULL OR category IS NULL)"


class ArticleRepository:
    """Repository for article operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add_many(self, articles: list[NewArticle]) -> list[int | None]:
        """
        Insert a batch of articles, ignoring rows whose link already exists.

        Returns one entry per input article: the new row ID, or None when the
        insert was ignored because of a link conflict.
        """
        if not articles:
            return []
        ids: list[int | None] = []
        with self._db.conn() as conn:
            for article in articles:
                cursor = conn.execute(
                    """INSERT OR IGNORE INTO articles
                       (feed_id, title, link, content, published_at)
                       VALUES (?, ?, ?, ?, ?)""",
                    (article.feed_id, article.title, article.link, article.content,
                     to_epoch_millis(article.published_at))
                )
                ids.append(cursor.lastrowid if cursor.rowcount == 1 else None)
        if any(article_id is not None for article_id in ids):
            self._db.notify_changed(["articles"])
        return ids

    def get(self, article_id: int) -> DBArticle | None:
        """Get single article by ID."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ?", (article_id,)
            ).fetchone()
            return row_to_article(row) if row else None

    def get_by_link(self, link: str) -> DBArticle | None:
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE link = ?", (link,)
            ).fetchone()
            return row_to_article(row) if row else None

    def get_filtered(
        self,
        feed_id: int | None = None,
        read_filter: ReadFilter = ReadFilter.ALL,
        category: str | None = None,
    ) -> list[DBArticle]:
        """Get articles matching all given filters, newest first. None means "any"."""
        query = "SELECT * FROM articles WHERE 1=1"
        params: list = []

        if feed_id is not None:
            query += " AND feed_id = ?"
            params.append(feed_id)
        if read_filter == ReadFilter.READ:
            query += " AND is_read = 1"
        elif read_filter == ReadFilter.UNREAD:
            query += " AND is_read = 0"
        if category is not None:
            query += " AND category = ?"
            params.append(category)

        query += " ORDER BY published_at DESC, id DESC"

        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [row_to_article(row) for row in rows]

    def get_next_unprocessed_id(self) -> int | None:
        """ID of the most recently published article still missing summary or category."""
        with self._db.conn() as conn:
            row = conn.execute(
                f"SELECT id FROM articles WHERE {UNPROCESSED} "
                "ORDER BY published_at DESC, id DESC LIMIT 1"
            ).fetchone()
            return row["id"] if row else None

    def get_unprocessed_count(self) -> int:
        with self._db.conn() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) as count FROM articles WHERE {UNPROCESSED}"
            ).fetchone()
            return row["count"] if row else 0

    def get_used_categories(self) -> set[str]:
        """Distinct category labels currently assigned to at least one article."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT DISTINCT category FROM articles WHERE category IS NOT NULL"
            ).fetchall()
            return {row["category"] for row in rows}

    def store_result(self, article_id: int, summary: str | None, category: str | None) -> bool:
        """
        Persist inference output and drop the raw content.

        Only the processing columns are written so that concurrent read-state
        changes are never overwritten. Returns False if the article is gone.
        """
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE articles SET summary = ?, category = ?, content = '' WHERE id = ?",
                (summary, category, article_id)
            )
            updated = cursor.rowcount > 0
        if updated:
            self._db.notify_changed(["articles"])
        return updated

    def mark_read(self, article_id: int, is_read: bool = True) -> bool:
        """Mark article as read/unread. Returns False if the article does not exist."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE articles SET is_read = ? WHERE id = ?",
                (is_read, article_id)
            )
            updated = cursor.rowcount > 0
        if updated:
            self._db.notify_changed(["articles"])
        return updated

    def toggle_read(self, article_id: int) -> bool | None:
        """Flip the read state in one statement. Returns the new state, or None if missing."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE articles SET is_read = NOT is_read WHERE id = ?", (article_id,)
            )
            row = conn.execute(
                "SELECT is_read FROM articles WHERE id = ?", (article_id,)
            ).fetchone()
        if not row:
            return None
        self._db.notify_changed(["articles"])
        return bool(row["is_read"])

    def count(self) -> int:
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) as cnt FROM articles").fetchone()["cnt"]
