"""
Category repository - the configured tag labels used for classification.

Articles reference categories by name only, so deleting a category leaves
existing article labels untouched.
"""

from .connection import DatabaseConnection
from .converters import row_to_category
from .models import DBCategory


class CategoryRepository:
    """Repository for category operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(self, name: str) -> int | None:
        """Add a category. Returns its ID, or None if the name already exists."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO categories (name) VALUES (?)", (name,)
            )
            category_id = cursor.lastrowid if cursor.rowcount == 1 else None
        if category_id is not None:
            self._db.notify_changed(["categories"])
        return category_id

    def get(self, category_id: int) -> DBCategory | None:
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM categories WHERE id = ?", (category_id,)
            ).fetchone()
            return row_to_category(row) if row else None

    def get_all(self) -> list[DBCategory]:
        """All categories sorted by name."""
        with self._db.conn() as conn:
            rows = conn.execute("SELECT * FROM categories ORDER BY name ASC").fetchall()
            return [row_to_category(row) for row in rows]

    def get_names(self) -> list[str]:
        return [category.name for category in self.get_all()]

    def delete(self, category_id: int) -> bool:
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            self._db.notify_changed(["categories"])
        return deleted

    def count(self) -> int:
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) as cnt FROM categories").fetchone()["cnt"]
