"""
Database connection management, schema initialization and change notification.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator

logger = logging.getLogger(__name__)

ChangeListener = Callable[[frozenset[str]], None]


class DatabaseConnection:
    """Manages database connection, schema and table-change listeners."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._listeners: list[ChangeListener] = []
        self._listeners_lock = threading.Lock()
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """Get database connection with row factory."""
        connection = sqlite3.connect(self.db_path, timeout=30)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def add_listener(self, listener: ChangeListener):
        """Register a callback invoked with the changed table names after each write."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener):
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify_changed(self, tables: Iterable[str]):
        """Tell listeners that the given tables were written to."""
        changed = frozenset(tables)
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(changed)
            except Exception:
                logger.exception(f"Change listener failed for tables {sorted(changed)}")

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS feeds (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    url TEXT NOT NULL,
                    last_fetched TIMESTAMP,
                    fetch_error TEXT
                );

                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    feed_id INTEGER NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
                    title TEXT NOT NULL,
                    link TEXT UNIQUE NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    published_at INTEGER NOT NULL,
                    summary TEXT,
                    category TEXT,
                    is_read BOOLEAN NOT NULL DEFAULT FALSE
                );

                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT UNIQUE NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_articles_feed ON articles(feed_id);
                CREATE INDEX IF NOT EXISTS idx_articles_published ON articles(published_at DESC);
                CREATE INDEX IF NOT EXISTS idx_articles_category ON articles(category);
                CREATE INDEX IF NOT EXISTS idx_articles_unprocessed
                    ON articles(published_at DESC) WHERE summary IS NULL OR category IS NULL;
            """)
