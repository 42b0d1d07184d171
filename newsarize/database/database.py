"""
Database facade - provides unified access to all repositories.

One instance is constructed by the session root and handed to every
component that needs the store.
"""

from pathlib import Path

from .connection import DatabaseConnection, ChangeListener
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .category_repository import CategoryRepository
from .models import DBArticle, DBCategory, DBFeed, NewArticle, ReadFilter

DEFAULT_FEEDS = [
    ("Tagesschau", "https://www.tagesschau.de/xml/rss2"),
    ("Heise", "https://www.heise.de/rss/heise-atom.xml"),
]

DEFAULT_CATEGORIES = ["#Politik", "#Tech", "#Wirtschaft", "#Lokal"]


class Database:
    """Unified database access facade."""

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        self.articles = ArticleRepository(self._connection)
        self.feeds = FeedRepository(self._connection)
        self.categories = CategoryRepository(self._connection)

    # ─────────────────────────────────────────────────────────────
    # Change notification
    # ─────────────────────────────────────────────────────────────

    def add_listener(self, listener: ChangeListener):
        self._connection.add_listener(listener)

    def remove_listener(self, listener: ChangeListener):
        self._connection.remove_listener(listener)

    # ─────────────────────────────────────────────────────────────
    # Feed operations (delegated to FeedRepository)
    # ─────────────────────────────────────────────────────────────

    def add_feed(self, name: str, url: str) -> int:
        return self.feeds.add(name, url)

    def get_feed(self, feed_id: int) -> DBFeed | None:
        return self.feeds.get(feed_id)

    def get_feeds(self) -> list[DBFeed]:
        return self.feeds.get_all()

    def update_feed_fetched(self, feed_id: int, error: str | None = None):
        return self.feeds.update_fetched(feed_id, error)

    def delete_feed(self, feed_id: int) -> bool:
        return self.feeds.delete(feed_id)

    # ─────────────────────────────────────────────────────────────
    # Category operations (delegated to CategoryRepository)
    # ─────────────────────────────────────────────────────────────

    def add_category(self, name: str) -> int | None:
        return self.categories.add(name)

    def get_category(self, category_id: int) -> DBCategory | None:
        return self.categories.get(category_id)

    def get_categories(self) -> list[DBCategory]:
        return self.categories.get_all()

    def get_category_names(self) -> list[str]:
        return self.categories.get_names()

    def delete_category(self, category_id: int) -> bool:
        return self.categories.delete(category_id)

    def get_used_categories(self) -> list[DBCategory]:
        """Configured categories that label at least one article."""
        used = self.articles.get_used_categories()
        return [c for c in self.categories.get_all() if c.name in used]

    # ─────────────────────────────────────────────────────────────
    # Article operations (delegated to ArticleRepository)
    # ─────────────────────────────────────────────────────────────

    def add_articles(self, articles: list[NewArticle]) -> list[int | None]:
        return self.articles.add_many(articles)

    def get_article(self, article_id: int) -> DBArticle | None:
        return self.articles.get(article_id)

    def get_articles(
        self,
        feed_id: int | None = None,
        read_filter: ReadFilter = ReadFilter.ALL,
        category: str | None = None,
    ) -> list[DBArticle]:
        return self.articles.get_filtered(feed_id, read_filter, category)

    def get_next_unprocessed_article_id(self) -> int | None:
        return self.articles.get_next_unprocessed_id()

    def get_unprocessed_count(self) -> int:
        return self.articles.get_unprocessed_count()

    def store_processing_result(
        self,
        article_id: int,
        summary: str | None,
        category: str | None,
    ) -> bool:
        return self.articles.store_result(article_id, summary, category)

    def mark_read(self, article_id: int, is_read: bool = True) -> bool:
        return self.articles.mark_read(article_id, is_read)

    def toggle_read(self, article_id: int) -> bool | None:
        return self.articles.toggle_read(article_id)

    # ─────────────────────────────────────────────────────────────
    # Seeding
    # ─────────────────────────────────────────────────────────────

    def seed_defaults(self):
        """Insert the default feeds and categories into an empty store."""
        if self.feeds.count() == 0:
            for name, url in DEFAULT_FEEDS:
                self.feeds.add(name, url)
        if self.categories.count() == 0:
            for name in DEFAULT_CATEGORIES:
                self.categories.add(name)
