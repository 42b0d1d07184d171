"""
View state - live, filtered article lists for the presentation layer.

The article list is derived from three independent filters (feed, read
state, category). Every filter change drops the previous live query and
starts a new one; results from a superseded query are discarded.
"""

import logging
import threading
from dataclasses import dataclass, replace

from .database import Database, DBArticle, DBCategory, DBFeed, ReadFilter
from .reactive import EventStream, LiveQuery, StateValue, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowMessage:
    """Transient user-facing notification."""
    message: str


@dataclass(frozen=True)
class ScrollToTop:
    """The article list was replaced; scroll position should reset."""


UiEvent = ShowMessage | ScrollToTop


@dataclass(frozen=True)
class ArticleFilters:
    feed_id: int | None = None  # None = all feeds
    read_filter: ReadFilter = ReadFilter.ALL
    category: str | None = None  # None = all categories


class NewsViewState:
    """Filter state plus the live lists derived from it."""

    def __init__(self, db: Database):
        self._db = db
        self._lock = threading.RLock()

        self.filters: StateValue[ArticleFilters] = StateValue(ArticleFilters())
        self.articles: StateValue[list[DBArticle]] = StateValue([])
        self.feeds: StateValue[list[DBFeed]] = StateValue([])
        self.all_categories: StateValue[list[DBCategory]] = StateValue([])
        self.used_categories: StateValue[list[DBCategory]] = StateValue([])
        self.events: EventStream[UiEvent] = EventStream()

        self._generation = 0
        self._articles_subscription: Subscription | None = None
        self._subscriptions = [
            LiveQuery(db, ["feeds"], db.get_feeds).subscribe(self.feeds.set),
            LiveQuery(db, ["categories"], db.get_categories).subscribe(self.all_categories.set),
            LiveQuery(db, ["categories", "articles"], db.get_used_categories).subscribe(
                self.used_categories.set
            ),
        ]
        self._switch_to(self.filters.value)

    # ─────────────────────────────────────────────────────────────
    # Filters
    # ─────────────────────────────────────────────────────────────

    def set_selected_feed(self, feed_id: int | None):
        self.apply_filters(replace(self.filters.value, feed_id=feed_id))

    def set_read_filter(self, read_filter: ReadFilter):
        self.apply_filters(replace(self.filters.value, read_filter=read_filter))

    def set_selected_category(self, category: str | None):
        self.apply_filters(replace(self.filters.value, category=category))

    def apply_filters(self, filters: ArticleFilters):
        """Replace all filters at once and re-derive the article list."""
        with self._lock:
            self.filters.value = filters
            self._switch_to(filters)
        self.events.emit(ScrollToTop())

    def _switch_to(self, filters: ArticleFilters):
        with self._lock:
            if self._articles_subscription is not None:
                self._articles_subscription.cancel()
            self._generation += 1
            generation = self._generation

            def deliver(rows: list[DBArticle]):
                with self._lock:
                    if generation != self._generation:
                        return
                    self.articles.value = rows

            query = LiveQuery(
                self._db,
                ["articles"],
                lambda: self._db.get_articles(filters.feed_id, filters.read_filter, filters.category),
            )
            self._articles_subscription = query.subscribe(deliver)

    # ─────────────────────────────────────────────────────────────
    # User intents
    # ─────────────────────────────────────────────────────────────

    def toggle_article_read(self, article_id: int) -> bool | None:
        return self._db.toggle_read(article_id)

    def set_article_read(self, article_id: int) -> bool:
        return self._db.mark_read(article_id, True)

    def add_feed(self, name: str, url: str) -> int:
        return self._db.add_feed(name, url)

    def delete_feed(self, feed_id: int) -> bool:
        deleted = self._db.delete_feed(feed_id)
        if deleted and self.filters.value.feed_id == feed_id:
            self.set_selected_feed(None)
        return deleted

    def add_category(self, name: str) -> int | None:
        return self._db.add_category(name)

    def delete_category(self, category_id: int) -> bool:
        return self._db.delete_category(category_id)

    def close(self):
        """Detach every live query from the database."""
        with self._lock:
            if self._articles_subscription is not None:
                self._articles_subscription.cancel()
                self._articles_subscription = None
            for subscription in self._subscriptions:
                subscription.cancel()
            self._subscriptions = []
