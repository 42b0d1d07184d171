"""
Database models - dataclasses for database entities.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ReadFilter(str, Enum):
    """Read-state filter for article lists."""
    ALL = "ALL"
    READ = "READ"
    UNREAD = "UNREAD"


@dataclass
class DBArticle:
    id: int
    feed_id: int
    title: str
    link: str
    content: str  # Cleared to "" once processed
    published_at: datetime
    summary: str | None  # None until summarized
    category: str | None  # None until categorized
    is_read: bool = False

    @property
    def is_processed(self) -> bool:
        return self.summary is not None and self.category is not None


@dataclass
class DBFeed:
    id: int
    name: str
    url: str
    last_fetched: datetime | None = None
    fetch_error: str | None = None


@dataclass
class DBCategory:
    id: int
    name: str


@dataclass
class NewArticle:
    """Article row ready for insertion (no id, not yet processed)."""
    feed_id: int
    title: str
    link: str
    content: str
    published_at: datetime
