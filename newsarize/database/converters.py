"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3
from datetime import datetime, timezone

from .models import DBArticle, DBCategory, DBFeed


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are local time)."""
    return int(value.timestamp() * 1000)


def from_epoch_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def row_to_article(row: sqlite3.Row) -> DBArticle:
    """Convert a database row to a DBArticle."""
    return DBArticle(
        id=row["id"],
        feed_id=row["feed_id"],
        title=row["title"],
        link=row["link"],
        content=row["content"] or "",
        published_at=from_epoch_millis(row["published_at"]),
        summary=row["summary"],
        category=row["category"],
        is_read=bool(row["is_read"]),
    )


def row_to_feed(row: sqlite3.Row) -> DBFeed:
    """Convert a database row to a DBFeed."""
    last_fetched = None
    if row["last_fetched"]:
        try:
            last_fetched = datetime.fromisoformat(row["last_fetched"])
        except ValueError:
            pass

    return DBFeed(
        id=row["id"],
        name=row["name"],
        url=row["url"],
        last_fetched=last_fetched,
        fetch_error=row["fetch_error"],
    )


def row_to_category(row: sqlite3.Row) -> DBCategory:
    return DBCategory(id=row["id"], name=row["name"])
