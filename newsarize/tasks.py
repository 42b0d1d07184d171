"""
Feed ingestion: pull today's items from every feed into the article store.
"""

import logging
import sqlite3
from dataclasses import dataclass, field

from .database import Database, NewArticle
from .feeds import FeedParser
from .reactive import EventStream
from .view_state import ScrollToTop, ShowMessage, UiEvent

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    new_articles: int = 0
    per_feed: dict[int, int] = field(default_factory=dict)
    failed_feeds: list[int] = field(default_factory=list)


def new_articles_message(count: int) -> str:
    if count > 0:
        return f"{count} neue Artikel gefunden"
    return "Keine neuen Artikel in abonnierten Feeds"


async def fetch_and_summarize_news(
    db: Database,
    feed_parser: FeedParser,
    events: EventStream[UiEvent] | None = None,
) -> IngestionResult:
    """
    Fetch every configured feed and insert articles not seen before.

    A failing feed counts as zero items; the remaining feeds still run.
    Summarization itself happens later in the inference worker.
    """
    result = IngestionResult()

    for feed in db.get_feeds():
        inserted = await ingest_feed(db, feed_parser, feed.id, feed.url)
        if inserted is None:
            result.failed_feeds.append(feed.id)
            inserted = 0
        result.per_feed[feed.id] = inserted
        result.new_articles += inserted

    logger.info(
        f"Ingestion finished: {result.new_articles} new articles, "
        f"{len(result.failed_feeds)} failed feeds"
    )

    if events is not None:
        events.emit(ShowMessage(new_articles_message(result.new_articles)))
        if result.new_articles > 0:
            events.emit(ScrollToTop())

    return result


async def ingest_feed(db: Database, feed_parser: FeedParser, feed_id: int, feed_url: str) -> int | None:
    """Ingest a single feed. Returns the number of new articles, or None on fetch failure."""
    try:
        items = await feed_parser.fetch_today(feed_url)
    except Exception as e:
        logger.warning(f"Error refreshing feed {feed_id} ({feed_url}): {e}")
        db.update_feed_fetched(feed_id, error=str(e))
        return None

    articles = [
        NewArticle(
            feed_id=feed_id,
            title=item.title,
            link=item.link,
            content=item.description,
            published_at=item.published,
        )
        for item in items
    ]
    try:
        inserted_ids = db.add_articles(articles)
    except sqlite3.IntegrityError as e:
        # Feed was deleted while its items were being fetched
        logger.warning(f"Could not store articles for feed {feed_id}: {e}")
        return None
    db.update_feed_fetched(feed_id)
    return sum(1 for article_id in inserted_ids if article_id is not None)
