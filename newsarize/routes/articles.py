"""
Article routes: list, detail, read state.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import get_db
from ..database import Database, ReadFilter
from ..exceptions import require_article
from ..schemas import ArticleDetailResponse, ArticleResponse, MarkReadRequest

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("")
async def list_articles(
    db: Annotated[Database, Depends(get_db)],
    feed_id: int | None = None,
    read_filter: ReadFilter = ReadFilter.ALL,
    category: str | None = None,
) -> list[ArticleResponse]:
    """Get articles newest first, filtered by feed, read state and category."""
    articles = db.get_articles(feed_id=feed_id, read_filter=read_filter, category=category)
    return [ArticleResponse.from_db(a) for a in articles]


@router.get("/{article_id}")
async def get_article(
    article_id: int,
    db: Annotated[Database, Depends(get_db)]
) -> ArticleDetailResponse:
    """Get a single article."""
    article = require_article(db.get_article(article_id))
    return ArticleDetailResponse.from_db(article)


@router.post("/{article_id}/read")
async def mark_read(
    article_id: int,
    db: Annotated[Database, Depends(get_db)],
    request: MarkReadRequest | None = None,
) -> dict:
    """Set the read state (defaults to read, as when an article is opened)."""
    require_article(db.get_article(article_id))
    is_read = request.is_read if request else True
    db.mark_read(article_id, is_read)
    return {"success": True, "is_read": is_read}


@router.post("/{article_id}/toggle-read")
async def toggle_read(
    article_id: int,
    db: Annotated[Database, Depends(get_db)]
) -> dict:
    """Flip the read state."""
    is_read = require_article(db.toggle_read(article_id))
    return {"success": True, "is_read": is_read}
