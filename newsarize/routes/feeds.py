"""
Feed routes: management and refresh.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..config import state, get_db, get_view_state
from ..database import Database
from ..exceptions import bad_request, conflict, require_feed
from ..schemas import AddFeedRequest, FeedResponse, RefreshResponse
from ..tasks import fetch_and_summarize_news, new_articles_message
from ..view_state import NewsViewState

router = APIRouter(prefix="/feeds", tags=["feeds"])


# ─────────────────────────────────────────────────────────────
# Feed Management
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_feeds(
    db: Annotated[Database, Depends(get_db)]
) -> list[FeedResponse]:
    """List all subscribed feeds."""
    feeds = db.get_feeds()
    return [FeedResponse.from_db(f) for f in feeds]


@router.post("")
async def add_feed(
    request: AddFeedRequest,
    db: Annotated[Database, Depends(get_db)],
    view_state: Annotated[NewsViewState, Depends(get_view_state)],
) -> FeedResponse:
    """Subscribe to a feed. The URL is not validated until the next refresh."""
    name, url = request.name.strip(), request.url.strip()
    if not name or not url:
        raise bad_request("Feed name and URL must not be blank")

    feed_id = view_state.add_feed(name, url)

    db_feed = db.get_feed(feed_id)
    if not db_feed:
        raise HTTPException(status_code=500, detail="Failed to retrieve feed")

    return FeedResponse.from_db(db_feed)


@router.delete("/{feed_id}")
async def remove_feed(
    feed_id: int,
    db: Annotated[Database, Depends(get_db)],
    view_state: Annotated[NewsViewState, Depends(get_view_state)],
) -> dict:
    """Unsubscribe from a feed and drop its articles."""
    require_feed(db.get_feed(feed_id))
    view_state.delete_feed(feed_id)
    return {"success": True}


# ─────────────────────────────────────────────────────────────
# Refresh
# ─────────────────────────────────────────────────────────────

@router.post("/refresh")
async def refresh_feeds(
    db: Annotated[Database, Depends(get_db)],
    view_state: Annotated[NewsViewState, Depends(get_view_state)],
) -> RefreshResponse:
    """Fetch today's items from every feed. Summaries follow in the background."""
    if not state.feed_parser:
        raise HTTPException(status_code=500, detail="Feed parser not initialized")
    if state.refresh_in_progress:
        raise conflict("Refresh already in progress")

    state.refresh_in_progress = True
    try:
        result = await fetch_and_summarize_news(db, state.feed_parser, view_state.events)
    finally:
        state.refresh_in_progress = False

    return RefreshResponse(
        new_articles=result.new_articles,
        failed_feeds=result.failed_feeds,
        message=new_articles_message(result.new_articles),
    )
