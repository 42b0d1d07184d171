"""
HTTP error helpers shared by the route modules.
"""

from typing import TypeVar

from fastapi import HTTPException

T = TypeVar("T")


def require_resource(resource: T | None, kind: str) -> T:
    """
    Return the resource, or raise 404 "<kind> not found" when it is missing.

    Usage:
        feed = require_resource(db.get_feed(feed_id), "Feed")
    """
    if resource is None:
        raise HTTPException(status_code=404, detail=f"{kind} not found")
    return resource


def require_article(article: T | None) -> T:
    return require_resource(article, "Article")


def require_feed(feed: T | None) -> T:
    return require_resource(feed, "Feed")


def require_category(category: T | None) -> T:
    return require_resource(category, "Category")


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=400, detail=detail)


def conflict(detail: str) -> HTTPException:
    """409 for an intent that collides with one already running."""
    return HTTPException(status_code=409, detail=detail)
