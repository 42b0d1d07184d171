"""
Pydantic models for API request/response validation.
"""

from typing import Literal

from pydantic import BaseModel, Field

from .database import DBArticle, DBCategory, DBFeed, ReadFilter
from .model_store import Downloading, DownloadState, Error, Finished, Idle, Processing
from .view_state import ArticleFilters, ScrollToTop, ShowMessage, UiEvent


# ─────────────────────────────────────────────────────────────
# Article Schemas
# ─────────────────────────────────────────────────────────────

class ArticleResponse(BaseModel):
    """Article for list view (raw content omitted)."""
    id: int
    feed_id: int
    title: str
    link: str
    published_at: str
    summary: str | None
    category: str | None
    is_read: bool

    @classmethod
    def from_db(cls, article: DBArticle) -> "ArticleResponse":
        return cls(
            id=article.id,
            feed_id=article.feed_id,
            title=article.title,
            link=article.link,
            published_at=article.published_at.isoformat(),
            summary=article.summary,
            category=article.category,
            is_read=article.is_read,
        )


class ArticleDetailResponse(ArticleResponse):
    """Article including the raw content (empty once processed)."""
    content: str

    @classmethod
    def from_db(cls, article: DBArticle) -> "ArticleDetailResponse":
        return cls(
            **ArticleResponse.from_db(article).model_dump(),
            content=article.content,
        )


class MarkReadRequest(BaseModel):
    is_read: bool = True


# ─────────────────────────────────────────────────────────────
# Feed Schemas
# ─────────────────────────────────────────────────────────────

class FeedResponse(BaseModel):
    id: int
    name: str
    url: str
    last_fetched: str | None
    fetch_error: str | None

    @classmethod
    def from_db(cls, feed: DBFeed) -> "FeedResponse":
        return cls(
            id=feed.id,
            name=feed.name,
            url=feed.url,
            last_fetched=feed.last_fetched.isoformat() if feed.last_fetched else None,
            fetch_error=feed.fetch_error,
        )


class AddFeedRequest(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)


class RefreshResponse(BaseModel):
    new_articles: int
    failed_feeds: list[int]
    message: str


# ─────────────────────────────────────────────────────────────
# Category Schemas
# ─────────────────────────────────────────────────────────────

class CategoryResponse(BaseModel):
    id: int
    name: str

    @classmethod
    def from_db(cls, category: DBCategory) -> "CategoryResponse":
        return cls(id=category.id, name=category.name)


class AddCategoryRequest(BaseModel):
    name: str = Field(min_length=1)


# ─────────────────────────────────────────────────────────────
# View Schemas
# ─────────────────────────────────────────────────────────────

class FiltersResponse(BaseModel):
    feed_id: int | None
    read_filter: ReadFilter
    category: str | None

    @classmethod
    def from_filters(cls, filters: ArticleFilters) -> "FiltersResponse":
        return cls(
            feed_id=filters.feed_id,
            read_filter=filters.read_filter,
            category=filters.category,
        )


class UpdateFiltersRequest(BaseModel):
    """Fields left out keep their current value; explicit null selects "all"."""
    feed_id: int | None = None
    read_filter: ReadFilter | None = None
    category: str | None = None


class ViewResponse(BaseModel):
    filters: FiltersResponse
    articles: list[ArticleResponse]
    used_categories: list[CategoryResponse]
    is_summarizing: bool


class UiEventResponse(BaseModel):
    type: Literal["show_message", "scroll_to_top"]
    message: str | None = None

    @classmethod
    def from_event(cls, event: UiEvent) -> "UiEventResponse":
        match event:
            case ShowMessage(message=message):
                return cls(type="show_message", message=message)
            case ScrollToTop():
                return cls(type="scroll_to_top")
            case _:
                raise TypeError(f"Unknown UI event: {event!r}")


# ─────────────────────────────────────────────────────────────
# Engine Schemas
# ─────────────────────────────────────────────────────────────

class DownloadStateResponse(BaseModel):
    state: Literal["idle", "downloading", "processing", "finished", "error"]
    progress: int | None = None
    downloaded_mb: float | None = None
    total_mb: float | None = None
    message: str | None = None

    @classmethod
    def from_state(cls, state: DownloadState) -> "DownloadStateResponse":
        match state:
            case Idle():
                return cls(state="idle")
            case Downloading(progress=progress, downloaded_mb=downloaded, total_mb=total):
                return cls(
                    state="downloading",
                    progress=progress,
                    downloaded_mb=round(downloaded, 2),
                    total_mb=round(total, 2),
                )
            case Processing():
                return cls(state="processing")
            case Finished():
                return cls(state="finished")
            case Error(message=message):
                return cls(state="error", message=message)
            case _:
                raise TypeError(f"Unknown download state: {state!r}")


class EngineStatusResponse(BaseModel):
    is_model_installed: bool
    is_model_ready: bool
    is_summarizing: bool
    backend: str | None
    model_size: str
    download_state: DownloadStateResponse


class ImportModelRequest(BaseModel):
    path: str = Field(min_length=1)
    file_name: str | None = None
