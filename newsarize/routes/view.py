"""
View routes: the filtered, live article list and pending UI events.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import state, get_view_state
from ..schemas import (
    ArticleResponse,
    CategoryResponse,
    FiltersResponse,
    UiEventResponse,
    UpdateFiltersRequest,
    ViewResponse,
)
from ..view_state import ArticleFilters, NewsViewState

router = APIRouter(prefix="/view", tags=["view"])


def _snapshot(view_state: NewsViewState) -> ViewResponse:
    worker = state.worker
    return ViewResponse(
        filters=FiltersResponse.from_filters(view_state.filters.value),
        articles=[ArticleResponse.from_db(a) for a in view_state.articles.value],
        used_categories=[CategoryResponse.from_db(c) for c in view_state.used_categories.value],
        is_summarizing=worker.is_summarizing.value if worker else False,
    )


@router.get("")
async def get_view(
    view_state: Annotated[NewsViewState, Depends(get_view_state)]
) -> ViewResponse:
    """Current filters and the article list derived from them."""
    return _snapshot(view_state)


@router.put("/filters")
async def update_filters(
    request: UpdateFiltersRequest,
    view_state: Annotated[NewsViewState, Depends(get_view_state)]
) -> ViewResponse:
    """Change one or more filters; omitted fields are left as they are."""
    current = view_state.filters.value
    fields = request.model_fields_set
    view_state.apply_filters(ArticleFilters(
        feed_id=request.feed_id if "feed_id" in fields else current.feed_id,
        read_filter=request.read_filter or current.read_filter,
        category=request.category if "category" in fields else current.category,
    ))
    return _snapshot(view_state)


@router.get("/events")
async def drain_events() -> list[UiEventResponse]:
    """Return and clear the UI events emitted since the last call."""
    events = []
    while state.pending_events:
        events.append(UiEventResponse.from_event(state.pending_events.popleft()))
    return events
