"""
Category routes: the tag set offered to the model.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..config import get_db, get_view_state
from ..database import Database
from ..exceptions import bad_request, require_category
from ..schemas import AddCategoryRequest, CategoryResponse
from ..view_state import NewsViewState

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(
    db: Annotated[Database, Depends(get_db)]
) -> list[CategoryResponse]:
    """All configured categories, alphabetically."""
    return [CategoryResponse.from_db(c) for c in db.get_categories()]


@router.get("/used")
async def list_used_categories(
    db: Annotated[Database, Depends(get_db)]
) -> list[CategoryResponse]:
    """Configured categories that label at least one article."""
    return [CategoryResponse.from_db(c) for c in db.get_used_categories()]


@router.post("")
async def add_category(
    request: AddCategoryRequest,
    db: Annotated[Database, Depends(get_db)],
    view_state: Annotated[NewsViewState, Depends(get_view_state)],
) -> CategoryResponse:
    """Add a category. Names are unique."""
    name = request.name.strip()
    if not name:
        raise bad_request("Category name must not be blank")

    category_id = view_state.add_category(name)
    if category_id is None:
        raise bad_request("Category already exists")

    category = db.get_category(category_id)
    if not category:
        raise HTTPException(status_code=500, detail="Failed to retrieve category")
    return CategoryResponse.from_db(category)


@router.delete("/{category_id}")
async def remove_category(
    category_id: int,
    db: Annotated[Database, Depends(get_db)],
    view_state: Annotated[NewsViewState, Depends(get_view_state)],
) -> dict:
    """Remove a category. Articles already labelled keep their label."""
    require_category(db.get_category(category_id))
    view_state.delete_category(category_id)
    return {"success": True}
