"""
API route modules.
"""

from .articles import router as articles_router
from .categories import router as categories_router
from .engine import router as engine_router
from .feeds import router as feeds_router
from .misc import router as misc_router
from .view import router as view_router

__all__ = [
    "articles_router",
    "categories_router",
    "engine_router",
    "feeds_router",
    "misc_router",
    "view_router",
]
