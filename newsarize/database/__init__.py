"""
Database module - SQLite operations for articles, feeds and categories.

Uses repository pattern for better separation of concerns.
"""

from .connection import DatabaseConnection
from .models import DBArticle, DBCategory, DBFeed, NewArticle, ReadFilter
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .category_repository import CategoryRepository
from .database import Database

__all__ = [
    "Database",
    "DatabaseConnection",
    "DBArticle",
    "DBCategory",
    "DBFeed",
    "NewArticle",
    "ReadFilter",
    "ArticleRepository",
    "FeedRepository",
    "CategoryRepository",
]
