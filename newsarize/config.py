"""
Configuration and application state management.
"""

import os
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .database import Database
    from .engine import EngineController
    from .feeds import FeedParser
    from .model_store import ModelStore
    from .summarizer import Summarizer
    from .view_state import NewsViewState, UiEvent
    from .worker import InferenceWorker

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/newsarize.db"))
    MODEL_DIR: Path = Path(os.getenv("MODEL_DIR", "./data/models"))
    # Local inference cache artifacts; wiped before every engine start
    CACHE_DIR: Path = Path(os.getenv("CACHE_DIR", "./data/cache"))
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Prompt language: "de" or "en"
    SUMMARY_LANGUAGE: str = os.getenv("SUMMARY_LANGUAGE", "de")
    # Empty means the language default (#Sonstiges / #Other)
    FALLBACK_CATEGORY: str = os.getenv("FALLBACK_CATEGORY", "")

    CHUNK_SIZE: int = int(os.getenv("CHUNK_SIZE", "3000"))
    CATEGORIZE_MAX_CHARS: int = int(os.getenv("CATEGORIZE_MAX_CHARS", "2500"))
    MIN_MODEL_SIZE_MB: int = int(os.getenv("MIN_MODEL_SIZE_MB", "100"))
    MODEL_MAX_TOKENS: int = int(os.getenv("MODEL_MAX_TOKENS", "300"))
    MODEL_CONTEXT_SIZE: int = int(os.getenv("MODEL_CONTEXT_SIZE", "4096"))

    # Inference worker pacing (seconds)
    WORKER_IDLE_INTERVAL: float = float(os.getenv("WORKER_IDLE_INTERVAL", "2.0"))
    WORKER_PACING_INTERVAL: float = float(os.getenv("WORKER_PACING_INTERVAL", "1.5"))
    ENGINE_START_DELAY: float = float(os.getenv("ENGINE_START_DELAY", "0.8"))

    FEED_TIMEOUT: int = int(os.getenv("FEED_TIMEOUT", "30"))
    SEED_DEFAULTS: bool = _parse_bool(os.getenv("SEED_DEFAULTS"), default=True)


config = Config()


class AppState:
    """Session root: the instances shared by routes for the process lifetime."""
    db: "Database | None" = None
    feed_parser: "FeedParser | None" = None
    summarizer: "Summarizer | None" = None
    models: "ModelStore | None" = None
    engine: "EngineController | None" = None
    worker: "InferenceWorker | None" = None
    view_state: "NewsViewState | None" = None
    # UI events not yet drained by a client; filled by the lifespan subscriber
    pending_events: "deque[UiEvent]" = deque(maxlen=50)
    refresh_in_progress: bool = False


state = AppState()


def get_db() -> "Database":
    """Dependency to get database instance."""
    if not state.db:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return state.db


def get_engine() -> "EngineController":
    """Dependency to get the engine controller."""
    if not state.engine:
        raise HTTPException(status_code=500, detail="Engine not initialized")
    return state.engine


def get_view_state() -> "NewsViewState":
    """Dependency to get the shared view state."""
    if not state.view_state:
        raise HTTPException(status_code=500, detail="View state not initialized")
    return state.view_state
