"""
Newsarize API Server

FastAPI application providing endpoints for:
- Article list, detail and read state
- Feed management and refresh
- Category management
- Filtered live view and UI events
- On-device model engine (import, start, stop)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .config import config, state
from .database import Database
from .engine import EngineController
from .feeds import FeedParser
from .model_store import BYTES_PER_MB, ModelStore
from .providers import create_runtime_loader
from .routes import (
    articles_router,
    categories_router,
    engine_router,
    feeds_router,
    misc_router,
    view_router,
)
from .summarizer import Summarizer
from .view_state import NewsViewState
from .worker import InferenceWorker

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.db is None:
        state.db = Database(config.DB_PATH)
        if config.SEED_DEFAULTS:
            state.db.seed_defaults()

        state.feed_parser = FeedParser(timeout=config.FEED_TIMEOUT)
        state.summarizer = Summarizer(
            runtime_loader=create_runtime_loader(
                max_tokens=config.MODEL_MAX_TOKENS,
                context_size=config.MODEL_CONTEXT_SIZE,
            ),
            cache_dir=config.CACHE_DIR,
            language=config.SUMMARY_LANGUAGE,
            fallback_tag=config.FALLBACK_CATEGORY or None,
            chunk_size=config.CHUNK_SIZE,
            categorize_max_chars=config.CATEGORIZE_MAX_CHARS,
        )
        state.models = ModelStore(
            config.MODEL_DIR,
            min_size_bytes=config.MIN_MODEL_SIZE_MB * BYTES_PER_MB,
        )
        state.engine = EngineController(
            state.summarizer,
            state.models,
            start_delay=config.ENGINE_START_DELAY,
        )
        state.engine.check_model_status()

        state.worker = InferenceWorker(
            state.db,
            state.summarizer,
            idle_interval=config.WORKER_IDLE_INTERVAL,
            pacing_interval=config.WORKER_PACING_INTERVAL,
        )
        state.view_state = NewsViewState(state.db)

    events_subscription = None
    if state.view_state is not None:
        events_subscription = state.view_state.events.subscribe(state.pending_events.append)
    if state.worker is not None:
        await state.worker.start()

    logger.info(f"Newsarize {__version__} started")

    yield

    # Shutdown
    if state.worker:
        await state.worker.stop()
    if events_subscription:
        events_subscription.cancel()
    if state.summarizer:
        state.summarizer.close()
    if state.view_state:
        state.view_state.close()


app = FastAPI(
    title="Newsarize API",
    version=__version__,
    lifespan=lifespan
)

# Include routers
app.include_router(misc_router)
app.include_router(articles_router)
app.include_router(feeds_router)
app.include_router(categories_router)
app.include_router(view_router)
app.include_router(engine_router)


def main():
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=config.PORT)


if __name__ == "__main__":
    main()
