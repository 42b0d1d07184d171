"""
Pytest fixtures for backend tests.
"""

import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from newsarize.config import state
from newsarize.database import Database
from newsarize.engine import EngineController
from newsarize.feeds import FeedParser
from newsarize.model_store import ModelStore
from newsarize.server import app
from newsarize.summarizer import Summarizer
from newsarize.view_state import NewsViewState
from newsarize.worker import InferenceWorker

from .fakes import FakeLoader, make_article


@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield Path(f.name)
    # Cleanup
    if os.path.exists(f.name):
        os.unlink(f.name)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def test_db(temp_db_path):
    """Create a test database instance."""
    db = Database(temp_db_path)
    yield db


@pytest.fixture
def fake_loader():
    return FakeLoader()


@pytest.fixture
def summarizer(fake_loader, temp_dir):
    """German summarizer backed by a fake runtime (not yet initialized)."""
    return Summarizer(runtime_loader=fake_loader, cache_dir=temp_dir / "cache")


@pytest.fixture
def model_file(temp_dir):
    """A stand-in model file."""
    path = temp_dir / "source" / "gemma.bin"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"\0" * 4096)
    return path


@pytest.fixture
def client(temp_db_path, temp_dir, summarizer):
    """Create a test client with isolated database, models and fake runtime."""
    # Store original state
    original = {
        name: getattr(state, name)
        for name in ("db", "feed_parser", "summarizer", "models", "engine", "worker", "view_state")
    }

    # Set up test state with fresh instances
    test_db = Database(temp_db_path)
    state.db = test_db
    state.feed_parser = FeedParser()
    state.summarizer = summarizer
    state.models = ModelStore(temp_dir / "models", min_size_bytes=1024)
    state.engine = EngineController(summarizer, state.models, start_delay=0)
    state.worker = InferenceWorker(test_db, summarizer, idle_interval=0.05, pacing_interval=0.05)
    state.view_state = NewsViewState(test_db)
    state.pending_events.clear()
    state.refresh_in_progress = False

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    # Restore original state
    for name, value in original.items():
        setattr(state, name, value)
    state.pending_events.clear()


@pytest.fixture
def client_with_data(client):
    """Test client with a feed, a category and two articles (one read)."""
    db = state.db
    feed_id = db.add_feed("Test Feed", "https://example.com/feed.xml")
    category_id = db.add_category("#Tech")
    article_ids = db.add_articles([
        make_article(feed_id, "https://example.com/article1", title="Test Article 1", hours_ago=2),
        make_article(feed_id, "https://example.com/article2", title="Test Article 2", hours_ago=1),
    ])
    db.mark_read(article_ids[0], True)

    yield client, {
        "feed_id": feed_id,
        "category_id": category_id,
        "article_ids": article_ids,
    }
