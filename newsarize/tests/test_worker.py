"""
Tests for the background inference worker.
"""

import asyncio

import pytest

from newsarize.providers import Backend
from newsarize.summarizer import Summarizer
from newsarize.worker import CycleResult, InferenceWorker

from .fakes import FakeLoader, FakeRuntime, make_article


@pytest.fixture
def feed_id(test_db):
    return test_db.add_feed("Feed", "https://example.com/rss")


@pytest.fixture
def worker(test_db, summarizer):
    return InferenceWorker(test_db, summarizer, idle_interval=0.01, pacing_interval=0.01)


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_not_ready_without_model(self, worker, test_db, feed_id):
        test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        assert await worker.run_once() == CycleResult.NOT_READY
        assert test_db.get_unprocessed_count() == 1

    @pytest.mark.asyncio
    async def test_idle_when_nothing_to_do(self, worker, summarizer, model_file):
        summarizer.initialize(model_file)
        assert await worker.run_once() == CycleResult.IDLE
        assert worker.is_summarizing.value is False

    @pytest.mark.asyncio
    async def test_processes_newest_first(self, test_db, feed_id, model_file):
        loader = FakeLoader(responses=["#Tech", "Zusammenfassung neu.", "#Politik", "Zusammenfassung alt."])
        summarizer = Summarizer(runtime_loader=loader)
        summarizer.initialize(model_file)
        test_db.add_category("#Tech")
        test_db.add_category("#Politik")
        old_id, new_id = test_db.add_articles([
            make_article(feed_id, "https://example.com/old", hours_ago=2),
            make_article(feed_id, "https://example.com/new", hours_ago=1),
        ])
        worker = InferenceWorker(test_db, summarizer)

        assert await worker.run_once() == CycleResult.PROCESSED
        newest = test_db.get_article(new_id)
        assert newest.category == "#Tech"
        assert newest.summary == "Zusammenfassung neu."
        assert newest.content == ""
        assert test_db.get_article(old_id).summary is None

        assert await worker.run_once() == CycleResult.PROCESSED
        assert test_db.get_article(old_id).category == "#Politik"
        assert await worker.run_once() == CycleResult.IDLE

    @pytest.mark.asyncio
    async def test_categorize_input_is_title_and_content(self, test_db, feed_id, summarizer, fake_loader, model_file):
        summarizer.initialize(model_file)
        test_db.add_category("#Tech")
        test_db.add_articles([make_article(feed_id, "https://example.com/a", title="Chip-Gipfel", content="Neue Fabrik")])

        await InferenceWorker(test_db, summarizer).run_once()

        assert "Chip-Gipfel\nNeue Fabrik" in fake_loader.runtime.prompts[0]

    @pytest.mark.asyncio
    async def test_long_content_is_summarized_per_chunk(self, test_db, feed_id, model_file):
        loader = FakeLoader(responses=["#Tech", "Teil eins.", "Teil zwei."])
        summarizer = Summarizer(runtime_loader=loader)
        summarizer.initialize(model_file)
        test_db.add_category("#Tech")
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a", content="word " * 1000)])

        await InferenceWorker(test_db, summarizer).run_once()

        assert test_db.get_article(article_id).summary == "Teil eins.\nTeil zwei."
        assert len(loader.runtime.prompts) == 3

    @pytest.mark.asyncio
    async def test_empty_content_gets_placeholder(self, test_db, feed_id, summarizer, model_file):
        summarizer.initialize(model_file)
        test_db.add_category("#Tech")
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a", content="")])

        await InferenceWorker(test_db, summarizer).run_once()

        assert test_db.get_article(article_id).summary == "Generierung fehlgeschlagen."

    @pytest.mark.asyncio
    async def test_unrecognized_category_reply_stores_fallback(self, test_db, feed_id, model_file):
        loader = FakeLoader(responses=["RandomGarbage", "Zusammenfassung."])
        summarizer = Summarizer(runtime_loader=loader)
        summarizer.initialize(model_file)
        test_db.add_category("#Tech")
        test_db.add_category("#Politik")
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])

        assert await InferenceWorker(test_db, summarizer).run_once() == CycleResult.PROCESSED

        article = test_db.get_article(article_id)
        assert article.category == "#Sonstiges"
        assert article.summary == "Zusammenfassung."
        assert "#Politik, #Tech" in loader.runtime.prompts[0]

    @pytest.mark.asyncio
    async def test_without_categories_uses_fallback(self, test_db, feed_id, summarizer, model_file):
        summarizer.initialize(model_file)
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])

        await InferenceWorker(test_db, summarizer).run_once()

        article = test_db.get_article(article_id)
        assert article.category == "#Sonstiges"
        assert article.is_processed

    @pytest.mark.asyncio
    async def test_read_state_survives_processing(self, test_db, feed_id, summarizer, model_file):
        summarizer.initialize(model_file)
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        test_db.mark_read(article_id)

        await InferenceWorker(test_db, summarizer).run_once()

        assert test_db.get_article(article_id).is_read is True

    @pytest.mark.asyncio
    async def test_failure_leaves_article_unprocessed(self, test_db, feed_id, summarizer, model_file, monkeypatch):
        summarizer.initialize(model_file)
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])

        def broken(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(test_db, "store_processing_result", broken)

        assert await InferenceWorker(test_db, summarizer).run_once() == CycleResult.FAILED
        assert test_db.get_article(article_id).summary is None

    @pytest.mark.asyncio
    async def test_inference_errors_are_stored_as_text(self, test_db, feed_id, summarizer, model_file):
        summarizer.initialize(model_file)
        summarizer._runtime = FakeRuntime(Backend.GPU, error=RuntimeError("oom"))
        [article_id] = test_db.add_articles([make_article(feed_id, "https://example.com/a")])

        assert await InferenceWorker(test_db, summarizer).run_once() == CycleResult.PROCESSED
        assert test_db.get_article(article_id).summary == "Fehler bei der Zusammenfassung: oom"


class TestLoop:
    @pytest.mark.asyncio
    async def test_start_processes_backlog_and_stops(self, worker, test_db, feed_id, summarizer, model_file):
        summarizer.initialize(model_file)
        test_db.add_articles([
            make_article(feed_id, f"https://example.com/{i}", hours_ago=i) for i in range(3)
        ])

        await worker.start()
        assert worker.running
        for _ in range(200):
            if test_db.get_unprocessed_count() == 0:
                break
            await asyncio.sleep(0.01)
        await worker.stop()

        assert test_db.get_unprocessed_count() == 0
        assert not worker.running
        assert worker.is_summarizing.value is False

    @pytest.mark.asyncio
    async def test_picks_up_model_loaded_later(self, worker, test_db, feed_id, summarizer, model_file):
        test_db.add_articles([make_article(feed_id, "https://example.com/a")])
        await worker.start()
        await asyncio.sleep(0.05)
        assert test_db.get_unprocessed_count() == 1

        summarizer.initialize(model_file)
        for _ in range(200):
            if test_db.get_unprocessed_count() == 0:
                break
            await asyncio.sleep(0.01)
        await worker.stop()

        assert test_db.get_unprocessed_count() == 0

    @pytest.mark.asyncio
    async def test_stop_without_start(self, worker):
        await worker.stop()
        assert not worker.running

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self, worker):
        await worker.start()
        task = worker._task
        await worker.start()
        assert worker._task is task
        await worker.stop()
