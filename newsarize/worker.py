"""
Inference worker.

Background task that keeps categorizing and summarizing unprocessed
articles, newest first, one at a time, for the lifetime of the process.
"""

import asyncio
import logging
from enum import Enum

from .database import Database
from .reactive import StateValue
from .summarizer import Summarizer

logger = logging.getLogger(__name__)


class CycleResult(Enum):
    NOT_READY = "not_ready"  # no model loaded
    IDLE = "idle"  # nothing left to process
    PROCESSED = "processed"
    FAILED = "failed"  # article left unprocessed, retried on a later cycle


class InferenceWorker:
    """
    Polls the store for the next unprocessed article and runs it through the model.

    Waits between cycles so inference never monopolizes the device.
    """

    def __init__(
        self,
        db: Database,
        summarizer: Summarizer,
        idle_interval: float = 2.0,
        pacing_interval: float = 1.5,
    ):
        self.db = db
        self.summarizer = summarizer
        self.idle_interval = idle_interval
        self.pacing_interval = pacing_interval

        self.is_summarizing: StateValue[bool] = StateValue(False)
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the worker loop."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Inference worker started")

    async def stop(self):
        """Signal the loop to stop and wait for the current cycle to end."""
        if self._task is None:
            return
        if self._stop_event:
            self._stop_event.set()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.is_summarizing.value = False
        logger.info("Inference worker stopped")

    async def _run_loop(self):
        """Main loop."""
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            result = await self.run_once()
            if result in (CycleResult.NOT_READY, CycleResult.IDLE):
                await self._wait(self.idle_interval)
            else:
                await self._wait(self.pacing_interval)

    async def _wait(self, seconds: float):
        """Sleep, waking early if stop() is called."""
        assert self._stop_event is not None
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def run_once(self) -> CycleResult:
        """Run a single cycle."""
        if not self.summarizer.is_initialized:
            return CycleResult.NOT_READY

        article_id = self.db.get_next_unprocessed_article_id()
        if article_id is None:
            self.is_summarizing.value = False
            return CycleResult.IDLE

        self.is_summarizing.value = True
        try:
            await self._process(article_id)
        except Exception:
            logger.exception(f"Error processing article {article_id}")
            return CycleResult.FAILED
        return CycleResult.PROCESSED

    async def _process(self, article_id: int):
        article = self.db.get_article(article_id)
        if article is None:
            # Removed by a feed deletion since it was selected
            return

        loop = asyncio.get_running_loop()
        summary = article.summary
        category = article.category

        if category is None:
            tags = self.db.get_category_names()
            if tags:
                category = await loop.run_in_executor(
                    None, self.summarizer.categorize, f"{article.title}\n{article.content}", tags
                )
            else:
                category = self.summarizer.fallback_tag

        if summary is None:
            partials = []
            for chunk in self.summarizer.chunk_text(article.content):
                partials.append(await loop.run_in_executor(None, self.summarizer.summarize, chunk))
            summary = "\n".join(partials).strip() or self.summarizer.generation_failed_text

        self.db.store_processing_result(article_id, summary=summary, category=category)
        logger.debug(f"Processed article {article_id} as {category}")
