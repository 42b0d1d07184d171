"""
Summarizer - on-device article summarization and categorization.

Features:
- GPU-first model loading with CPU fallback
- Whitespace-aware chunking for long articles
- Fixed editorial prompt for per-chunk summaries
- Strict single-tag classification validated against the configured tags
"""

import logging
import os
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path

from .providers import Backend, ModelInitError, ModelRuntime, RuntimeLoader, create_runtime_loader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptSet:
    """Prompt templates and sentinel texts for one output language."""
    summarize: str
    categorize: str
    fallback_tag: str
    not_initialized: str
    no_response: str
    failed: str  # formatted with {error}
    generation_failed: str  # placeholder when a whole summary comes back empty


# Gemma-style turn markup; both templates end by opening the model turn.
PROMPTS = {
    "de": PromptSet(
        summarize=(
            "<start_of_turn>user\n"
            "Du bist ein professioneller Redakteur. Fasse den folgenden Text in 3 bis 5 Sätzen "
            "ausführlich und verständlich zusammen. Nenne konkrete Namen, Orte, Fakten und "
            "Hintergründe, damit der Leser den Sachverhalt vollumfänglich versteht und kein "
            "Vorwissen durch den ursprünglichen Artikel benötigt. Vermeide Clickbait-Formulierungen. "
            "Achte auf absolut fehlerfreie Grammatik. Text: {text}<end_of_turn>\n"
            "<start_of_turn>model\n"
        ),
        categorize=(
            "<start_of_turn>user\n"
            "Du bist ein strenger Klassifizierer. Lese den folgenden Text und ordne ihn EXAKT EINEM "
            "der folgenden Tags zu: [{tags}]. Antworte NUR mit dem Namen des Tags, ohne weitere "
            "Erklärungen. Wenn keiner passt, antworte mit '{fallback}'.\n\n"
            "Text: {text}<end_of_turn>\n"
            "<start_of_turn>model\n"
        ),
        fallback_tag="#Sonstiges",
        not_initialized="Fehler: Modell nicht initialisiert",
        no_response="Keine Antwort generiert.",
        failed="Fehler bei der Zusammenfassung: {error}",
        generation_failed="Generierung fehlgeschlagen.",
    ),
    "en": PromptSet(
        summarize=(
            "<start_of_turn>user\n"
            "You are a professional editor. Summarize the following text in 3 to 5 clear, "
            "complete sentences. Name concrete people, places, facts and background so the reader "
            "fully understands the story without needing the original article. Avoid clickbait "
            "phrasing. Use flawless grammar. Text: {text}<end_of_turn>\n"
            "<start_of_turn>model\n"
        ),
        categorize=(
            "<start_of_turn>user\n"
            "You are a strict classifier. Read the following text and assign it to EXACTLY ONE "
            "of these tags: [{tags}]. Reply ONLY with the tag name and no explanation. If none "
            "fits, reply with '{fallback}'.\n\n"
            "Text: {text}<end_of_turn>\n"
            "<start_of_turn>model\n"
        ),
        fallback_tag="#Other",
        not_initialized="Error: Model not initialized",
        no_response="No response generated.",
        failed="Summarization failed: {error}",
        generation_failed="Generation failed.",
    ),
}


def chunk_text(text: str, max_chars: int = 3000) -> list[str]:
    """
    Split text into trimmed chunks of at most max_chars characters.

    Each split happens at the last whitespace at or before the limit when
    one exists inside the current chunk; otherwise the text is cut at the
    limit. Chunks that are empty after trimming are dropped.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be positive")

    chunks: list[str] = []
    start = 0
    length = len(text)
    while start < length:
        end = start + max_chars
        if end >= length:
            end = length
        else:
            split_at = max(text.rfind(ws, start, end + 1) for ws in (" ", "\n", "\t", "\r"))
            if split_at > start:
                end = split_at
        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
        start = end
    return chunks


class Summarizer:
    """Adapter around a local model runtime."""

    def __init__(
        self,
        runtime_loader: RuntimeLoader | None = None,
        cache_dir: Path | None = None,
        language: str = "de",
        fallback_tag: str | None = None,
        chunk_size: int = 3000,
        categorize_max_chars: int = 2500,
    ):
        """
        Initialize the adapter (no model is loaded yet).

        Args:
            runtime_loader: Callable loading a model file on a backend
            cache_dir: Inference cache directory wiped before each load
            language: Prompt language key in PROMPTS
            fallback_tag: Tag used when classification yields no candidate
            chunk_size: Maximum characters per summarized chunk
            categorize_max_chars: Input truncation for classification
        """
        if language not in PROMPTS:
            raise ValueError(f"Unsupported language: {language}. Available: {sorted(PROMPTS)}")
        self.runtime_loader = runtime_loader or create_runtime_loader()
        self.cache_dir = cache_dir
        self.prompts = PROMPTS[language]
        self.fallback_tag = fallback_tag or self.prompts.fallback_tag
        self.chunk_size = chunk_size
        self.categorize_max_chars = categorize_max_chars

        self._runtime: ModelRuntime | None = None
        self._init_lock = threading.Lock()
        # Held for the duration of every generate call
        self._generate_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._runtime is not None

    @property
    def backend(self) -> Backend | None:
        runtime = self._runtime
        return runtime.backend if runtime else None

    @property
    def generation_failed_text(self) -> str:
        return self.prompts.generation_failed

    def initialize(self, model_path: Path) -> bool:
        """
        Load the model, preferring the GPU and falling back to the CPU.

        Returns True on success (immediately if already initialized).

        Raises:
            ModelInitError: If neither backend could load the model
        """
        with self._init_lock:
            if self._runtime is not None:
                return True

            logger.info(f"Initializing model runtime from {model_path}")
            self._prepare_warm_start(model_path)

            try:
                self._runtime = self.runtime_loader(model_path, Backend.GPU)
            except Exception as gpu_error:
                logger.warning(f"GPU init failed, retrying on CPU: {gpu_error}")
                try:
                    self._runtime = self.runtime_loader(model_path, Backend.CPU)
                except Exception as cpu_error:
                    logger.error(f"Model init failed on GPU and CPU: {cpu_error}")
                    raise ModelInitError(f"Could not load {model_path.name}: {cpu_error}") from cpu_error

            return True

    def _prepare_warm_start(self, model_path: Path):
        """Touch the model file and wipe cached pipeline artifacts from a previous session."""
        try:
            os.utime(model_path, None)
        except OSError as e:
            logger.warning(f"Could not touch model file {model_path}: {e}")

        if not self.cache_dir or not self.cache_dir.exists():
            return
        try:
            entries = list(self.cache_dir.iterdir())
        except OSError as e:
            logger.warning(f"Could not read cache directory {self.cache_dir}: {e}")
            return
        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.debug(f"Could not remove cache entry {entry}: {e}")

    def chunk_text(self, text: str, max_chars: int | None = None) -> list[str]:
        return chunk_text(text, max_chars or self.chunk_size)

    def summarize(self, text: str) -> str:
        """Summarize one chunk. Failures come back as sentinel text, never as exceptions."""
        prompt = self.prompts.summarize.format(text=text)
        with self._generate_lock:
            runtime = self._runtime
            if runtime is None:
                return self.prompts.not_initialized
            try:
                response = runtime.generate(prompt)
            except Exception as e:
                logger.error(f"Inference failed: {e}")
                return self.prompts.failed.format(error=e)

        response = (response or "").strip()
        return response or self.prompts.no_response

    def categorize(self, text: str, tags: list[str]) -> str:
        """
        Assign exactly one of tags to text.

        Always returns a member of tags or the fallback tag.
        """
        if not tags:
            return self.fallback_tag

        if len(text) > self.categorize_max_chars:
            text = text[:self.categorize_max_chars] + "..."

        prompt = self.prompts.categorize.format(
            tags=", ".join(tags),
            fallback=self.fallback_tag,
            text=text,
        )
        with self._generate_lock:
            runtime = self._runtime
            if runtime is None:
                return self.fallback_tag
            try:
                response = runtime.generate(prompt)
            except Exception as e:
                logger.error(f"Categorization failed: {e}")
                return self.fallback_tag

        return self._match_tag(response or "", tags)

    def _match_tag(self, response: str, tags: list[str]) -> str:
        """Map a raw model reply onto one of the candidate tags."""
        cleaned = response.strip()
        if cleaned in tags or cleaned == self.fallback_tag:
            return cleaned

        # Tolerate quoting, trailing punctuation, case and a missing '#'
        cleaned = cleaned.strip("\"'`*.[] \n").lower().lstrip("#")
        for tag in tags:
            if tag.lower().lstrip("#") == cleaned:
                return tag
        return self.fallback_tag

    def close(self):
        """
        Release the runtime. Safe to call repeatedly.

        New calls see the model as unloaded at once; a generate call already
        running finishes before the runtime is closed.
        """
        runtime = self._runtime
        self._runtime = None
        if runtime is None:
            return
        with self._generate_lock:
            try:
                runtime.close()
            except Exception as e:
                logger.warning(f"Error closing model runtime: {e}")
