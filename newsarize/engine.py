"""
Engine controller - user-driven model lifecycle.

Start, stop, status check, import and deletion of the on-device model.
Readiness and import state are exposed as observable values.
"""

import asyncio
import logging
from pathlib import Path

from .model_store import (
    Downloading,
    DownloadState,
    Error,
    Finished,
    Idle,
    ModelImportError,
    ModelStore,
    Processing,
)
from .providers import ModelInitError
from .reactive import StateValue
from .summarizer import Summarizer

logger = logging.getLogger(__name__)


class EngineController:
    """Owns the model readiness state shared by the UI and the inference worker."""

    def __init__(
        self,
        summarizer: Summarizer,
        models: ModelStore,
        start_delay: float = 0.8,
    ):
        self.summarizer = summarizer
        self.models = models
        self.start_delay = start_delay

        self.is_model_ready: StateValue[bool] = StateValue(False)
        self.is_model_installed: StateValue[bool] = StateValue(False)
        self.download_state: StateValue[DownloadState] = StateValue(Idle())

    def check_model_status(self):
        """Refresh installed state without starting the engine."""
        result = self.models.check()
        self.is_model_ready.value = False
        if result.installed:
            self.is_model_installed.value = True
            self.download_state.value = Idle()
        else:
            self.is_model_installed.value = False
            self.download_state.value = Error(result.error or "Kein Modell installiert.")

    async def initialize_engine(self) -> bool:
        """Load the installed model. Returns True when the engine is ready."""
        model_path = self.models.find_model_file()
        if model_path is None:
            self.download_state.value = Error("Kein Modell installiert.")
            return False

        self.download_state.value = Processing()
        try:
            # Give GPU drivers time to settle before a manual start
            await asyncio.sleep(self.start_delay)
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self.summarizer.initialize, model_path)
        except ModelInitError as e:
            logger.error(f"Engine start failed: {e}")
            self._report_start_failure(e)
            return False
        except Exception as e:
            logger.exception(f"Unexpected error while starting engine: {e}")
            self._report_start_failure(e)
            return False

        self.is_model_ready.value = True
        self.download_state.value = Finished()
        backend = self.summarizer.backend
        logger.info(f"Engine ready on {backend.value if backend else 'unknown backend'}")
        return True

    def _report_start_failure(self, error: Exception):
        """Terminal error state for a failed start."""
        self.is_model_ready.value = False
        self.download_state.value = Error(
            "Initialisierung fehlgeschlagen. Tipp: App neustarten oder Modell erneut wählen. "
            f"Details: {error}"
        )

    def stop_engine(self):
        """Release the model. An in-flight generation finishes on its own."""
        self.summarizer.close()
        self.is_model_ready.value = False
        self.download_state.value = Idle()

    async def import_model(self, source: Path, file_name: str | None = None) -> bool:
        """Copy a model (or .tar.gz archive) into the model directory."""
        self.download_state.value = Downloading(0, 0.0, 0.0)
        loop = asyncio.get_running_loop()

        def report(progress: Downloading):
            loop.call_soon_threadsafe(self.download_state.set, progress)

        try:
            await loop.run_in_executor(
                None, self.models.import_model, source, file_name, report
            )
        except ModelImportError as e:
            logger.error(f"Model import failed: {e}")
            self.download_state.value = Error(str(e))
            return False

        result = self.models.check()
        self.is_model_installed.value = result.installed
        if not result.installed:
            self.download_state.value = Error(result.error or "Kein Modell installiert.")
            return False

        self.download_state.value = Finished()
        logger.info(f"Model imported to {result.model_path}")
        return True

    def delete_model(self):
        self.summarizer.close()
        self.models.delete_models()
        self.is_model_ready.value = False
        self.is_model_installed.value = False
        self.download_state.value = Idle()

    def model_size_string(self) -> str:
        return self.models.model_size_string()
