"""
llama.cpp runtime implementation.

Loads single-file models through llama-cpp-python. The GPU backend offloads
every layer; the CPU backend keeps all layers on the host.
"""

import logging
from pathlib import Path

from .base import Backend, ModelRuntime

logger = logging.getLogger(__name__)


class LlamaCppRuntime(ModelRuntime):
    """On-device runtime backed by llama.cpp."""

    GPU_LAYERS = {
        Backend.GPU: -1,  # offload everything
        Backend.CPU: 0,
    }

    def __init__(
        self,
        model_path: Path,
        backend: Backend,
        max_tokens: int = 300,
        context_size: int = 4096,
        temperature: float = 0.2,
    ):
        """
        Load a model file.

        Args:
            model_path: Path to the model file
            backend: Backend to load the model on
            max_tokens: Maximum tokens generated per prompt
            context_size: Context window in tokens
            temperature: Sampling temperature
        """
        # Heavy import deferred until a model is actually loaded.
        from llama_cpp import Llama

        self._backend = backend
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._llm = Llama(
            model_path=str(model_path),
            n_gpu_layers=self.GPU_LAYERS[backend],
            n_ctx=context_size,
            verbose=False,
        )
        logger.info(f"Loaded {model_path.name} on {backend.value}")

    @property
    def backend(self) -> Backend:
        return self._backend

    def generate(self, prompt: str) -> str:
        if self._llm is None:
            raise RuntimeError("Runtime is closed")
        result = self._llm(
            prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            stop=["<end_of_turn>"],
        )
        return result["choices"][0]["text"]

    def close(self) -> None:
        if self._llm is not None:
            self._llm.close()
            self._llm = None
