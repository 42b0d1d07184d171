"""
Runtime factory for creating model runtime instances.
"""

from pathlib import Path
from typing import Callable

from .base import Backend, ModelRuntime
from .llama_cpp import LlamaCppRuntime

RuntimeLoader = Callable[[Path, Backend], ModelRuntime]


def load_runtime(
    model_path: Path,
    backend: Backend,
    max_tokens: int = 300,
    context_size: int = 4096,
) -> ModelRuntime:
    """
    Load a model file on the requested backend.

    Raises whatever the underlying runtime raises when the backend is
    unusable or the file cannot be loaded.
    """
    return LlamaCppRuntime(
        model_path,
        backend,
        max_tokens=max_tokens,
        context_size=context_size,
    )


def create_runtime_loader(max_tokens: int = 300, context_size: int = 4096) -> RuntimeLoader:
    """Bind generation limits into a loader usable by the Summarizer."""
    def loader(model_path: Path, backend: Backend) -> ModelRuntime:
        return load_runtime(model_path, backend, max_tokens=max_tokens, context_size=context_size)
    return loader
