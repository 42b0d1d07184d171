"""
Model runtime abstraction layer.

Wraps on-device language model backends behind a minimal
load / generate / close interface.
"""

from .base import Backend, ModelInitError, ModelRuntime
from .llama_cpp import LlamaCppRuntime
from .factory import RuntimeLoader, create_runtime_loader, load_runtime

__all__ = [
    "Backend",
    "ModelInitError",
    "ModelRuntime",
    "LlamaCppRuntime",
    "RuntimeLoader",
    "create_runtime_loader",
    "load_runtime",
]
