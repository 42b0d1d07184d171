"""
Base model runtime interface.

Defines the opaque capability every on-device language model backend exposes:
load on construction, generate text from a prompt, release on close.
"""

from abc import ABC, abstractmethod
from enum import Enum


class Backend(Enum):
    """Hardware backends a runtime can be loaded on, in preference order."""
    GPU = "gpu"
    CPU = "cpu"


class ModelInitError(Exception):
    """Raised when a model could not be loaded on any backend."""


class ModelRuntime(ABC):
    """
    Abstract base class for local model runtimes.

    Implementations load the model in their constructor and raise if the
    backend cannot be used. Instances are not safe for concurrent use; the
    caller serializes all calls.
    """

    @property
    @abstractmethod
    def backend(self) -> Backend:
        """Return the backend the model was loaded on."""
        pass

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Generate a completion for a fully formatted prompt.

        Args:
            prompt: Prompt text including any chat-turn markup

        Returns:
            Raw generated text
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the model and any backend resources."""
        pass
