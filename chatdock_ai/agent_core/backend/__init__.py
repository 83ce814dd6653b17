"""LLM backends.

``LLMBackend`` is the protocol the engine depends on; ``OllamaChatBackend`` is
the shipped HTTP implementation.
"""

from .base import LLMBackend, LLMBackendError
from .ollama import OllamaChatBackend, reassemble_stream

__all__ = ["LLMBackend", "LLMBackendError", "OllamaChatBackend", "reassemble_stream"]
