"""Backend client module for Legend Studio."""

from .base import GenerationBackendProtocol, ProgressCallback
from .factory import create_backend
from .gemini_client import GeminiClient

__all__ = [
    "GeminiClient",
    "GenerationBackendProtocol",
    "ProgressCallback",
    "create_backend",
]
