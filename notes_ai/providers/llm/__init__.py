"""
FILE: notes_ai/providers/llm/__init__.py

LLM providers package. Re-exports the interface, its value objects and
the Gemini implementation.
"""

from .base import GenerationOptions, ILLMProvider, NormalizedResponse
from .gemini import GeminiProvider

__all__ = [
    "GenerationOptions",
    "GeminiProvider",
    "ILLMProvider",
    "NormalizedResponse",
]
