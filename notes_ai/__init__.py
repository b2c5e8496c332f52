# notes_ai/__init__.py

"""
Gemini-backed AI backend for note summarization and tagging.

This package contains:
- api: FastAPI routes and dependencies
- config: settings, constants and the frozen model configuration
- core: token budget, error classification, retry, timeout, validation, fallback
- pipeline: request orchestration, prompts and schemas
- providers: LLM provider interface and the Gemini implementation
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
