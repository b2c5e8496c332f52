"""
================================================================================
FILE: notes_ai/config/model_config.py
================================================================================

PURPOSE:
    Model-specific configuration for the Gemini client. Separate from the
    general settings so the orchestrator and provider receive one immutable
    value, built once at process start, instead of reading environment
    variables at call time.

MODEL CONFIGURATION:
    - api_key: Gemini API key (server-side only, hidden from repr)
    - model: model id (gemini-2.0-flash)
    - max_tokens: input token budget and default max output tokens (8000)
    - temperature: 0-1 (higher = more creative)
    - top_p / top_k: sampling parameters
    - timeout_s: total wall-clock budget for one remote call incl. retries

KEY FACTS:
    - Frozen dataclass: safe to share between concurrent requests
    - from_settings() rejects missing and placeholder API keys
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from notes_ai.config.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_NAME,
    DEFAULT_REMOTE_TIMEOUT_SECONDS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_K,
    DEFAULT_TOP_P,
    PLACEHOLDER_API_KEY,
)
from notes_ai.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from notes_ai.config.settings import Settings


@dataclass(frozen=True)
class GeminiModelConfig:
    api_key: str = field(repr=False)
    model: str = DEFAULT_MODEL_NAME
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    top_k: int = DEFAULT_TOP_K
    timeout_s: float = DEFAULT_REMOTE_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        validate_api_key(self.api_key)
        if self.max_tokens <= 0:
            raise ConfigurationError("max_tokens must be positive")
        if self.timeout_s <= 0:
            raise ConfigurationError("timeout_s must be positive")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GeminiModelConfig":
        """
        Build the model configuration from validated settings.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is missing or a placeholder
        """
        return cls(
            api_key=settings.gemini_api_key or "",
            model=settings.gemini_model,
            max_tokens=settings.ai_max_tokens,
            temperature=settings.gemini_temperature,
            top_p=settings.gemini_top_p,
            top_k=settings.gemini_top_k,
            timeout_s=settings.llm_timeout,
        )


def validate_api_key(api_key: Optional[str]) -> str:
    if not api_key or not api_key.strip():
        raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
    if api_key == PLACEHOLDER_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY must be set to a valid API key")
    return api_key


__all__ = ["GeminiModelConfig", "validate_api_key"]
