"""
Shared fixtures for the notes_ai test suite.

- model_config: frozen GeminiModelConfig with a dummy key and a short deadline
- fast_retry: RetryOptions without real backoff sleeps
- make_provider: AsyncMock-backed ILLMProvider whose generate() is scripted
"""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from notes_ai.config.model_config import GeminiModelConfig
from notes_ai.core.retry import RetryOptions
from notes_ai.pipeline.orchestrator import AIRequestOrchestrator
from notes_ai.providers.llm.base import ILLMProvider, NormalizedResponse


def response(text: Optional[str], usage: Optional[Dict[str, Any]] = None, finish_reason: str = "STOP") -> NormalizedResponse:
    return NormalizedResponse(
        text=text,
        usage_metadata=usage if usage is not None else {"prompt_token_count": 12, "total_token_count": 20},
        finish_reason=finish_reason,
    )


@pytest.fixture
def model_config() -> GeminiModelConfig:
    return GeminiModelConfig(api_key="test-key", timeout_s=2.0)


@pytest.fixture
def fast_retry() -> RetryOptions:
    return RetryOptions(max_attempts=3, base_delay=0.0, max_delay=0.0)


@pytest.fixture
def make_provider():
    def _make(side_effect: Any = None, return_value: Any = None) -> MagicMock:
        provider = MagicMock(spec=ILLMProvider)
        provider.generate = AsyncMock(side_effect=side_effect, return_value=return_value)
        provider.initialize = AsyncMock()
        provider.shutdown = AsyncMock()
        return provider

    return _make


@pytest.fixture
def make_orchestrator(model_config, fast_retry):
    def _make(provider, **kwargs) -> AIRequestOrchestrator:
        kwargs.setdefault("model_config", model_config)
        kwargs.setdefault("retry_options", fast_retry)
        return AIRequestOrchestrator(provider=provider, **kwargs)

    return _make
