"""GeminiProvider against a mocked google-genai client."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from google.genai import types as genai_types

from notes_ai.config.model_config import GeminiModelConfig
from notes_ai.core.exceptions import ProviderNotInitializedError
from notes_ai.providers.llm import gemini as gemini_module
from notes_ai.providers.llm.base import GenerationOptions
from notes_ai.providers.llm.gemini import GeminiProvider, normalize_response


@pytest.fixture
def config():
    return GeminiModelConfig(api_key="test-key", model="gemini-test", temperature=0.7, top_p=0.9, top_k=40)


@pytest.fixture
def fake_client(monkeypatch):
    client = MagicMock()
    client.models.generate_content.return_value = SimpleNamespace(
        text="A generated summary.",
        usage_metadata=genai_types.GenerateContentResponseUsageMetadata(
            prompt_token_count=11,
            candidates_token_count=4,
            total_token_count=15,
        ),
        candidates=[SimpleNamespace(finish_reason=genai_types.FinishReason.STOP)],
    )
    client_cls = MagicMock(return_value=client)
    monkeypatch.setattr(gemini_module.genai, "Client", client_cls)
    return client_cls, client


@pytest.mark.asyncio
async def test_generate_requires_initialize(config):
    provider = GeminiProvider(config)

    with pytest.raises(ProviderNotInitializedError):
        await provider.generate("hello")


@pytest.mark.asyncio
async def test_initialize_creates_client_with_api_key(config, fake_client):
    client_cls, _ = fake_client
    provider = GeminiProvider(config)

    await provider.initialize()

    client_cls.assert_called_once_with(api_key="test-key")
    assert provider.initialized


@pytest.mark.asyncio
async def test_generate_normalizes_response(config, fake_client):
    _, client = fake_client
    provider = GeminiProvider(config)
    await provider.initialize()

    result = await provider.generate("Summarize this", GenerationOptions(max_tokens=50, temperature=0.2))

    assert result.text == "A generated summary."
    assert result.finish_reason == "STOP"
    assert result.usage_metadata["total_token_count"] == 15

    kwargs = client.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-test"
    assert kwargs["contents"] == "Summarize this"
    assert kwargs["config"].max_output_tokens == 50
    assert kwargs["config"].temperature == 0.2
    assert kwargs["config"].top_k == 40


@pytest.mark.asyncio
async def test_sdk_errors_propagate(config, fake_client):
    _, client = fake_client
    client.models.generate_content.side_effect = RuntimeError("rate limit exceeded")
    provider = GeminiProvider(config)
    await provider.initialize()

    with pytest.raises(RuntimeError, match="rate limit exceeded"):
        await provider.generate("hello")


@pytest.mark.asyncio
async def test_shutdown_drops_client(config, fake_client):
    provider = GeminiProvider(config)
    await provider.initialize()

    await provider.shutdown()

    assert not provider.initialized
    assert provider.describe() == {"provider": "gemini", "model": "gemini-test", "initialized": False}


def test_generation_config_uses_model_defaults(config):
    generation = GeminiProvider(config).build_generation_config()

    assert generation.max_output_tokens == config.max_tokens
    assert generation.temperature == 0.7
    assert generation.top_p == 0.9


def test_generation_config_keeps_zero_values(config):
    generation = GeminiProvider(config).build_generation_config(GenerationOptions(temperature=0.0))
    assert generation.temperature == 0.0


def test_normalize_response_handles_missing_fields():
    result = normalize_response(SimpleNamespace(text=None))

    assert result.text is None
    assert result.usage_metadata == {}
    assert result.finish_reason is None
    assert result.candidates == []


def test_omitted_temperature_uses_configured_model_temperature():
    config = GeminiModelConfig(api_key="test-key", temperature=0.3)

    generation = GeminiProvider(config).build_generation_config(GenerationOptions(max_tokens=50))

    assert generation.temperature == 0.3
    assert generation.max_output_tokens == 50
