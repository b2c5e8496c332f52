"""
FILE: notes_ai/providers/llm/gemini.py

Gemini LLM provider using the google-genai SDK.

One generate() call == one remote request, normalized into
NormalizedResponse. Retry, timeout, validation and fallback are the
orchestrator's job, not this module's.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types as genai_types  # for GenerateContentConfig

from notes_ai.config.model_config import GeminiModelConfig
from notes_ai.core.exceptions import ProviderNotInitializedError
from .base import GenerationOptions, ILLMProvider, NormalizedResponse

logger = logging.getLogger(__name__)


def _dump(value: Any) -> Any:
    """pydantic SDK objects -> plain JSON-able dicts."""
    if value is None:
        return None
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", exclude_none=True)
    return value


def _finish_reason(candidates: List[Any]) -> Optional[str]:
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    if reason is None:
        return None
    return str(getattr(reason, "value", reason))


def normalize_response(resp: Any) -> NormalizedResponse:
    """Map a GenerateContentResponse onto NormalizedResponse."""
    candidates = list(getattr(resp, "candidates", None) or [])
    usage = _dump(getattr(resp, "usage_metadata", None)) or {}

    return NormalizedResponse(
        text=getattr(resp, "text", None),
        usage_metadata=usage,
        finish_reason=_finish_reason(candidates),
        candidates=[_dump(c) for c in candidates],
    )


class GeminiProvider(ILLMProvider):
    """
    Gemini provider using the google-genai SDK.

    Notes:
    - the sync google-genai client runs in a worker thread
      (asyncio.to_thread) to avoid blocking the event loop
    - a thread that outlives a caller's deadline is not interrupted;
      its result is simply discarded
    """

    def __init__(self, config: GeminiModelConfig) -> None:
        self.config = config
        self._client: Optional[genai.Client] = None
        logger.info("GeminiProvider created (model=%s)", self.config.model)

    @property
    def initialized(self) -> bool:
        return self._client is not None

    async def initialize(self) -> None:
        """Create the google-genai Client from the configured API key."""
        try:
            self._client = genai.Client(api_key=self.config.api_key)
            logger.info("✓ Gemini initialized (model=%s)", self.config.model)

        except Exception as e:
            logger.error("Gemini init failed: %s", str(e), exc_info=True)
            raise

    def build_generation_config(self, options: Optional[GenerationOptions] = None) -> genai_types.GenerateContentConfig:
        """Request options over model defaults (None = default)."""
        options = options or GenerationOptions()

        def pick(value, default):
            return default if value is None else value

        return genai_types.GenerateContentConfig(
            max_output_tokens=pick(options.max_tokens, self.config.max_tokens),
            temperature=pick(options.temperature, self.config.temperature),
            top_p=pick(options.top_p, self.config.top_p),
            top_k=pick(options.top_k, self.config.top_k),
        )

    async def generate(
        self,
        prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> NormalizedResponse:
        """
        Generate text from a prompt using Gemini.

        Raises:
            ProviderNotInitializedError: If initialize() was not awaited
            Exception: SDK / transport errors, unchanged (classified upstream)
        """
        if self._client is None:
            raise ProviderNotInitializedError("GeminiProvider not initialized. Call initialize() first.")

        generation_config = self.build_generation_config(options)
        client = self._client

        def _call():
            # google-genai pattern: client.models.generate_content(...)
            return client.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=generation_config,
            )

        resp = await asyncio.to_thread(_call)
        response = normalize_response(resp)
        logger.debug(
            "Gemini response received (finish_reason=%s, chars=%d)",
            response.finish_reason,
            len(response.text or ""),
        )
        return response

    def describe(self) -> Dict[str, Any]:
        return {"provider": "gemini", "model": self.config.model, "initialized": self.initialized}

    async def shutdown(self) -> None:
        """
        Shutdown provider.

        google-genai does not require explicit close; just drop the client.
        """
        self._client = None
        logger.info("GeminiProvider shutdown complete")


__all__ = ["GeminiProvider", "normalize_response"]
