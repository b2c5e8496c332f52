"""
================================================================================
FILE: notes_ai/pipeline/orchestrator.py
================================================================================

PURPOSE:
    Coordinates one AI request end to end: pre-flight checks, the guarded
    Gemini call, response validation, quality improvement, and the offline
    fallback. Route handlers call this and nothing below it.

WORKFLOW (summarize / generate_tags):
    1. Pre-flight: content present, a string, non-blank, within token budget;
       options in range. Failure -> RequestValidationError (no remote call)
    2. Build prompt + per-request generation options
    3. timeout( retry( provider.generate ) )  -- one deadline for all attempts
    4. Validate the response structurally
    5. Low-quality result -> improve path (local heuristics)
    6. Any failure in 3-4 -> classify, log, answer with the offline fallback
       (finishReason "FALLBACK", usage {}, warning = user-facing message)

KEY FACTS:
    - After pre-flight, summarize/generate_tags never raise
    - Request errors (step 1) are the only failures the caller sees
    - Holds no per-request state; safe to share across concurrent requests
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from notes_ai.config.constants import (
    DEFAULT_MAX_TAGS,
    DEFAULT_SUMMARY_MAX_LENGTH,
    DEFAULT_TAG_LANGUAGE,
    FALLBACK_FINISH_REASON,
    LOG_CONTENT_PREVIEW_CHARS,
    MAX_SUMMARY_MAX_LENGTH,
    MAX_TAGS,
    MIN_TAGS,
    SUMMARY_OUTPUT_TOKEN_CAP,
    TAG_LANGUAGES,
    TAG_OUTPUT_TOKENS,
    TAG_TEMPERATURE,
)
from notes_ai.config.model_config import GeminiModelConfig
from notes_ai.core.error_classifier import classify_error, log_classified_error
from notes_ai.core.exceptions import ClassifiedError, RequestValidationError
from notes_ai.core.fallback import (
    IMPROVE_MIN_TAGS,
    create_fallback_summary,
    create_fallback_tags,
    improve_summary,
    improve_tags,
)
from notes_ai.core.response_validator import (
    is_summary_low_quality,
    is_tag_low_quality,
    validate_summarize_response,
    validate_tags_response,
)
from notes_ai.core.retry import REMOTE_RETRY_OPTIONS, RetryOptions, call_with_retry
from notes_ai.core.timeout_guard import call_with_timeout
from notes_ai.core.token_budget import estimate_tokens
from notes_ai.providers.llm.base import GenerationOptions, ILLMProvider, NormalizedResponse
from .prompts import (
    CONNECTION_PROBE_EXPECTED,
    CONNECTION_PROBE_PROMPT,
    build_summary_prompt,
    build_tags_prompt,
)
from .schemas import ConnectionCheckResponse, SummarizeResponse, TagsResponse

logger = logging.getLogger(__name__)

CONNECTION_PROBE_MAX_TOKENS = 20


@dataclass(frozen=True)
class SummarizeOptions:
    max_length: int = DEFAULT_SUMMARY_MAX_LENGTH
    temperature: Optional[float] = None


@dataclass(frozen=True)
class TagOptions:
    max_tags: int = DEFAULT_MAX_TAGS
    language: str = DEFAULT_TAG_LANGUAGE


def summary_output_tokens(max_length: int) -> int:
    """Output-token budget for a summary of max_length characters."""
    return min(SUMMARY_OUTPUT_TOKEN_CAP, math.ceil(max_length / 4))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class AIRequestOrchestrator:
    """
    Summarize / tag orchestrator over a single LLM provider.

    Args:
        provider: Initialized ILLMProvider (GeminiProvider in production)
        model_config: Immutable model configuration (token budget, timeout)
        retry_options: Retry policy for the remote call (remote preset if None)
        keyword_table: Fallback keyword table (built-in table if None)
    """

    def __init__(
        self,
        provider: ILLMProvider,
        model_config: GeminiModelConfig,
        retry_options: Optional[RetryOptions] = None,
        keyword_table: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.provider = provider
        self.model_config = model_config
        self.retry_options = retry_options or REMOTE_RETRY_OPTIONS
        self.keyword_table = keyword_table

        logger.info(
            "✓ AIRequestOrchestrator initialized",
            extra={
                "model": model_config.model,
                "timeout_s": model_config.timeout_s,
                "max_attempts": self.retry_options.max_attempts,
            },
        )

    # ========================================================================
    # PRE-FLIGHT
    # ========================================================================

    def validate_content(self, content: Any) -> str:
        """
        Raises:
            RequestValidationError: missing/non-string, blank, or over budget
        """
        if not isinstance(content, str) or not content:
            raise RequestValidationError("Content is required and must be a string")

        if not content.strip():
            raise RequestValidationError("Content cannot be empty")

        max_tokens = self.model_config.max_tokens
        estimated = estimate_tokens(content)
        if estimated > max_tokens:
            raise RequestValidationError(
                f"Content too long. Estimated tokens: {estimated}, max allowed: {max_tokens}",
                context={"estimated_tokens": estimated, "max_tokens": max_tokens},
            )

        return content

    @staticmethod
    def validate_summarize_options(options: SummarizeOptions) -> None:
        max_length = options.max_length
        if not isinstance(max_length, int) or isinstance(max_length, bool):
            raise RequestValidationError("maxLength must be an integer")
        if not 1 <= max_length <= MAX_SUMMARY_MAX_LENGTH:
            raise RequestValidationError(f"maxLength must be between 1 and {MAX_SUMMARY_MAX_LENGTH}")

        temperature = options.temperature
        if temperature is not None and (not _is_number(temperature) or not 0 <= temperature <= 1):
            raise RequestValidationError("temperature must be a number between 0 and 1")

    @staticmethod
    def validate_tag_options(options: TagOptions) -> None:
        max_tags = options.max_tags
        if not isinstance(max_tags, int) or isinstance(max_tags, bool) or not MIN_TAGS <= max_tags <= MAX_TAGS:
            raise RequestValidationError(f"maxTags must be an integer between {MIN_TAGS} and {MAX_TAGS}")

        if options.language not in TAG_LANGUAGES:
            raise RequestValidationError(f"language must be one of: {', '.join(TAG_LANGUAGES)}")

    # ========================================================================
    # REMOTE CALL
    # ========================================================================

    async def _call_remote(self, prompt: str, generation: GenerationOptions) -> NormalizedResponse:
        """timeout(retry(generate)): the deadline covers every attempt and backoff."""

        async def attempt() -> NormalizedResponse:
            return await self.provider.generate(prompt, generation)

        async def retried() -> NormalizedResponse:
            return await call_with_retry(attempt, self.retry_options)

        return await call_with_timeout(retried, self.model_config.timeout_s)

    def _handle_failure(self, error: Exception, operation: str, content: str, extra: Dict[str, Any]) -> ClassifiedError:
        classified = classify_error(error)
        log_classified_error(
            classified,
            {
                "operation": operation,
                "content_preview": content[:LOG_CONTENT_PREVIEW_CHARS],
                **extra,
            },
        )
        return classified

    # ========================================================================
    # SUMMARIZE
    # ========================================================================

    async def summarize(self, content: Any, options: Optional[SummarizeOptions] = None) -> SummarizeResponse:
        """
        Summarize a note.

        Returns:
            SummarizeResponse (Gemini result, or fallback with a warning)

        Raises:
            RequestValidationError: Pre-flight failure (nothing was sent)
        """
        options = options or SummarizeOptions()
        text = self.validate_content(content)
        self.validate_summarize_options(options)

        start_time = time.time()
        logger.info(
            "Summarize request",
            extra={"content_length": len(text), "max_length": options.max_length},
        )

        prompt = build_summary_prompt(text, options.max_length)
        generation = GenerationOptions(
            max_tokens=summary_output_tokens(options.max_length),
            temperature=options.temperature,
        )

        try:
            raw = await self._call_remote(prompt, generation)
            result = validate_summarize_response(raw)

        except Exception as e:
            classified = self._handle_failure(e, "summarize", text, {"max_length": options.max_length})
            return SummarizeResponse(
                summary=create_fallback_summary(text, options.max_length),
                usage={},
                finish_reason=FALLBACK_FINISH_REASON,
                warning=classified.kind.user_message,
            )

        summary = result.summary
        if is_summary_low_quality(summary):
            improved = improve_summary(summary, text, options.max_length)
            if improved != summary:
                logger.info("Low-quality summary replaced by local improvement")
            summary = improved

        logger.info(
            "Summarize completed",
            extra={
                "summary_length": len(summary),
                "finish_reason": result.finish_reason,
                "processing_time_ms": int((time.time() - start_time) * 1000),
            },
        )

        return SummarizeResponse(
            summary=summary,
            usage=result.usage,
            finish_reason=result.finish_reason,
        )

    # ========================================================================
    # TAGS
    # ========================================================================

    async def generate_tags(self, content: Any, options: Optional[TagOptions] = None) -> TagsResponse:
        """
        Generate tags for a note.

        Returns:
            TagsResponse with 1..max_tags tags (Gemini result or fallback)

        Raises:
            RequestValidationError: Pre-flight failure (nothing was sent)
        """
        options = options or TagOptions()
        text = self.validate_content(content)
        self.validate_tag_options(options)

        start_time = time.time()
        logger.info(
            "Tags request",
            extra={"content_length": len(text), "max_tags": options.max_tags, "language": options.language},
        )

        prompt = build_tags_prompt(text, options.max_tags, options.language)
        generation = GenerationOptions(max_tokens=TAG_OUTPUT_TOKENS, temperature=TAG_TEMPERATURE)

        try:
            raw = await self._call_remote(prompt, generation)
            result = validate_tags_response(raw)

        except Exception as e:
            classified = self._handle_failure(e, "generate_tags", text, {"max_tags": options.max_tags})
            tags = create_fallback_tags(text, options.max_tags, self.keyword_table)
            return TagsResponse(
                tags=tags,
                count=len(tags),
                language=options.language,
                usage={},
                finish_reason=FALLBACK_FINISH_REASON,
                warning=classified.kind.user_message,
            )

        tags = result.tags[:options.max_tags]
        if len(tags) < IMPROVE_MIN_TAGS or any(is_tag_low_quality(tag) for tag in tags):
            improved = improve_tags(tags, text, self.keyword_table)[:options.max_tags]
            if improved != tags:
                logger.info("Tag list topped up by local improvement")
            tags = improved

        logger.info(
            "Tags completed",
            extra={
                "tag_count": len(tags),
                "finish_reason": result.finish_reason,
                "processing_time_ms": int((time.time() - start_time) * 1000),
            },
        )

        return TagsResponse(
            tags=tags,
            count=len(tags),
            language=options.language,
            usage=result.usage,
            finish_reason=result.finish_reason,
        )

    # ========================================================================
    # CONNECTIVITY
    # ========================================================================

    async def check_connection(self) -> ConnectionCheckResponse:
        """Send a tiny probe prompt (no retry) and report success + latency."""
        start_time = time.time()

        async def probe() -> NormalizedResponse:
            return await self.provider.generate(
                CONNECTION_PROBE_PROMPT,
                GenerationOptions(max_tokens=CONNECTION_PROBE_MAX_TOKENS),
            )

        try:
            response = await call_with_timeout(probe, self.model_config.timeout_s)
        except Exception as e:
            classified = self._handle_failure(e, "check_connection", CONNECTION_PROBE_PROMPT, {})
            return ConnectionCheckResponse(
                success=False,
                error=str(classified.cause or classified.message),
                error_kind=classified.kind.value,
                response_time_ms=int((time.time() - start_time) * 1000),
            )

        elapsed_ms = int((time.time() - start_time) * 1000)
        if CONNECTION_PROBE_EXPECTED in (response.text or "").lower():
            return ConnectionCheckResponse(success=True, response_time_ms=elapsed_ms)

        return ConnectionCheckResponse(
            success=False,
            error="Unexpected probe response",
            response_time_ms=elapsed_ms,
        )

    def describe(self) -> Dict[str, Any]:
        """Runtime configuration (for /health; no secrets)."""
        return {
            "model": self.model_config.model,
            "max_tokens": self.model_config.max_tokens,
            "timeout_s": self.model_config.timeout_s,
            "retry": {
                "max_attempts": self.retry_options.max_attempts,
                "base_delay": self.retry_options.base_delay,
                "max_delay": self.retry_options.max_delay,
            },
        }


__all__ = [
    "AIRequestOrchestrator",
    "SummarizeOptions",
    "TagOptions",
    "summary_output_tokens",
]
