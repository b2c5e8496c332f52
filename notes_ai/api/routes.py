# notes_ai/api/routes.py

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends

from notes_ai.api.dependencies import get_logger_context, get_orchestrator
from notes_ai.config.constants import (
    API_PREFIX,
    DEFAULT_MAX_TAGS,
    DEFAULT_SUMMARY_MAX_LENGTH,
    DEFAULT_TAG_LANGUAGE,
)
from notes_ai.pipeline.orchestrator import SummarizeOptions, TagOptions
from notes_ai.pipeline.schemas import (
    ConnectionCheckResponse,
    ErrorResponse,
    SummarizeRequest,
    SummarizeResponse,
    TagsRequest,
    TagsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix=API_PREFIX, tags=["ai"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse, "description": "Request error"}}


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


@router.post(
    "/summarize",
    response_model=SummarizeResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Summarize a note",
)
async def summarize_endpoint(
    request: SummarizeRequest,
    orchestrator=Depends(get_orchestrator),
    logger_context: Dict[str, Any] = Depends(get_logger_context),
) -> SummarizeResponse:
    """
    Summarize note content.

    Gemini failures never surface here: the orchestrator answers with an
    offline summary plus `warning`. Only pre-flight errors become 400s
    (raised as RequestValidationError, mapped in main.py).
    """
    start_time = time.time()
    options = SummarizeOptions(
        max_length=_or_default(request.max_length, DEFAULT_SUMMARY_MAX_LENGTH),
        temperature=request.temperature,
    )

    response = await orchestrator.summarize(request.content, options)

    logger.info(
        f"Summarize served [{logger_context['request_id']}]",
        extra={
            **logger_context,
            "finish_reason": response.finish_reason,
            "processing_time_ms": int((time.time() - start_time) * 1000),
        },
    )
    return response


@router.post(
    "/tags",
    response_model=TagsResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Generate tags for a note",
)
async def tags_endpoint(
    request: TagsRequest,
    orchestrator=Depends(get_orchestrator),
    logger_context: Dict[str, Any] = Depends(get_logger_context),
) -> TagsResponse:
    """Generate 1..maxTags tags (Gemini or offline fallback)."""
    start_time = time.time()
    options = TagOptions(
        max_tags=_or_default(request.max_tags, DEFAULT_MAX_TAGS),
        language=_or_default(request.language, DEFAULT_TAG_LANGUAGE),
    )

    response = await orchestrator.generate_tags(request.content, options)

    logger.info(
        f"Tags served [{logger_context['request_id']}]",
        extra={
            **logger_context,
            "tag_count": response.count,
            "finish_reason": response.finish_reason,
            "processing_time_ms": int((time.time() - start_time) * 1000),
        },
    )
    return response


@router.get(
    "/health",
    response_model=ConnectionCheckResponse,
    response_model_exclude_none=True,
    summary="Gemini connectivity check",
)
async def health_endpoint(orchestrator=Depends(get_orchestrator)) -> ConnectionCheckResponse:
    """Probe Gemini with a tiny prompt; reports success and latency."""
    result = await orchestrator.check_connection()
    if not result.success:
        logger.warning(f"Health check failed: {result.error}")
    return result
