"""
================================================================================
FILE: notes_ai/core/response_validator.py
================================================================================

PURPOSE:
    Structural and qualitative checks on Gemini responses before they are
    trusted. Structural failures raise ResponseValidationError (classified as
    INVALID_REQUEST, so the orchestrator falls back). Quality gates are
    informative only: they decide whether the improve path runs.

STRUCTURE RULES:
    - response is a mapping or a response object (not None, not a scalar)
    - text is a string (trimmed)
    - usage / usage_metadata is a mapping or absent

TAG RULES:
    - comma separated, trimmed, empties dropped
    - > 50 chars dropped
    - no alphanumeric / Hangul character dropped

QUALITY GATES:
    - summary: low quality if < 10 chars, > 1000 chars, or < 3 words
    - tag: low quality if length outside [2, 30] or no alphanumeric / Hangul
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from notes_ai.config.constants import MAX_TAG_LENGTH
from notes_ai.providers.llm.base import NormalizedResponse
from .exceptions import ResponseValidationError

logger = logging.getLogger(__name__)

_MEANINGFUL_CHAR = re.compile(r"[a-zA-Z0-9가-힣]")

SUMMARY_MIN_CHARS = 10
SUMMARY_MAX_CHARS = 1000
SUMMARY_MIN_WORDS = 3
TAG_MIN_CHARS = 2
TAG_MAX_CHARS = 30

_MISSING = object()

# ================================================================================
# RESULT TYPES
# ================================================================================


@dataclass(frozen=True)
class SummarizeResult:
    summary: str
    usage: Dict[str, Any] = field(default_factory=dict)
    finish_reason: Optional[str] = None


@dataclass(frozen=True)
class TagsResult:
    tags: List[str]
    usage: Dict[str, Any] = field(default_factory=dict)
    finish_reason: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.tags)


@dataclass(frozen=True)
class UsageInfo:
    prompt_tokens: int = 0
    response_tokens: int = 0
    total_tokens: int = 0

# ================================================================================
# STRUCTURAL VALIDATION
# ================================================================================


def _get(raw: Any, name: str, default: Any = _MISSING) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name, default)
    return getattr(raw, name, default)


def validate_response(raw: Any) -> NormalizedResponse:
    """
    Validate a raw remote response.

    Accepts a mapping ({"text", "usage", "finishReason", "candidates"}) or
    a NormalizedResponse-like object.

    Raises:
        ResponseValidationError: If the structure is unusable
    """
    if raw is None or isinstance(raw, (str, bytes, int, float, bool, list, tuple)):
        raise ResponseValidationError("Invalid response: response must be an object")

    text = _get(raw, "text")
    if not isinstance(text, str):
        raise ResponseValidationError("Invalid response: text field is required and must be a string")

    usage = _get(raw, "usage_metadata")
    if usage is _MISSING:
        usage = _get(raw, "usage")
    if usage is _MISSING or usage is None:
        usage = {}
    if not isinstance(usage, Mapping):
        raise ResponseValidationError("Invalid response: usage must be an object")

    finish_reason = _get(raw, "finish_reason", None)
    if finish_reason is None:
        finish_reason = _get(raw, "finishReason", None)

    candidates = _get(raw, "candidates", None) or []

    return NormalizedResponse(
        text=text.strip(),
        usage_metadata=dict(usage),
        finish_reason=str(finish_reason) if finish_reason is not None else None,
        candidates=list(candidates),
    )


def validate_summarize_response(raw: Any) -> SummarizeResult:
    response = validate_response(raw)
    if not response.text:
        raise ResponseValidationError("Invalid summary: summary text is empty")

    return SummarizeResult(
        summary=response.text,
        usage=response.usage_metadata,
        finish_reason=response.finish_reason,
    )


def parse_tags(text: str) -> List[str]:
    """Split a comma separated tag list and drop unusable candidates."""
    tags = []
    for candidate in (text or "").split(","):
        tag = candidate.strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            continue
        if not _MEANINGFUL_CHAR.search(tag):
            continue
        tags.append(tag)
    return tags


def validate_tags_response(raw: Any) -> TagsResult:
    response = validate_response(raw)
    tags = parse_tags(response.text)
    if not tags:
        raise ResponseValidationError("Invalid tags: no valid tags found in response")

    return TagsResult(
        tags=tags,
        usage=response.usage_metadata,
        finish_reason=response.finish_reason,
    )

# ================================================================================
# QUALITY GATES
# ================================================================================


def is_summary_low_quality(text: str) -> bool:
    if len(text) < SUMMARY_MIN_CHARS or len(text) > SUMMARY_MAX_CHARS:
        return True
    return len(text.split()) < SUMMARY_MIN_WORDS


def is_tag_low_quality(tag: str) -> bool:
    if len(tag) < TAG_MIN_CHARS or len(tag) > TAG_MAX_CHARS:
        return True
    return not _MEANINGFUL_CHAR.search(tag)


def validate_response_quality(response: NormalizedResponse, kind: Literal["summary", "tags"]) -> bool:
    """True when the response passes the quality gate for its kind."""
    text = response.text or ""
    if kind == "summary":
        return not is_summary_low_quality(text)
    if kind == "tags":
        tags = parse_tags(text)
        return bool(tags) and not any(is_tag_low_quality(tag) for tag in tags)
    return False


def _first_int(usage: Mapping, *keys: str) -> int:
    for key in keys:
        value = usage.get(key)
        if isinstance(value, int):
            return value
    return 0


def extract_usage_info(response: NormalizedResponse) -> UsageInfo:
    """Token counts from Gemini usage metadata (camelCase or snake_case keys)."""
    usage = response.usage_metadata or {}
    return UsageInfo(
        prompt_tokens=_first_int(usage, "prompt_token_count", "promptTokenCount"),
        response_tokens=_first_int(usage, "candidates_token_count", "candidatesTokenCount"),
        total_tokens=_first_int(usage, "total_token_count", "totalTokenCount"),
    )


__all__ = [
    "SummarizeResult",
    "TagsResult",
    "UsageInfo",
    "extract_usage_info",
    "is_summary_low_quality",
    "is_tag_low_quality",
    "parse_tags",
    "validate_response",
    "validate_response_quality",
    "validate_summarize_response",
    "validate_tags_response",
]
