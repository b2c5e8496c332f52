"""
================================================================================
FILE: notes_ai/core/fallback.py
================================================================================

PURPOSE:
    Offline substitutes for Gemini output. Used when the remote call fails
    or returns something unusable, and to patch low-quality results.

WORKFLOW:
    Summary:
        1. Split content into sentences ([.!?] followed by whitespace)
        2. No sentences -> fixed "unable to summarize" message
        3. Greedily add whole sentences while within max_length
        4. Overflowing sentence -> truncated with "..." (if > 10 chars fit)
    Tags:
        1. Lower-case, keep only Latin/Hangul letters, digits, whitespace
        2. Tokens longer than 2 chars, ranked by frequency
        3. Keyword-table tags whose trigger appears in the content come first
        4. Dedupe, cap at max_tags, default tag if nothing survived

KEY FACTS:
    - Deterministic, no I/O
    - Never raises, for any input (None and non-strings included)
    - Summary length never exceeds max_length
"""

import logging
import re
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from notes_ai.config.constants import (
    DEFAULT_KEYWORD_TABLE,
    DEFAULT_MAX_TAGS,
    DEFAULT_SUMMARY_MAX_LENGTH,
    FALLBACK_DEFAULT_TAG,
    FALLBACK_SUMMARY_MESSAGE,
)

logger = logging.getLogger(__name__)

KeywordTable = Mapping[str, Sequence[str]]

ELLIPSIS = "..."
SENTENCE_JOINER = ". "
MIN_PARTIAL_SENTENCE_CHARS = 10
IMPROVE_SUMMARY_MIN_CHARS = 50
IMPROVE_MIN_TAGS = 2
IMPROVED_SUMMARY_LENGTH = 200
IMPROVED_MAX_TAGS = 5
MIN_TOKEN_CHARS = 3

_SENTENCE_SPLIT = re.compile(r"[.!?]\s+")
_NON_WORD = re.compile(r"[^0-9a-zÀ-ÖØ-öø-ɏ가-힣ㄱ-ㅣ\s]")


def _as_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return str(content)


def _clip(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return text[:max_length - len(ELLIPSIS)] + ELLIPSIS


def split_sentences(content: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(content) if s.strip()]

# ================================================================================
# SUMMARY
# ================================================================================


def create_fallback_summary(content: Any, max_length: int = DEFAULT_SUMMARY_MAX_LENGTH) -> str:
    """
    Extractive summary built from the leading sentences of content.

    Args:
        content: Note text
        max_length: Character budget (values below 1 are treated as 1)

    Returns:
        Summary of at most max_length characters
    """
    max_length = max(1, int(max_length))
    sentences = split_sentences(_as_text(content))
    if not sentences:
        return _clip(FALLBACK_SUMMARY_MESSAGE, max_length)

    summary = sentences[0]
    if len(summary) > max_length:
        return _clip(summary, max_length)

    for sentence in sentences[1:]:
        if len(summary) + len(SENTENCE_JOINER) + len(sentence) <= max_length:
            summary += SENTENCE_JOINER + sentence
            continue

        remaining = max_length - len(summary) - len(SENTENCE_JOINER) - len(ELLIPSIS)
        if remaining > MIN_PARTIAL_SENTENCE_CHARS:
            summary += SENTENCE_JOINER + sentence[:remaining] + ELLIPSIS
        break

    return summary

# ================================================================================
# TAGS
# ================================================================================


def tokenize(content: str) -> List[str]:
    cleaned = _NON_WORD.sub(" ", content.lower())
    return [word for word in cleaned.split() if len(word) >= MIN_TOKEN_CHARS]


def keyword_tags(content: str, keyword_table: Optional[KeywordTable] = None) -> List[str]:
    """Tags whose trigger substring appears literally in content."""
    table = DEFAULT_KEYWORD_TABLE if keyword_table is None else keyword_table
    return [
        tag
        for tag, triggers in table.items()
        if any(trigger and trigger in content for trigger in triggers)
    ]


def _dedupe(tags: Iterable[str], limit: int) -> List[str]:
    result: List[str] = []
    for tag in tags:
        if len(result) >= limit:
            break
        if tag not in result:
            result.append(tag)
    return result


def create_fallback_tags(
    content: Any,
    max_tags: int = DEFAULT_MAX_TAGS,
    keyword_table: Optional[KeywordTable] = None,
) -> List[str]:
    """
    Heuristic tags from word frequency plus the keyword table.

    Returns:
        1..max_tags tags (max_tags below 1 is treated as 1)
    """
    max_tags = max(1, int(max_tags))
    text = _as_text(content)

    ranked = [word for word, _ in Counter(tokenize(text)).most_common()]
    tags = _dedupe([*keyword_tags(text, keyword_table), *ranked], max_tags)

    return tags or [FALLBACK_DEFAULT_TAG]

# ================================================================================
# IMPROVE / APPLY
# ================================================================================


def improve_summary(summary: str, content: Any, max_length: int = IMPROVED_SUMMARY_LENGTH) -> str:
    if len(summary or "") < IMPROVE_SUMMARY_MIN_CHARS:
        return create_fallback_summary(content, min(max_length, IMPROVED_SUMMARY_LENGTH))
    return summary


def improve_tags(tags: Sequence[str], content: Any, keyword_table: Optional[KeywordTable] = None) -> List[str]:
    tags = list(tags or [])
    if len(tags) < IMPROVE_MIN_TAGS:
        fallback = create_fallback_tags(content, IMPROVED_MAX_TAGS, keyword_table)
        return _dedupe([*tags, *fallback], IMPROVED_MAX_TAGS)
    return tags


def improve_low_quality_result(
    summary: str,
    tags: Sequence[str],
    content: Any,
) -> Tuple[str, List[str]]:
    """
    Patch a weak result: short summary replaced, tag list topped up.

    Returns:
        (summary, tags)
    """
    return improve_summary(summary, content), improve_tags(tags, content)


def apply_fallback_to_result(
    summary: Optional[str],
    tags: Optional[Sequence[str]],
    content: Any,
    max_summary_length: int = DEFAULT_SUMMARY_MAX_LENGTH,
    max_tags: int = DEFAULT_MAX_TAGS,
) -> Tuple[str, List[str]]:
    """Fill in a missing/blank summary or an empty tag list from content."""
    if not summary or not summary.strip():
        summary = create_fallback_summary(content, max_summary_length)
    if not tags:
        tags = create_fallback_tags(content, max_tags)
    return summary, list(tags)


__all__ = [
    "apply_fallback_to_result",
    "create_fallback_summary",
    "create_fallback_tags",
    "improve_low_quality_result",
    "improve_summary",
    "improve_tags",
    "keyword_tags",
    "split_sentences",
    "tokenize",
]
