"""
================================================================================
FILE: notes_ai/core/token_budget.py
================================================================================

PURPOSE:
    Approximate token accounting for text sent to Gemini. Estimates cost
    before a request is made and truncates text to fit a budget.

ESTIMATION:
    - 1 token ≈ 4 characters
    - Text containing Hangul (syllables or Jamo) costs 1.2x
    - Exact rational arithmetic, so the estimate is monotonic in length and
      free of float rounding artefacts

KEY FACTS:
    - Pure functions, no state
    - truncate_* always return a prefix of the input whose estimate fits
    - Usage percentage is not clamped above 100; remaining tokens are
      clamped at 0
"""

import math
import re
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional

from notes_ai.config.constants import DEFAULT_MAX_TOKENS

_CHARS_PER_TOKEN = 4
_HANGUL_MULTIPLIER = Fraction(6, 5)
_HANGUL_PATTERN = re.compile(r"[ᄀ-ᇿㄱ-ㅣ가-힣]")
# end offsets of sentences: a terminator followed by whitespace
_SENTENCE_END = re.compile(r"[.!?](?=\s)")


@dataclass(frozen=True)
class TokenUsageInfo:
    estimated_tokens: int
    max_tokens: int
    is_exceeded: bool
    remaining_tokens: int
    usage_percentage: int


def contains_hangul(text: Optional[str]) -> bool:
    return bool(text) and _HANGUL_PATTERN.search(text) is not None


def estimate_tokens(text: Optional[str]) -> int:
    """Approximate token count for text (0 for empty or None)."""
    if not text:
        return 0

    tokens = Fraction(len(text), _CHARS_PER_TOKEN)
    if contains_hangul(text):
        tokens *= _HANGUL_MULTIPLIER
    return math.ceil(tokens)


def is_exceeded(text: Optional[str], max_tokens: int = DEFAULT_MAX_TOKENS) -> bool:
    return estimate_tokens(text) > max_tokens


def truncate_to_limit(text: Optional[str], max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
    """
    Return the longest prefix of text whose estimate fits max_tokens.

    Binary search over prefix length: O(log n) estimate evaluations.

    Raises:
        ValueError: If max_tokens is negative
    """
    if max_tokens < 0:
        raise ValueError("max_tokens must not be negative")

    text = text or ""
    if not is_exceeded(text, max_tokens):
        return text

    left, right = 0, len(text)
    best_length = 0
    while left <= right:
        mid = (left + right) // 2
        if estimate_tokens(text[:mid]) <= max_tokens:
            best_length = mid
            left = mid + 1
        else:
            right = mid - 1

    return text[:best_length]


def truncate_by_sentence_boundary(text: Optional[str], max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
    """
    Truncate text to whole sentences that fit max_tokens.

    Falls back to truncate_to_limit() when not even the first sentence fits.
    """
    if max_tokens < 0:
        raise ValueError("max_tokens must not be negative")

    text = text or ""
    if not is_exceeded(text, max_tokens):
        return text

    result = ""
    for match in _SENTENCE_END.finditer(text):
        candidate = text[:match.end()]
        if estimate_tokens(candidate) > max_tokens:
            break
        result = candidate

    return result or truncate_to_limit(text, max_tokens)


def get_usage_info(text: Optional[str], max_tokens: int = DEFAULT_MAX_TOKENS) -> TokenUsageInfo:
    """
    Token usage summary for text against a budget.

    Raises:
        ValueError: If max_tokens is not positive
    """
    if max_tokens <= 0:
        raise ValueError("max_tokens must be positive")

    estimated = estimate_tokens(text)
    # round half up
    percentage = math.floor(Fraction(estimated * 100, max_tokens) + Fraction(1, 2))

    return TokenUsageInfo(
        estimated_tokens=estimated,
        max_tokens=max_tokens,
        is_exceeded=estimated > max_tokens,
        remaining_tokens=max(0, max_tokens - estimated),
        usage_percentage=percentage,
    )


__all__ = [
    "TokenUsageInfo",
    "contains_hangul",
    "estimate_tokens",
    "is_exceeded",
    "truncate_to_limit",
    "truncate_by_sentence_boundary",
    "get_usage_info",
]
