"""
================================================================================
FILE: notes_ai/core/error_classifier.py
================================================================================

PURPOSE:
    Maps opaque failures from the Gemini call path (SDK exceptions, httpx
    transport errors, asyncio timeouts, plain strings, dicts with
    message/code) into the closed ErrorKind set. Each kind carries a fixed
    retry policy and fixed messages, so the retry controller and the
    orchestrator never inspect raw failures themselves.

WORKFLOW:
    1. Already classified? -> return it unchanged (idempotent)
    2. Extract lower-cased message and known codes (code/status fields,
       HTTP status of google-genai APIError)
    3. Evaluate rules in fixed priority order; first match wins:
       AUTHENTICATION > RATE_LIMIT > QUOTA_EXCEEDED > INVALID_REQUEST >
       TOKEN_LIMIT > NETWORK > TIMEOUT > UNKNOWN
    4. Wrap into ClassifiedError(kind, message, cause)

KEY FACTS:
    - classify_error() never raises
    - A message can match several patterns ("API key is invalid"), which is
      why the order of RULES matters
    - AUTHENTICATION and QUOTA_EXCEEDED are logged at ERROR, everything else
      at WARNING
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

import httpx

from .exceptions import ClassifiedError, ErrorKind

logger = logging.getLogger(__name__)

# ================================================================================
# FAILURE INSPECTION
# ================================================================================


@dataclass(frozen=True)
class FailureFacts:
    """Normalized view of a raw failure used by the rule predicates."""

    message: str
    codes: FrozenSet[str]
    error: Any


def _extract_message(error: Any) -> str:
    if isinstance(error, Mapping):
        return str(error.get("message") or error.get("error") or "")
    if isinstance(error, BaseException):
        message = getattr(error, "message", None)
        if isinstance(message, str) and message:
            return message
        return str(error) or type(error).__name__
    if error is None:
        return ""
    return str(error)


def _extract_codes(error: Any) -> FrozenSet[str]:
    if isinstance(error, Mapping):
        raw = (error.get("code"), error.get("status"))
    else:
        raw = (getattr(error, "code", None), getattr(error, "status", None))
    # errno-style codes arrive as ints on OSError; keep everything as upper str
    return frozenset(str(value).upper() for value in raw if value is not None and value != "")


def inspect_failure(error: Any) -> FailureFacts:
    return FailureFacts(
        message=_extract_message(error).lower(),
        codes=_extract_codes(error),
        error=error,
    )

# ================================================================================
# CLASSIFICATION RULES (priority order)
# ================================================================================


def _matcher(
    phrases: Tuple[str, ...] = (),
    codes: Tuple[str, ...] = (),
    types: Tuple[type, ...] = (),
) -> Callable[[FailureFacts], bool]:
    code_set = frozenset(codes)

    def predicate(facts: FailureFacts) -> bool:
        if types and isinstance(facts.error, types):
            return True
        if code_set & facts.codes:
            return True
        return any(phrase in facts.message for phrase in phrases)

    return predicate


RULES: Tuple[Tuple[Callable[[FailureFacts], bool], ErrorKind], ...] = (
    (
        _matcher(
            phrases=("api key", "api_key", "authentication"),
            codes=("UNAUTHENTICATED", "PERMISSION_DENIED", "401", "403"),
        ),
        ErrorKind.AUTHENTICATION,
    ),
    (
        _matcher(
            phrases=("rate limit", "too many requests"),
            codes=("RATE_LIMIT_EXCEEDED", "429"),
        ),
        ErrorKind.RATE_LIMIT,
    ),
    (
        _matcher(
            phrases=("quota", "billing"),
            codes=("QUOTA_EXCEEDED", "RESOURCE_EXHAUSTED"),
        ),
        ErrorKind.QUOTA_EXCEEDED,
    ),
    (
        _matcher(
            phrases=("invalid", "bad request"),
            codes=("INVALID_ARGUMENT", "FAILED_PRECONDITION", "400"),
        ),
        ErrorKind.INVALID_REQUEST,
    ),
    (
        _matcher(
            phrases=("token", "length"),
            codes=("TOKEN_LIMIT_EXCEEDED",),
        ),
        ErrorKind.TOKEN_LIMIT,
    ),
    (
        _matcher(
            phrases=("network", "connection"),
            codes=("ECONNRESET", "ETIMEDOUT", "ENOTFOUND", "ECONNREFUSED", "UNAVAILABLE"),
            types=(ConnectionError, httpx.NetworkError),
        ),
        ErrorKind.NETWORK,
    ),
    (
        _matcher(
            phrases=("timeout", "timed out"),
            codes=("TIMEOUT", "DEADLINE_EXCEEDED", "504"),
            types=(TimeoutError, asyncio.TimeoutError, httpx.TimeoutException),
        ),
        ErrorKind.TIMEOUT,
    ),
)


def match_kind(facts: FailureFacts) -> ErrorKind:
    for predicate, kind in RULES:
        if predicate(facts):
            return kind
    return ErrorKind.UNKNOWN

# ================================================================================
# PUBLIC API
# ================================================================================


def classify_error(error: Any) -> ClassifiedError:
    """
    Classify any failure value into a ClassifiedError.

    Args:
        error: Exception, mapping with message/code, string, or anything else

    Returns:
        ClassifiedError (the same object if error was already classified)
    """
    if isinstance(error, ClassifiedError):
        return error

    cause = error if isinstance(error, BaseException) else None
    try:
        kind = match_kind(inspect_failure(error))
    except Exception:
        # a failure object with a hostile __str__/__getattr__ must not escape
        logger.debug("Failure inspection raised; classifying as UNKNOWN", exc_info=True)
        kind = ErrorKind.UNKNOWN

    return ClassifiedError(kind, cause=cause)


def is_retryable(error: Any) -> bool:
    return classify_error(error).retryable


def get_user_friendly_message(error: Any) -> str:
    """User-facing message for a failure (classifies it first)."""
    return classify_error(error).kind.user_message


def log_classified_error(error: ClassifiedError, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log a classified error.

    AUTHENTICATION and QUOTA_EXCEEDED need operator action and are logged
    at ERROR; everything else at WARNING.
    """
    log_data = {
        "error_kind": error.kind.value,
        "error_message": error.message,
        "retryable": error.retryable,
        "original_error": str(error.cause) if error.cause is not None else None,
        "context": context or {},
    }

    if error.kind in (ErrorKind.AUTHENTICATION, ErrorKind.QUOTA_EXCEEDED):
        logger.error(f"AI API critical error [{error.kind.value}]: {error.message}", extra=log_data)
    else:
        logger.warning(f"AI API error [{error.kind.value}]: {error.message}", extra=log_data)


__all__ = [
    "FailureFacts",
    "RULES",
    "classify_error",
    "get_user_friendly_message",
    "inspect_failure",
    "is_retryable",
    "log_classified_error",
    "match_kind",
]
