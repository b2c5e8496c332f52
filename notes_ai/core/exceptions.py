# MERGED: 3 sections with separation comments
#│   │   ├── SECTION 1: Base exceptions
#│   │   ├── SECTION 2: Request & configuration exceptions
#│   │   └── SECTION 3: Classified remote-call exceptions
"""
================================================================================
FILE: notes_ai/core/exceptions.py
================================================================================

PURPOSE:
    Custom exception hierarchy for the AI summary/tag layer. Every failure the
    layer raises on purpose is one of these types, so the API layer can map
    them onto request errors (400) or absorb them into a fallback response.

WORKFLOW:
    1. Define base exception class (AIServiceException)
    2. Define exception categories:
       - RecoverableException: transient failure, retrying may help
       - FatalException: permanent failure, fail fast
    3. Define request/configuration errors (pre-flight, never retried)
    4. Define ClassifiedError: a failure mapped into the closed ErrorKind set

KEY FACTS:
    - NO imports from other notes_ai modules (prevents circular dependencies)
    - ErrorKind and its fixed policy live here so the classifier, the timeout
      guard and the response validator can all raise classified errors
    - ClassifiedError.retryable is derived from kind only

ERROR KINDS:
    - RETRYABLE: RATE_LIMIT, NETWORK, TIMEOUT, UNKNOWN
    - NOT RETRYABLE: AUTHENTICATION, QUOTA_EXCEEDED, INVALID_REQUEST,
      TOKEN_LIMIT
"""

# ================================================================================
# IMPORTS
# ================================================================================

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

# ================================================================================
# SECTION 1: BASE EXCEPTIONS
# ================================================================================


class AIServiceException(Exception):
    """
    Root exception for all AI service errors.

    Attributes:
        message (str): Human-readable error message
        error_code (str): Machine-readable error code for categorization
        context (dict): Additional context (optional)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dict for JSON response"""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class RecoverableException(AIServiceException):
    """Transient failure; the retry controller may try again."""
    pass


class FatalException(AIServiceException):
    """Permanent failure; never retried."""
    pass

# ================================================================================
# SECTION 2: REQUEST & CONFIGURATION EXCEPTIONS
# ================================================================================


class RequestValidationError(FatalException):
    """Pre-flight request validation failed (reported as a client error)"""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, error_code="REQUEST_VALIDATION_ERROR", context=context)


class ConfigurationError(FatalException):
    """Invalid configuration (fatal)"""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class ProviderNotInitializedError(FatalException):
    """Provider used before initialize() was awaited"""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, error_code="PROVIDER_NOT_INITIALIZED", context=context)

# ================================================================================
# SECTION 3: CLASSIFIED REMOTE-CALL EXCEPTIONS
# ================================================================================


class ErrorKind(str, Enum):
    """Closed set of remote failure kinds."""

    AUTHENTICATION = "AUTHENTICATION"
    RATE_LIMIT = "RATE_LIMIT"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INVALID_REQUEST = "INVALID_REQUEST"
    TOKEN_LIMIT = "TOKEN_LIMIT"
    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"

    @property
    def retryable(self) -> bool:
        return KIND_POLICIES[self].retryable

    @property
    def message(self) -> str:
        return KIND_POLICIES[self].message

    @property
    def user_message(self) -> str:
        return KIND_POLICIES[self].user_message


class KindPolicy(NamedTuple):
    message: str
    user_message: str
    retryable: bool


KIND_POLICIES: Dict[ErrorKind, KindPolicy] = {
    ErrorKind.AUTHENTICATION: KindPolicy(
        "The API key is invalid. Check the environment configuration.",
        "There is a problem with the AI service configuration. Please contact an administrator.",
        False,
    ),
    ErrorKind.RATE_LIMIT: KindPolicy(
        "The API rate limit was exceeded. Try again shortly.",
        "Too many requests. Please try again in a moment.",
        True,
    ),
    ErrorKind.QUOTA_EXCEEDED: KindPolicy(
        "The API quota was exceeded. Check the billing information.",
        "The AI service usage limit was exceeded. Please contact an administrator.",
        False,
    ),
    ErrorKind.INVALID_REQUEST: KindPolicy(
        "The request was rejected as invalid. Check the input data.",
        "The request was invalid. Please check your input.",
        False,
    ),
    ErrorKind.TOKEN_LIMIT: KindPolicy(
        "The text exceeds the model token limit. Shorten the content.",
        "The text is too long. Please shorten the content.",
        False,
    ),
    ErrorKind.NETWORK: KindPolicy(
        "A network error occurred while calling the API.",
        "There is a network connection problem. Please try again in a moment.",
        True,
    ),
    ErrorKind.TIMEOUT: KindPolicy(
        "The API request timed out.",
        "The request timed out. Please try again in a moment.",
        True,
    ),
    ErrorKind.UNKNOWN: KindPolicy(
        "An unexpected error occurred.",
        "A temporary error occurred. Please try again in a moment.",
        True,
    ),
}


class ClassifiedError(AIServiceException):
    """
    A failure mapped into the closed ErrorKind set.

    Attributes:
        kind (ErrorKind): Failure kind
        message (str): Message (defaults to the kind's fixed message)
        cause (BaseException | None): Original failure, if it was an exception
        retryable (bool): Derived from kind
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict] = None,
    ):
        self.kind = kind
        self.cause = cause
        super().__init__(message or kind.message, error_code=kind.value, context=context)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["retryable"] = self.retryable
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data


class OperationTimeoutError(ClassifiedError):
    """Deadline fired before the guarded operation completed"""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(ErrorKind.TIMEOUT, message, context=context)


class ResponseValidationError(ClassifiedError):
    """Remote response failed structural validation"""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(ErrorKind.INVALID_REQUEST, message, context=context)
