"""
================================================================================
FILE: notes_ai/utils.py
================================================================================

PURPOSE:
    Small shared helpers: request IDs, structured log context, and the
    process-wide logging setup.

KEY FACTS:
    - No imports from notes_ai modules (prevents circular dependencies)
    - configure_logging is idempotent; safe to call from every startup
"""

import logging
import uuid
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "notes_ai"

_logging_configured = False


def generate_request_id() -> str:
    """Generate unique request ID (UUID v4)."""
    return str(uuid.uuid4())


def format_logger_context(request_id: str, **fields: Any) -> Dict[str, Any]:
    """Format structured logging context (None values dropped)."""
    context: Dict[str, Any] = {"request_id": request_id}
    context.update({key: value for key, value in fields.items() if value is not None})
    return context


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once and set the package log level.

    Args:
        level: DEBUG / INFO / WARNING / ERROR
    """
    global _logging_configured

    numeric_level = getattr(logging, str(level).upper(), logging.INFO)
    if not _logging_configured:
        logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
        _logging_configured = True

    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)


__all__ = [
    "configure_logging",
    "format_logger_context",
    "generate_request_id",
]
