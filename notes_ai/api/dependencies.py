"""
================================================================================
FILE: notes_ai/api/dependencies.py
================================================================================

PURPOSE:
    FastAPI dependency getters. Route handlers receive the orchestrator
    and the request context through Depends(...), so tests can
    swap them with app.dependency_overrides.

KEY FACTS:
    - Getters import from main lazily (main imports routes imports us)
    - Missing startup state -> 503, never an AttributeError
"""

import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status

from notes_ai.utils import format_logger_context, generate_request_id

logger = logging.getLogger(__name__)


async def get_orchestrator():
    """
    Get the AIRequestOrchestrator built at startup.

    Raises:
        HTTPException: 503 if the orchestrator is not initialized
    """
    from .main import get_orchestrator as _get_orchestrator

    try:
        return _get_orchestrator()
    except RuntimeError as e:
        logger.error(f"Orchestrator not available: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI orchestrator not initialized",
        )


async def get_request_context(request: Request) -> Dict[str, Any]:
    """request_id (set by middleware) plus optional client identifiers."""
    context = {"request_id": getattr(request.state, "request_id", None) or generate_request_id()}

    if "X-User-ID" in request.headers:
        context["user_id"] = request.headers["X-User-ID"]

    return context


async def get_logger_context(
    request_context: Dict = Depends(get_request_context),
) -> Dict[str, Any]:
    """Structured logging context for the current request."""
    return format_logger_context(
        request_id=request_context["request_id"],
        user_id=request_context.get("user_id"),
    )
