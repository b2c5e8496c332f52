"""
================================================================================
FILE: notes_ai/pipeline/__init__.py
================================================================================

PURPOSE:
    Orchestration layer. Exports the orchestrator, its option types and the
    response schemas: from notes_ai.pipeline import AIRequestOrchestrator
"""

from .orchestrator import AIRequestOrchestrator, SummarizeOptions, TagOptions
from .schemas import ConnectionCheckResponse, SummarizeResponse, TagsResponse

__all__ = [
    "AIRequestOrchestrator",
    "ConnectionCheckResponse",
    "SummarizeOptions",
    "SummarizeResponse",
    "TagOptions",
    "TagsResponse",
]
