"""
================================================================================
FILE: notes_ai/pipeline/schemas.py
================================================================================

PURPOSE:
    Pydantic models for the request/response contract between route handlers
    and the orchestrator. JSON field names are camelCase (finishReason,
    maxLength, ...) to match the frontend.

RESPONSE SHAPES:
    summarize success   -> {summary, usage, finishReason}
    summarize fallback  -> {summary, usage: {}, finishReason: "FALLBACK", warning}
    tags success        -> {tags, count, language, usage, finishReason}
    tags fallback       -> same + finishReason "FALLBACK", warning
    request error       -> {error} (HTTP 400)

KEY FACTS:
    - Request bodies are deliberately lax (content: Any); the orchestrator
      performs the pre-flight checks so every request error has one shape
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from notes_ai.config.constants import FALLBACK_FINISH_REASON

# ================================================================================
# REQUEST MODELS
# ================================================================================


class SummarizeRequest(BaseModel):
    """Body of POST /summarize."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "content": "Weekly sync. We agreed to ship the beta on Friday.",
                "maxLength": 200,
                "temperature": 0.7,
            }
        },
    )

    content: Any = Field(None, description="Note text to summarize")
    max_length: Optional[int] = Field(None, alias="maxLength", description="Summary character budget")
    temperature: Optional[float] = Field(None, description="Generation temperature (0-1)")


class TagsRequest(BaseModel):
    """Body of POST /tags."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "content": "Project kickoff meeting notes for the mobile app.",
                "maxTags": 5,
                "language": "both",
            }
        },
    )

    content: Any = Field(None, description="Note text to tag")
    max_tags: Optional[int] = Field(None, alias="maxTags", description="Maximum number of tags (1-10)")
    language: Optional[str] = Field(None, description="Tag language: ko | en | both")

# ================================================================================
# RESPONSE MODELS
# ================================================================================


class SummarizeResponse(BaseModel):
    """Summary produced by Gemini or by the offline fallback."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(..., description="Summary text")
    usage: Dict[str, Any] = Field(default_factory=dict, description="Usage metadata")
    finish_reason: Optional[str] = Field(None, alias="finishReason", description="Completion reason")
    warning: Optional[str] = Field(None, description="User-facing warning (fallback only)")

    @property
    def is_fallback(self) -> bool:
        return self.finish_reason == FALLBACK_FINISH_REASON


class TagsResponse(BaseModel):
    """Tags produced by Gemini or by the offline fallback."""

    model_config = ConfigDict(populate_by_name=True)

    tags: List[str] = Field(default_factory=list, description="Tags")
    count: int = Field(0, description="Number of tags")
    language: Optional[str] = Field(None, description="Requested tag language")
    usage: Dict[str, Any] = Field(default_factory=dict, description="Usage metadata")
    finish_reason: Optional[str] = Field(None, alias="finishReason", description="Completion reason")
    warning: Optional[str] = Field(None, description="User-facing warning (fallback only)")

    @property
    def is_fallback(self) -> bool:
        return self.finish_reason == FALLBACK_FINISH_REASON


class ConnectionCheckResponse(BaseModel):
    """Result of a Gemini connectivity probe."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = Field(None, alias="errorKind")
    response_time_ms: int = Field(0, alias="responseTimeMs")


class ErrorResponse(BaseModel):
    """Request error body."""

    error: str


__all__ = [
    "ConnectionCheckResponse",
    "ErrorResponse",
    "SummarizeRequest",
    "SummarizeResponse",
    "TagsRequest",
    "TagsResponse",
]
