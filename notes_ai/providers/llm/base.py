"""
FILE: notes_ai/providers/llm/base.py

LLM provider interface (contract) and the value objects that cross it.
Gemini (and any test double) must implement ILLMProvider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class GenerationOptions:
    """Per-request generation parameters; None means "use the model default"."""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None


@dataclass(frozen=True)
class NormalizedResponse:
    """One remote call, normalized. Unvalidated until response_validator runs."""

    text: Optional[str]
    usage_metadata: Dict[str, Any] = field(default_factory=dict)
    finish_reason: Optional[str] = None
    candidates: List[Any] = field(default_factory=list)


class ILLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize provider (setup client)."""
        raise NotImplementedError

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        options: Optional[GenerationOptions] = None,
    ) -> NormalizedResponse:
        """Generate text for a prompt (one remote call, no retry)."""
        raise NotImplementedError

    @abstractmethod
    async def shutdown(self) -> None:
        """Cleanup resources."""
        raise NotImplementedError


__all__ = ["GenerationOptions", "ILLMProvider", "NormalizedResponse"]
