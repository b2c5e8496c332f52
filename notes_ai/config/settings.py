"""
================================================================================
FILE: notes_ai/config/settings.py
================================================================================

PURPOSE:
    Application settings and configuration loaded from environment variables.
    Uses Pydantic BaseSettings for automatic validation and type hints.
    Single source of truth for all process configuration; read once at
    startup and turned into immutable values (GeminiModelConfig,
    RetryOptions) that are passed into the orchestrator.

WORKFLOW:
    1. At startup, load from environment variables (.env file or system env)
    2. Validate all settings (type checking, range validation)
    3. Fail fast if settings are invalid
    4. Build GeminiModelConfig / RetryOptions from the validated values

INPUTS:
    - Environment variables (from .env file or system env)
    - Examples:
        GEMINI_API_KEY=...
        GEMINI_MODEL=gemini-2.0-flash
        AI_MAX_TOKENS=8000
        LLM_TIMEOUT=30
        FALLBACK_KEYWORDS={"meeting": ["meeting", "회의"]}

CONFIGURATION CATEGORIES:
    1. Gemini model + credentials
    2. Timeouts & retry
    3. Fallback keyword table
    4. Server
    5. Logging / environment

KEY FACTS:
    - The API key never leaves the server process; to_dict() redacts it
    - Missing key is allowed here (health checks, tests) but rejected when
      the model configuration is built
    - Environment variables override defaults

VALIDATION RULES:
    - gemini_temperature: 0-1
    - ai_max_tokens: > 0
    - llm_timeout: > 0, <= 120 seconds
    - retry_max_attempts: 1-10
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from notes_ai.config.constants import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_KEYWORD_TABLE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_NAME,
    DEFAULT_REMOTE_TIMEOUT_SECONDS,
    DEFAULT_RETRY_BASE_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_ATTEMPTS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_K,
    DEFAULT_TOP_P,
    REMOTE_RETRY_MAX_DELAY_SECONDS,
)
from notes_ai.config.model_config import GeminiModelConfig

# Load .env into os.environ for code paths that call os.getenv(...)
_CWD_ENV = Path(os.getcwd()) / ".env"
_REPO_ROOT_ENV = Path(__file__).resolve().parents[2] / ".env"
_ENV_PATH = _CWD_ENV if _CWD_ENV.exists() else _REPO_ROOT_ENV

load_dotenv(dotenv_path=_ENV_PATH, override=False)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables + .env.

    All fields have aliases to match .env variable names.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ========================================================================
    # GEMINI MODEL + CREDENTIALS
    # ========================================================================

    gemini_api_key: Optional[str] = Field(
        default=None,
        alias="GEMINI_API_KEY",
        description="Gemini API key",
    )

    gemini_model: str = Field(
        default=DEFAULT_MODEL_NAME,
        alias="GEMINI_MODEL",
        description="Gemini model id",
    )

    ai_max_tokens: int = Field(
        default=DEFAULT_MAX_TOKENS,
        gt=0,
        alias="AI_MAX_TOKENS",
        description="Input token budget (also default max output tokens)",
    )

    gemini_temperature: float = Field(
        default=DEFAULT_TEMPERATURE,
        ge=0.0,
        le=1.0,
        alias="GEMINI_TEMPERATURE",
        description="Default generation temperature",
    )

    gemini_top_p: float = Field(
        default=DEFAULT_TOP_P,
        ge=0.0,
        le=1.0,
        alias="GEMINI_TOP_P",
        description="Nucleus sampling (top_p)",
    )

    gemini_top_k: int = Field(
        default=DEFAULT_TOP_K,
        ge=1,
        alias="GEMINI_TOP_K",
        description="Top-k sampling",
    )

    # ========================================================================
    # TIMEOUTS & RETRY
    # ========================================================================

    llm_timeout: float = Field(
        default=DEFAULT_REMOTE_TIMEOUT_SECONDS,
        gt=0.0,
        le=120.0,
        alias="LLM_TIMEOUT",
        description="Total remote call budget across retries (seconds)",
    )

    retry_max_attempts: int = Field(
        default=DEFAULT_RETRY_MAX_ATTEMPTS,
        ge=1,
        le=10,
        alias="RETRY_MAX_ATTEMPTS",
        description="Maximum attempts per remote call",
    )

    retry_base_delay: float = Field(
        default=DEFAULT_RETRY_BASE_DELAY_SECONDS,
        ge=0.0,
        alias="RETRY_BASE_DELAY",
        description="First backoff delay (seconds)",
    )

    retry_max_delay: float = Field(
        default=REMOTE_RETRY_MAX_DELAY_SECONDS,
        ge=0.0,
        alias="RETRY_MAX_DELAY",
        description="Backoff delay cap (seconds)",
    )

    retry_backoff_multiplier: float = Field(
        default=DEFAULT_BACKOFF_MULTIPLIER,
        ge=1.0,
        alias="RETRY_BACKOFF_MULTIPLIER",
        description="Backoff multiplier",
    )

    # ========================================================================
    # FALLBACK
    # ========================================================================

    fallback_keywords: Dict[str, List[str]] = Field(
        default_factory=lambda: {tag: list(triggers) for tag, triggers in DEFAULT_KEYWORD_TABLE.items()},
        alias="FALLBACK_KEYWORDS",
        description="Fallback tag -> trigger substrings (JSON)",
    )

    # ========================================================================
    # SERVER
    # ========================================================================

    server_host: str = Field(
        default="127.0.0.1",
        alias="BACKEND_HOST",
        description="Server host",
    )

    server_port: int = Field(
        default=8001,
        ge=1024,
        le=65535,
        alias="BACKEND_PORT",
        description="Server port",
    )

    # ========================================================================
    # LOGGING / ENVIRONMENT
    # ========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )

    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Environment: development, staging, production, test",
    )

    debug: bool = Field(
        default=False,
        alias="DEBUG",
        description="Debug mode enabled",
    )

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator("gemini_model")
    @classmethod
    def _validate_model_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Model name must be non-empty string")
        return v.strip()

    @field_validator("gemini_api_key")
    @classmethod
    def _validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate API key is non-empty if provided."""
        if v is not None and not v.strip():
            raise ValueError("API key must be non-empty if provided")
        return v

    @field_validator("fallback_keywords")
    @classmethod
    def _validate_fallback_keywords(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        for tag, triggers in v.items():
            if not tag.strip():
                raise ValueError("Fallback keyword tags must be non-empty")
            if not any(t for t in triggers):
                raise ValueError(f"Fallback keyword '{tag}' needs at least one trigger")
        return v

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def get_model_config(self) -> GeminiModelConfig:
        """
        Build the immutable Gemini model configuration.

        Raises:
            ConfigurationError: If the API key is missing or a placeholder
        """
        return GeminiModelConfig.from_settings(self)

    def get_retry_options(self):
        """
        Build RetryOptions for remote calls.

        Returns:
            RetryOptions with the configured attempts and backoff
        """
        from notes_ai.core.retry import RetryOptions

        return RetryOptions(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
            backoff_multiplier=self.retry_backoff_multiplier,
        )

    def get_keyword_table(self) -> Dict[str, tuple]:
        return {tag: tuple(triggers) for tag, triggers in self.fallback_keywords.items()}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert settings to dictionary with secrets redacted.

        Returns:
            Settings dictionary with API keys masked
        """
        d = self.model_dump()
        if d.get("gemini_api_key"):
            d["gemini_api_key"] = "***REDACTED***"
        return d


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded once."""
    return Settings()


__all__ = ["Settings", "get_settings"]
