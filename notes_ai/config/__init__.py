"""
Configuration package.

    Settings          - pydantic-settings model (environment + .env)
    get_settings()    - cached Settings instance
    GeminiModelConfig - immutable model configuration built at startup
"""

from notes_ai.config.model_config import GeminiModelConfig
from notes_ai.config.settings import Settings, get_settings

__all__ = ["GeminiModelConfig", "Settings", "get_settings"]
