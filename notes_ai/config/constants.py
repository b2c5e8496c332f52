"""
================================================================================
FILE: notes_ai/config/constants.py
================================================================================

PURPOSE:
    Application-wide constants. Immutable values used throughout the AI
    layer so token budgets, timeouts and fallback limits are not scattered as
    magic numbers.

CONSTANT CATEGORIES:
    1. API Configuration
    2. Model defaults (Gemini)
    3. Timeouts & retry
    4. Request option limits
    5. Validation & fallback limits
"""

from typing import Dict, Tuple

# ================================================================================
# API CONFIGURATION
# ================================================================================

API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}/ai"
API_TITLE = "Notes AI Backend"

# ================================================================================
# MODEL DEFAULTS
# ================================================================================

DEFAULT_MODEL_NAME = "gemini-2.0-flash"
DEFAULT_MAX_TOKENS = 8000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9
DEFAULT_TOP_K = 40
PLACEHOLDER_API_KEY = "your_gemini_api_key_here"

# ================================================================================
# TIMEOUTS & RETRY (seconds)
# ================================================================================

DEFAULT_REMOTE_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY_SECONDS = 1.0
DEFAULT_RETRY_MAX_DELAY_SECONDS = 10.0
REMOTE_RETRY_MAX_DELAY_SECONDS = 5.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0

# ================================================================================
# REQUEST OPTION LIMITS
# ================================================================================

DEFAULT_SUMMARY_MAX_LENGTH = 200
MAX_SUMMARY_MAX_LENGTH = 5000
SUMMARY_OUTPUT_TOKEN_CAP = 500
DEFAULT_MAX_TAGS = 5
MIN_TAGS = 1
MAX_TAGS = 10
TAG_OUTPUT_TOKENS = 100
TAG_TEMPERATURE = 0.5
TAG_LANGUAGES = ("ko", "en", "both")
DEFAULT_TAG_LANGUAGE = "both"

# ================================================================================
# VALIDATION & FALLBACK
# ================================================================================

FALLBACK_FINISH_REASON = "FALLBACK"
FALLBACK_SUMMARY_MESSAGE = "Unable to generate a summary."
FALLBACK_DEFAULT_TAG = "note"
MAX_TAG_LENGTH = 50
LOG_CONTENT_PREVIEW_CHARS = 100

# tag -> literal substrings that force the tag into fallback output
DEFAULT_KEYWORD_TABLE: Dict[str, Tuple[str, ...]] = {
    "meeting": ("meeting", "회의", "미팅"),
    "project": ("project", "프로젝트", "작업"),
    "idea": ("idea", "아이디어", "생각"),
    "study": ("study", "학습", "공부"),
    "schedule": ("schedule", "일정", "계획"),
}
