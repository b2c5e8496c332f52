"""
================================================================================
FILE: notes_ai/core/__init__.py
================================================================================

PURPOSE:
    Resilience building blocks for calls to the generative-text service:

    - token_budget:       token estimation and truncation
    - error_classifier:   failure -> ErrorKind mapping + logging
    - timeout_guard:      deadlines for async operations
    - retry:              exponential backoff
    - response_validator: structural/quality checks on responses
    - fallback:           offline summaries and tags
    - exceptions:         exception hierarchy

KEY FACTS:
    - Import modules directly (notes_ai.core.retry, ...); this file stays
      import-free so config and providers can depend on core.exceptions
"""
