"""
================================================================================
FILE: notes_ai/api/__init__.py
================================================================================

PURPOSE:
    HTTP layer: app factory (main), routes, dependency getters, ASGI export.
"""

# ================================================================================
# IMPORTS
# ================================================================================

from notes_ai.api.routes import router

# ================================================================================
# PUBLIC API EXPORTS
# ================================================================================

__all__ = ["router"]
