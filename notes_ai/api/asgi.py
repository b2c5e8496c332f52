"""
================================================================================
FILE: notes_ai/api/asgi.py
================================================================================

PURPOSE:
    ASGI entry point for production servers:

        uvicorn notes_ai.api.asgi:app --host 0.0.0.0 --port 8001

    Also runnable directly (`python -m notes_ai.api.asgi`), using
    BACKEND_HOST / BACKEND_PORT from settings.
"""

# ================================================================================
# IMPORTS
# ================================================================================

import uvicorn

from notes_ai.config.settings import get_settings

from .main import app

# ================================================================================
# ASGI APPLICATION EXPORT
# ================================================================================

# ASGI servers look for 'app' by default
__all__ = ["app", "main"]


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "notes_ai.api.asgi:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
