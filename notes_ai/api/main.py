"""
================================================================================
FILE: notes_ai/api/main.py
================================================================================

PURPOSE:
    FastAPI application factory and initialization. Creates the app,
    registers routes, middleware and exception handlers, and builds the
    Gemini provider + orchestrator once at startup.

WORKFLOW:
    1. Load Settings (.env + environment) at startup (zero runtime I/O)
    2. Apply LOG_LEVEL
    3. Build the frozen GeminiModelConfig (fails fast on a missing or
       placeholder API key)
    4. Initialize GeminiProvider, then AIRequestOrchestrator
    5. Register routes from api/routes.py
    6. Shutdown hook drops the Gemini client

ERROR MAPPING:
    - RequestValidationError (pre-flight)  -> 400 {"error": message}
    - Malformed JSON body                  -> 400 {"error": message}
    - Other AIServiceException             -> 500 {"error", "error_code", "request_id"}
    - Anything else                        -> 500 {"error", "request_id"}

TESTING ENVIRONMENT:
    - Use TestClient(create_app()) without a context manager so startup
      does not run, and override dependencies.get_orchestrator
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError as BodyValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notes_ai.api import routes
from notes_ai.config.constants import API_TITLE
from notes_ai.config.settings import Settings, get_settings as load_settings
from notes_ai.core.exceptions import AIServiceException, RequestValidationError
from notes_ai.pipeline.orchestrator import AIRequestOrchestrator
from notes_ai.providers.llm.gemini import GeminiProvider
from notes_ai.utils import configure_logging, generate_request_id

logger = logging.getLogger(__name__)

_settings: Optional[Settings] = None
_provider: Optional[GeminiProvider] = None
_orchestrator: Optional[AIRequestOrchestrator] = None


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance ready for startup.
    """
    app = FastAPI(
        title=API_TITLE,
        description="Gemini-backed note summarization and tagging",
        version="1.0.0",
    )

    # =========================================================================
    # STARTUP HOOK
    # =========================================================================

    @app.on_event("startup")
    async def startup_event():
        """
        SEQUENCE:
        1. Load settings
        2. Configure logging
        3. Build model config (validates API key)
        4. Initialize Gemini provider
        5. Initialize orchestrator
        """
        global _settings, _provider, _orchestrator

        try:
            _settings = load_settings()
            configure_logging(_settings.log_level)

            logger.info("=" * 80)
            logger.info("APPLICATION STARTUP")
            logger.info("=" * 80)
            logger.info(
                "Settings loaded: "
                f"model={_settings.gemini_model} | "
                f"max_tokens={_settings.ai_max_tokens} | "
                f"timeout={_settings.llm_timeout}s | "
                f"retries={_settings.retry_max_attempts} | "
                f"environment={_settings.environment}"
            )

            model_config = _settings.get_model_config()

            _provider = GeminiProvider(model_config)
            await _provider.initialize()

            _orchestrator = AIRequestOrchestrator(
                provider=_provider,
                model_config=model_config,
                retry_options=_settings.get_retry_options(),
                keyword_table=_settings.get_keyword_table(),
            )

            logger.info("=" * 80)
            logger.info("APPLICATION STARTUP COMPLETE")
            logger.info("=" * 80)

        except Exception as e:
            logger.error(f"STARTUP FAILED: {str(e)}", exc_info=True)
            raise RuntimeError(f"Failed to initialize backend: {str(e)}") from e

    # =========================================================================
    # SHUTDOWN HOOK
    # =========================================================================

    @app.on_event("shutdown")
    async def shutdown_event():
        global _provider, _orchestrator

        try:
            logger.info("APPLICATION SHUTDOWN")
            if _provider:
                await _provider.shutdown()
            _provider = None
            _orchestrator = None
            logger.info("APPLICATION SHUTDOWN COMPLETE")

        except Exception as e:
            logger.error(f"SHUTDOWN ERROR: {str(e)}", exc_info=True)

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(request: Request, exc: RequestValidationError):
        """Pre-flight failures: the request never reached Gemini."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(
            f"Request rejected [request_id={request_id}]: {exc.message}",
            extra={"error_code": exc.error_code, "context": exc.context},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": exc.message},
        )

    @app.exception_handler(BodyValidationError)
    async def body_error_handler(request: Request, exc: BodyValidationError):
        """Malformed JSON / wrongly typed fields, reported in the same shape."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request body")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": f"{location}: {message}" if location else message},
        )

    @app.exception_handler(AIServiceException)
    async def service_exception_handler(request: Request, exc: AIServiceException):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            f"Service error [request_id={request_id}]: {exc.message}",
            extra={"error_code": exc.error_code},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": exc.message,
                "error_code": exc.error_code,
                "request_id": request_id,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            f"Unexpected error [request_id={request_id}]: {str(exc)}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal Server Error",
                "request_id": request_id,
            },
        )

    # =========================================================================
    # MIDDLEWARE
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """Add unique request ID for correlation tracking."""
        request.state.request_id = request.headers.get("X-Request-ID") or generate_request_id()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    # =========================================================================
    # ROUTES
    # =========================================================================

    app.include_router(routes.router)

    return app


def get_orchestrator() -> AIRequestOrchestrator:
    """Global orchestrator instance for dependency injection."""
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized. Check application startup logs.")
    return _orchestrator


app = create_app()
