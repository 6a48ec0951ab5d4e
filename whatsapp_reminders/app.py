from __future__ import annotations

import json
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .logging_config import configure_logging, get_logger
from .routes import api_router
from .services.background_services import ReminderServices
from .utils.responses import error_response

logger = get_logger(__name__)


# Register global exception handlers for consistent error responses across the API
def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug("validation error", extra={"errors": exc.errors(), "path": str(request.url)})
        return error_response(
            "Invalid request",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=json.loads(json.dumps(exc.errors(), default=str)),
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        logger.debug(
            "http error",
            extra={"detail": exc.detail, "status": exc.status_code, "path": str(request.url)},
        )
        detail = exc.detail
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        return error_response(detail, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": str(request.url)})
        return error_response("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _build_services(settings: Settings) -> ReminderServices:
    from .services.supabase_client import get_supabase_client, verify_tables

    client = get_supabase_client()
    if client is not None:
        verify_tables(client)
    return ReminderServices(settings, client=client)


def create_app(services: Optional[ReminderServices] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API; ``services`` defaults to ones wired from settings at startup."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.resolved_docs_url,
        redoc_url=None,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    # Build services on first start and launch the reminder scheduler
    async def _start_services() -> None:
        logger.info("WhatsApp Reminder service starting up...")

        try:
            if app.state.services is None:
                app.state.services = _build_services(settings)
            await app.state.services.start_services()
            logger.info("WhatsApp Reminder startup completed successfully")

        except Exception as e:
            logger.exception(f"Error during startup: {e}")

    @app.on_event("shutdown")
    # Gracefully shutdown background services when the app stops
    async def _stop_services() -> None:
        logger.info("WhatsApp Reminder service shutting down...")

        try:
            if app.state.services is not None:
                await app.state.services.stop_services()
            logger.info("WhatsApp Reminder shutdown completed")

        except Exception as e:
            logger.error(f"Error during shutdown: {e}")

    return app


configure_logging()
app = create_app()


__all__ = ["app", "create_app"]
